from typing import Optional
from datetime import datetime
import uuid

from .base import ApiModel
from .user import UserSummary
from ..models.task import TaskPriority


class TaskCreate(ApiModel):
    # Required fields are checked by the service so a missing one
    # surfaces as a plain 400 rather than a schema error.
    title: Optional[str] = None
    description: Optional[str] = None
    priority: Optional[str] = None
    due_date: Optional[str] = None
    user_id: Optional[uuid.UUID] = None


class TaskUpdate(ApiModel):
    """Sparse update; only the keys the client sent are applied."""

    title: Optional[str] = None
    description: Optional[str] = None
    completed: Optional[bool] = None
    priority: Optional[str] = None
    due_date: Optional[str] = None


class TaskRead(ApiModel):
    id: uuid.UUID
    title: str
    description: Optional[str] = None
    completed: bool
    priority: TaskPriority
    due_date: Optional[datetime] = None
    created_at: datetime
    updated_at: datetime
    user_id: uuid.UUID
    user: UserSummary
