from typing import Optional
from datetime import datetime
import uuid

from .base import ApiModel


class UserSummary(ApiModel):
    id: uuid.UUID
    name: Optional[str] = None
    email: str


class UserRead(ApiModel):
    id: uuid.UUID
    email: str
    name: Optional[str] = None
    avatar: Optional[str] = None
    created_at: datetime
    task_count: int = 0
