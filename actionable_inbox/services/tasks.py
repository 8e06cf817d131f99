"""
Task query/update rules.

Listing returns tasks in "actionable" order: unfinished before finished,
then by priority rank, then by due date (undated last), newest first as
the final tie-break. Updates are sparse: only the keys present in the
change mapping are touched.
"""

import logging
import re
import uuid
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from sqlalchemy import case
from sqlalchemy.orm import selectinload
from sqlmodel import Session, select

from ..core.errors import NotFoundError, ValidationError
from ..models.base import utcnow
from ..models.task import PRIORITY_RANK, Task, TaskPriority
from ..models.user import User
from ..schemas.task import TaskRead

logger = logging.getLogger(__name__)

UPDATABLE_FIELDS = ("title", "description", "completed", "priority", "due_date")


# Any fraction length parses; fromisoformat before 3.11 only takes 3 or 6 digits.
_FRACTION = re.compile(r"(\d{2}:\d{2}:\d{2})\.(\d+)")

_TRUE_VALUES = {"true", "1", "yes", "on"}
_FALSE_VALUES = {"false", "0", "no", "off"}


def parse_priority(value: Any) -> TaskPriority:
    try:
        return TaskPriority(value)
    except ValueError:
        allowed = ", ".join(p.value for p in TaskPriority)
        raise ValidationError(f"Invalid priority '{value}'. Expected one of: {allowed}")


def parse_due_date(value: Optional[str]) -> Optional[datetime]:
    """
    Falsy means "no due date"; anything else must be an ISO 8601 date or
    datetime. Times without an offset are taken as UTC. Returns aware UTC.
    """
    if not value:
        return None
    text = value.strip()
    if text.endswith(("Z", "z")):
        text = text[:-1] + "+00:00"
    text = _FRACTION.sub(lambda m: f"{m.group(1)}.{m.group(2)[:6].ljust(6, '0')}", text, count=1)
    try:
        parsed = datetime.fromisoformat(text)
    except ValueError:
        raise ValidationError(f"Invalid dueDate '{value}'")
    if parsed.tzinfo is None:
        return parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)


def parse_user_id(value: Optional[str]) -> Optional[uuid.UUID]:
    """Query-string user filter; empty means no filter."""
    if not value:
        return None
    try:
        return uuid.UUID(value)
    except ValueError:
        raise ValidationError(f"Invalid userId '{value}'")


def parse_completed(value: Optional[str]) -> Optional[bool]:
    """Query-string completion filter; empty means no filter."""
    if not value:
        return None
    flag = value.strip().lower()
    if flag in _TRUE_VALUES:
        return True
    if flag in _FALSE_VALUES:
        return False
    raise ValidationError(f"Invalid completed '{value}'. Expected true or false")


class TaskService:
    def __init__(self, session: Session):
        self.session = session

    def list_tasks(
        self,
        user_id: Optional[uuid.UUID] = None,
        completed: Optional[bool] = None,
        priority: Optional[str] = None,
    ) -> List[TaskRead]:
        query = select(Task).options(selectinload(Task.user))
        if user_id is not None:
            query = query.where(Task.user_id == user_id)
        if completed is not None:
            query = query.where(Task.completed == completed)
        if priority:
            query = query.where(Task.priority == parse_priority(priority))

        query = query.order_by(
            Task.completed.asc(),
            case(PRIORITY_RANK, value=Task.priority).desc(),
            Task.due_date.asc().nulls_last(),
            Task.created_at.desc(),
        )
        tasks = self.session.exec(query).all()
        return [TaskRead.model_validate(t) for t in tasks]

    def get_task(self, task_id: uuid.UUID) -> TaskRead:
        return TaskRead.model_validate(self._get(task_id))

    def create_task(
        self,
        title: Optional[str],
        user_id: Optional[uuid.UUID],
        description: Optional[str] = None,
        priority: Optional[str] = None,
        due_date: Optional[str] = None,
    ) -> TaskRead:
        if not title or not user_id:
            raise ValidationError("Title and userId are required")

        resolved_priority = parse_priority(priority) if priority else TaskPriority.MEDIUM
        parsed_due_date = parse_due_date(due_date)
        if self.session.get(User, user_id) is None:
            raise ValidationError(f"User {user_id} does not exist")

        db_task = Task(
            user_id=user_id,
            title=title,
            description=description,
            priority=resolved_priority,
            due_date=parsed_due_date,
        )
        self.session.add(db_task)
        self.session.commit()
        self.session.refresh(db_task)
        logger.debug("Created task %s for user %s", db_task.id, user_id)
        return TaskRead.model_validate(db_task)

    def update_task(self, task_id: uuid.UUID, changes: Dict[str, Any]) -> TaskRead:
        """
        Apply `changes` to the task. Keys that are absent stay untouched;
        a key present with None (or "" for due_date) is an explicit value.
        Every change is validated before any of them is applied.
        """
        task = self._get(task_id)

        values: Dict[str, Any] = {}
        for key, value in changes.items():
            if key not in UPDATABLE_FIELDS:
                continue
            if key == "title":
                if not value:
                    raise ValidationError("Title cannot be empty")
                values[key] = value
            elif key == "completed":
                if value is None:
                    raise ValidationError("Completed must be true or false")
                values[key] = bool(value)
            elif key == "priority":
                values[key] = parse_priority(value)
            elif key == "due_date":
                values[key] = parse_due_date(value)
            else:
                values[key] = value

        for key, value in values.items():
            setattr(task, key, value)
        task.updated_at = utcnow()

        self.session.add(task)
        self.session.commit()
        self.session.refresh(task)
        logger.debug("Updated task %s fields=%s", task_id, sorted(values))
        return TaskRead.model_validate(task)

    def delete_task(self, task_id: uuid.UUID) -> None:
        task = self._get(task_id)
        self.session.delete(task)
        self.session.commit()
        logger.debug("Deleted task %s", task_id)

    def _get(self, task_id: uuid.UUID) -> Task:
        task = self.session.get(Task, task_id)
        if not task:
            raise NotFoundError("Task not found")
        return task
