"""Load sample users and tasks. Safe to run repeatedly."""

import logging
import sys
from datetime import datetime, timezone

from sqlmodel import Session, select, func

from .core.config import settings
from .core.logging import setup_logging
from .db.session import Database
from .models.task import Task, TaskPriority
from .models.user import User

logger = logging.getLogger(__name__)

SAMPLE_USERS = [
    {
        "email": "john.doe@example.com",
        "name": "John Doe",
        "avatar": "https://images.unsplash.com/photo-1472099645785-5658abf4ff4e?w=150&h=150&fit=crop&crop=face",
    },
    {
        "email": "jane.smith@example.com",
        "name": "Jane Smith",
        "avatar": "https://images.unsplash.com/photo-1494790108755-2616b612b786?w=150&h=150&fit=crop&crop=face",
    },
]

# (owner email, fields)
SAMPLE_TASKS = [
    ("john.doe@example.com", {
        "title": "Review quarterly reports",
        "description": "Go through Q4 financial reports and prepare summary",
        "priority": TaskPriority.HIGH,
        "due_date": datetime(2024, 2, 15, tzinfo=timezone.utc),
    }),
    ("john.doe@example.com", {
        "title": "Update project documentation",
        "description": "Update the README and API documentation for the new features",
        "priority": TaskPriority.MEDIUM,
        "due_date": datetime(2024, 2, 10, tzinfo=timezone.utc),
    }),
    ("jane.smith@example.com", {
        "title": "Schedule team meeting",
        "description": "Organize weekly sync meeting with the development team",
        "priority": TaskPriority.LOW,
        "due_date": datetime(2024, 2, 8, tzinfo=timezone.utc),
    }),
    ("jane.smith@example.com", {
        "title": "Fix critical bug in production",
        "description": "Address the authentication issue reported by users",
        "priority": TaskPriority.URGENT,
        "due_date": datetime(2024, 2, 5, tzinfo=timezone.utc),
        "completed": True,
    }),
    ("john.doe@example.com", {
        "title": "Prepare presentation slides",
        "description": "Create slides for the upcoming client presentation",
        "priority": TaskPriority.HIGH,
        "due_date": datetime(2024, 2, 12, tzinfo=timezone.utc),
    }),
]


def seed(session: Session) -> None:
    users = {}
    for data in SAMPLE_USERS:
        user = session.exec(select(User).where(User.email == data["email"])).first()
        if user is None:
            user = User(**data)
            session.add(user)
        users[data["email"]] = user
    session.flush()

    for email, fields in SAMPLE_TASKS:
        owner = users[email]
        exists = session.exec(
            select(Task).where(Task.user_id == owner.id, Task.title == fields["title"])
        ).first()
        if exists is None:
            session.add(Task(user_id=owner.id, **fields))

    session.commit()


def main() -> int:
    setup_logging(level=settings.LOG_LEVEL, log_file=settings.LOG_FILE)
    logger.info("Starting database seed...")

    db = Database(settings.DATABASE_URL, echo=settings.SQL_ECHO)
    try:
        db.create_all()
        with Session(db.engine) as session:
            seed(session)
            user_count = session.exec(select(func.count(User.id))).one()
            task_count = session.exec(select(func.count(Task.id))).one()
    except Exception:
        logger.exception("Error seeding database")
        return 1
    finally:
        db.dispose()

    logger.info("Database seeded successfully: %d users, %d tasks", user_count, task_count)
    return 0


if __name__ == "__main__":
    sys.exit(main())
