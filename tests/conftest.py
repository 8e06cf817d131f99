# tests/conftest.py

from __future__ import annotations

import uuid
from datetime import datetime
from typing import Iterator

import pytest
from fastapi.testclient import TestClient
from sqlmodel import Session

from actionable_inbox.core.config import Settings
from actionable_inbox.db.session import Database
from actionable_inbox.main import create_app
from actionable_inbox.models.task import Task, TaskPriority
from actionable_inbox.models.user import User


@pytest.fixture()
def settings() -> Settings:
    """
    Settings pointing at a private in-memory database.

    The rate limit is raised well out of reach so only the tests that
    configure their own limit ever see a 429.
    """
    return Settings(
        DATABASE_URL="sqlite://",
        CORS_ORIGIN="http://localhost:3000",
        RATE_LIMIT_MAX=10_000,
        LOG_FILE=None,
    )


@pytest.fixture()
def client(settings: Settings) -> Iterator[TestClient]:
    # Entering the client runs the lifespan, which builds and later disposes the database.
    with TestClient(create_app(settings)) as client:
        yield client


@pytest.fixture()
def db(client: TestClient) -> Database:
    return client.app.state.db


@pytest.fixture()
def database() -> Iterator[Database]:
    """Standalone database for service-level tests, no HTTP involved."""
    database = Database("sqlite://")
    database.create_all()
    yield database
    database.dispose()


@pytest.fixture()
def session(database: Database) -> Iterator[Session]:
    with Session(database.engine) as session:
        yield session


def add_user(db: Database, email: str, name: str | None = None) -> uuid.UUID:
    with Session(db.engine) as session:
        user = User(email=email, name=name or email.split("@")[0])
        session.add(user)
        session.commit()
        return user.id


def add_task(
    db: Database,
    user_id: uuid.UUID,
    title: str,
    *,
    completed: bool = False,
    priority: TaskPriority = TaskPriority.MEDIUM,
    due_date: datetime | None = None,
    created_at: datetime | None = None,
    description: str | None = None,
) -> uuid.UUID:
    """Insert a task directly, bypassing the API, and return its id."""
    fields = {}
    if created_at is not None:
        fields["created_at"] = created_at
    with Session(db.engine) as session:
        task = Task(
            user_id=user_id,
            title=title,
            description=description,
            completed=completed,
            priority=priority,
            due_date=due_date,
            **fields,
        )
        session.add(task)
        session.commit()
        return task.id


@pytest.fixture()
def users(db: Database) -> tuple[uuid.UUID, uuid.UUID]:
    return (
        add_user(db, "john.doe@example.com", "John Doe"),
        add_user(db, "jane.smith@example.com", "Jane Smith"),
    )
