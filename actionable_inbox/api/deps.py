from typing import Iterator

from fastapi import Depends, Request
from sqlmodel import Session

from ..db.session import Database
from ..services.tasks import TaskService
from ..services.users import UserService


def get_database(request: Request) -> Database:
    return request.app.state.db


def get_session(db: Database = Depends(get_database)) -> Iterator[Session]:
    yield from db.session()


def get_task_service(session: Session = Depends(get_session)) -> TaskService:
    return TaskService(session)


def get_user_service(session: Session = Depends(get_session)) -> UserService:
    return UserService(session)
