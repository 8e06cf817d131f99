from typing import List

from sqlmodel import Session, select, func

from ..models.task import Task
from ..models.user import User
from ..schemas.user import UserRead


class UserService:
    def __init__(self, session: Session):
        self.session = session

    def list_users(self) -> List[UserRead]:
        """Every user with the number of tasks they own, oldest account first."""
        task_count = func.count(Task.id).label("task_count")
        rows = self.session.exec(
            select(User, task_count)
            .outerjoin(Task, Task.user_id == User.id)
            .group_by(User.id)
            .order_by(User.created_at)
        ).all()

        return [
            UserRead(
                id=user.id,
                email=user.email,
                name=user.name,
                avatar=user.avatar,
                created_at=user.created_at,
                task_count=count,
            )
            for user, count in rows
        ]
