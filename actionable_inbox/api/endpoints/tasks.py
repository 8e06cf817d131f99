from fastapi import APIRouter, Depends, Query, Response, status
from typing import List, Optional
import uuid

from ...schemas.task import TaskCreate, TaskRead, TaskUpdate
from ...services.tasks import TaskService, parse_completed, parse_user_id
from ..deps import get_task_service

router = APIRouter()


@router.get("", response_model=List[TaskRead])
def list_tasks(
    user_id: Optional[str] = Query(None, alias="userId"),
    completed: Optional[str] = None,
    priority: Optional[str] = None,
    service: TaskService = Depends(get_task_service)
):
    # Empty query values ("?userId=") mean no filter, same as leaving them out.
    return service.list_tasks(
        user_id=parse_user_id(user_id),
        completed=parse_completed(completed),
        priority=priority,
    )


@router.post("", response_model=TaskRead, status_code=status.HTTP_201_CREATED)
def create_task(
    task_create: TaskCreate,
    service: TaskService = Depends(get_task_service)
):
    return service.create_task(
        title=task_create.title,
        user_id=task_create.user_id,
        description=task_create.description,
        priority=task_create.priority,
        due_date=task_create.due_date,
    )


@router.get("/{task_id}", response_model=TaskRead)
def get_task(
    task_id: uuid.UUID,
    service: TaskService = Depends(get_task_service)
):
    return service.get_task(task_id)


@router.put("/{task_id}", response_model=TaskRead)
def update_task(
    task_id: uuid.UUID,
    task_update: TaskUpdate,
    service: TaskService = Depends(get_task_service)
):
    # Only the keys the client actually sent; an explicit null stays in.
    changes = task_update.model_dump(exclude_unset=True)
    return service.update_task(task_id, changes)


@router.delete("/{task_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_task(
    task_id: uuid.UUID,
    service: TaskService = Depends(get_task_service)
):
    service.delete_task(task_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
