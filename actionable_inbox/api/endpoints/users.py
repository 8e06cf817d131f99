from fastapi import APIRouter, Depends
from typing import List

from ...schemas.user import UserRead
from ...services.users import UserService
from ..deps import get_user_service

router = APIRouter()


@router.get("", response_model=List[UserRead])
def list_users(service: UserService = Depends(get_user_service)):
    return service.list_users()
