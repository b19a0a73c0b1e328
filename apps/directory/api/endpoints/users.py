# apps/directory/api/endpoints/users.py
import logging
from typing import List

from fastapi import APIRouter, Depends, status

from auth_sdk.dependencies.auth import get_auth_context
from auth_sdk.exceptions import AuthSDKError
from auth_sdk.schemas.auth_user import AuthContext

from ...data_access.user_manager import BaseUserManager, get_user_manager
from ...schemas.user import CurrentUserRead, UserCreate, UserRead

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/users", tags=["Users"])


class UserNotFoundError(AuthSDKError):
    status_code = status.HTTP_404_NOT_FOUND
    default_message = "User not found"


@router.post("", response_model=UserRead, status_code=status.HTTP_201_CREATED)
async def create_user(
    data: UserCreate,
    users: BaseUserManager = Depends(get_user_manager),
):
    """Регистрирует нового пользователя. Публичный маршрут."""
    logger.info(f"Creating user '{data.username}'.")
    return await users.create_user(data)


@router.get("", response_model=List[UserRead])
async def list_users(
    auth: AuthContext = Depends(get_auth_context),
    users: BaseUserManager = Depends(get_user_manager),
):
    logger.info(f"Fetching all users (requested by {auth.subject_id}).")
    return await users.list_users()


@router.get("/me", response_model=CurrentUserRead)
async def read_current_user(auth: AuthContext = Depends(get_auth_context)):
    """Возвращает данные текущего пользователя из токена, без обращения к хранилищу."""
    return CurrentUserRead(
        user_id=auth.subject_id,
        username=auth.username,
        token_id=auth.token_id,
    )


@router.get("/{user_id}", response_model=UserRead)
async def read_user(
    user_id: str,
    auth: AuthContext = Depends(get_auth_context),
    users: BaseUserManager = Depends(get_user_manager),
):
    logger.info(f"Fetching user by ID: {user_id}")
    user = await users.get_user(user_id)
    if user is None:
        logger.warning(f"User {user_id} not found.")
        raise UserNotFoundError()
    return user
