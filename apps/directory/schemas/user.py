# apps/directory/schemas/user.py
import logging
import uuid
from datetime import datetime

from pydantic import BaseModel, ConfigDict, EmailStr, Field

logger = logging.getLogger("app.schemas.user")


class UserBase(BaseModel):
    username: str = Field(min_length=1, max_length=150, description="Имя пользователя (уникальное).")
    email: EmailStr = Field(description="Email адрес пользователя (уникальный).")


class UserCreate(UserBase):
    password: str = Field(min_length=1, description="Пароль пользователя.")


class UserRead(UserBase):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    created_at: datetime


class CurrentUserRead(BaseModel):
    """Контекст текущего запроса, как его установил шлюз аутентификации."""

    user_id: str
    username: str
    token_id: str
