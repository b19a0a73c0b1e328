# apps/directory/models/user.py
import logging
import uuid
from datetime import datetime, timezone

from sqlalchemy import Column, DateTime, Text
from sqlmodel import Field, SQLModel

logger = logging.getLogger("app.models.user")


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class User(SQLModel, table=True):
    """
    Модель пользователя каталога.
    """

    __tablename__ = "users"

    id: uuid.UUID = Field(
        default_factory=uuid.uuid4,
        primary_key=True,
        index=True,
        nullable=False,
        description="Уникальный идентификатор пользователя.",
    )
    username: str = Field(
        index=True,
        unique=True,
        max_length=150,
        description="Имя пользователя (уникальное).",
    )
    email: str = Field(
        index=True,
        unique=True,
        max_length=255,
        description="Email адрес пользователя (уникальный).",
    )
    # Храним хеш пароля, а не сам пароль
    hashed_password: str = Field(
        sa_column=Column(Text, nullable=False),
        description="Хешированный пароль пользователя.",
    )
    created_at: datetime = Field(
        default_factory=_utcnow,
        sa_column=Column(DateTime(timezone=True), nullable=False),
        description="Время создания записи.",
    )

    def __repr__(self) -> str:
        return f"<User id={self.id} username='{self.username}'>"
