# apps/directory/config.py
import os
import logging
from typing import Literal

from pydantic import Field
from pydantic_settings import SettingsConfigDict

from auth_sdk.config import BaseAppSettings

logger = logging.getLogger("app.config")


class Settings(BaseAppSettings):
    PROJECT_NAME: str = "AuthDirectory"

    DATABASE_URL: str = Field(
        "sqlite+aiosqlite:///./authdir.db",
        description="URL для подключения к базе данных (sqlite+aiosqlite или postgresql+asyncpg).",
    )
    USER_STORE: Literal["sql", "memory"] = Field(
        "sql",
        description="Хранилище пользователей: 'sql' (SQLModel) или 'memory' (список в памяти, для тестов и демо).",
    )
    REFRESH_VERIFY_SUBJECT: bool = Field(
        True,
        description="При refresh проверять, что пользователь из токена все еще существует.",
    )

    ENV: str = Field(
        "dev",
        description="Текущее окружение (например, 'dev', 'test', 'prod'). Влияет на загрузку .env файла.",
    )

    model_config = SettingsConfigDict(
        env_file=".env" if os.getenv("ENV") != "test" else ".env.test",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",
    )


try:
    settings = Settings()
    logger.info(f"Settings loaded successfully for ENV='{settings.ENV}'.")
    logger.info(f"Project Name: {settings.PROJECT_NAME}, user store: {settings.USER_STORE}")
except Exception as e:
    raise RuntimeError(f"Could not load application settings: {e}") from e
