# apps/directory/main.py
import logging
import os
from typing import Optional

from fastapi import FastAPI

from auth_sdk.app_setup import create_app_with_sdk_setup
from auth_sdk.logging_config import setup_sdk_logging

from .config import Settings, settings
from . import models  # noqa: F401  регистрирует таблицы в SQLModel.metadata
from .api.endpoints import auth, users
from .data_access.user_manager import BaseUserManager, InMemoryUserManager

logging.basicConfig(level=settings.LOGGING_LEVEL.upper())
setup_sdk_logging(level=settings.LOGGING_LEVEL, propagate=False)
logger = logging.getLogger("app.main")


def create_app(
    app_settings: Settings,
    user_manager: Optional[BaseUserManager] = None,
    **factory_options,
) -> FastAPI:
    """
    Собирает приложение каталога.

    :param user_manager: Общий менеджер пользователей. Если не задан и USER_STORE=memory,
                         создается пустой InMemoryUserManager, а БД не инициализируется.
    """
    if user_manager is None and app_settings.USER_STORE == "memory":
        user_manager = InMemoryUserManager()

    factory_options.setdefault("enable_database", user_manager is None)

    app = create_app_with_sdk_setup(
        settings=app_settings,
        api_routers=[auth.router, users.router],
        auth_allowed_paths=[f"POST {app_settings.API_V1_STR}/users"],
        title=app_settings.PROJECT_NAME,
        description="Token-authenticated user directory service.",
        version="0.1.0",
        include_health_check=True,
        **factory_options,
    )
    if user_manager is not None:
        app.state.user_manager = user_manager
        logger.info(f"Using shared user manager: {type(user_manager).__name__}")
    return app


logger.info("--- Starting Directory Service Application Setup ---")
app = create_app(settings)
logger.info("--- Directory Service Application Setup Complete ---")

if __name__ == "__main__":
    import uvicorn

    host = os.getenv("HOST", "0.0.0.0")
    port = int(os.getenv("PORT", "8000"))
    log_level = settings.LOGGING_LEVEL.lower()

    logger.info(f"Starting Uvicorn server on {host}:{port}...")
    uvicorn.run(
        "apps.directory.main:app",
        host=host,
        port=port,
        log_level=log_level,
    )
