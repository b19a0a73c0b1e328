# auth_sdk/db/__init__.py
from .session import (
    init_db,
    close_db,
    managed_session,
    create_db_and_tables,
)

__all__ = [
    "init_db",
    "close_db",
    "managed_session",
    "create_db_and_tables",
]
