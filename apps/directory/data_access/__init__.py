# apps/directory/data_access/__init__.py
from .user_manager import (
    BaseUserManager,
    LocalUserManager,
    InMemoryUserManager,
    get_user_manager,
)

__all__ = [
    "BaseUserManager",
    "LocalUserManager",
    "InMemoryUserManager",
    "get_user_manager",
]
