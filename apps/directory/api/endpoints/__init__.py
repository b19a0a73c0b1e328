# apps/directory/api/endpoints/__init__.py
from . import auth, users

__all__ = ["auth", "users"]
