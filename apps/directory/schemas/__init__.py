# apps/directory/schemas/__init__.py
from . import user

__all__ = ["user"]
