# auth_sdk/data_access/__init__.py
from .identity import BaseIdentityLookup

__all__ = [
    "BaseIdentityLookup",
]
