# auth_sdk/schemas/__init__.py

from .token import TokenClaims, TokenPair, LoginRequest, RefreshRequest
from .identity import Identity, StoredIdentity
from .auth_user import AuthContext

__all__ = [
    "TokenClaims",
    "TokenPair",
    "LoginRequest",
    "RefreshRequest",
    "Identity",
    "StoredIdentity",
    "AuthContext",
]
