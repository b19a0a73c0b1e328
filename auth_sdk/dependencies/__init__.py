from .auth import get_auth_context, get_optional_auth_context, get_token_service

__all__ = ["get_auth_context", "get_optional_auth_context", "get_token_service"]
