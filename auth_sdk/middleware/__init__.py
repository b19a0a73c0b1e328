from .auth import AuthMiddleware, default_allowed_paths, extract_bearer_token
from .request_logging import RequestLoggingMiddleware

__all__ = [
    "AuthMiddleware",
    "RequestLoggingMiddleware",
    "default_allowed_paths",
    "extract_bearer_token",
]
