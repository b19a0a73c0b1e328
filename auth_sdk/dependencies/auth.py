# auth_sdk/dependencies/auth.py
import logging
from typing import Optional

from fastapi import Depends, Request

from auth_sdk.exceptions import ConfigurationError, MissingCredentialError
from auth_sdk.schemas.auth_user import AuthContext
from auth_sdk.services.token_service import TokenService

logger = logging.getLogger("auth_sdk.dependencies.auth")


def get_optional_auth_context(request: Request) -> Optional[AuthContext]:
    """
    Возвращает AuthContext из request.state.auth, если его установила AuthMiddleware,
    иначе None. Не вызывает ошибку, если пользователя нет.
    """
    auth = getattr(request.state, "auth", None)
    if auth is not None and not isinstance(auth, AuthContext):
        logger.error(f"Invalid object type found in request.state.auth: {type(auth)}. Expected AuthContext or None.")
        return None
    return auth


def get_auth_context(
    auth: Optional[AuthContext] = Depends(get_optional_auth_context),
) -> AuthContext:
    """
    Возвращает AuthContext. Вызывает ошибку 401, если запрос не прошел через AuthMiddleware
    (например, маршрут ошибочно попал в список разрешенных путей).
    """
    if auth is None:
        logger.debug("get_auth_context dependency: No auth context found in request.state.")
        raise MissingCredentialError()
    return auth


def get_token_service(request: Request) -> TokenService:
    """Возвращает TokenService, созданный фабрикой приложения."""
    token_service = getattr(request.app.state, "token_service", None)
    if token_service is None:
        logger.critical("TokenService is not configured on app.state.")
        raise ConfigurationError("TokenService is not configured.")
    return token_service
