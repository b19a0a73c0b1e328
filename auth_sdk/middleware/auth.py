# auth_sdk/middleware/auth.py
import logging
from fnmatch import fnmatch
from typing import Any, Iterable, List, Optional, Set, Tuple

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import JSONResponse, Response

from auth_sdk.exceptions import (
    AuthSDKError,
    ExpiredTokenError,
    InvalidTokenError,
    MalformedCredentialError,
    MissingCredentialError,
    TokenError,
)
from auth_sdk.schemas.auth_user import AuthContext
from auth_sdk.services.token_service import TokenService

logger = logging.getLogger("auth_sdk.middleware.auth")

AUTHORIZATION_HEADER = "Authorization"
BEARER_SCHEME = "Bearer"

HTTP_METHODS = {"GET", "POST", "PUT", "PATCH", "DELETE", "HEAD", "OPTIONS"}


def extract_bearer_token(authorization: Optional[str]) -> str:
    """
    Извлекает токен из заголовка строго вида 'Bearer <token>'.

    :raises MissingCredentialError: Заголовок отсутствует или пуст.
    :raises MalformedCredentialError: Заголовок не состоит ровно из двух частей 'Bearer' и токена.
    """
    if not authorization:
        raise MissingCredentialError()
    parts = authorization.split(" ")
    if len(parts) != 2 or parts[0] != BEARER_SCHEME:
        raise MalformedCredentialError()
    return parts[1]


def _unauthorized(error: AuthSDKError) -> JSONResponse:
    return JSONResponse(
        status_code=error.status_code,
        content={"error": error.message},
        headers={"WWW-Authenticate": BEARER_SCHEME},
    )


class AuthMiddleware(BaseHTTPMiddleware):
    """
    Шлюз аутентификации: для всех путей, кроме разрешенных, требует валидный
    bearer токен. При отказе сразу возвращает 401, дальнейшие обработчики не выполняются.
    При успехе кладет AuthContext в request.state.auth.

    Разрешенные пути задаются строками:
      * '/api/auth/login'          - точный путь;
      * '/static/'                 - префикс (оканчивается на '/');
      * '/api/docs*'               - шаблон fnmatch;
      * 'POST /api/users'          - точный путь только для указанного метода.
    """

    def __init__(
        self,
        app: Any,
        token_service: TokenService,
        allowed_paths: Optional[List[str]] = None,
    ):
        super().__init__(app)
        self.token_service = token_service

        self.allowed_exact_paths: Set[str] = set()
        self.allowed_prefixes: Set[str] = set()
        self.allowed_patterns: Set[str] = set()
        self.allowed_method_paths: Set[Tuple[str, str]] = set()

        for path in set(allowed_paths or []):
            method, _, rest = path.partition(" ")
            if rest and method.upper() in HTTP_METHODS:
                self.allowed_method_paths.add((method.upper(), rest.strip()))
            elif "*" in path or "?" in path or "[" in path:
                self.allowed_patterns.add(path)
            elif path.endswith("/"):
                self.allowed_prefixes.add(path)
            else:
                self.allowed_exact_paths.add(path)

        logger.debug("AuthMiddleware initialized.")
        logger.debug(f"  Allowed exact paths: {sorted(self.allowed_exact_paths)}")
        logger.debug(f"  Allowed prefixes: {sorted(self.allowed_prefixes)}")
        logger.debug(f"  Allowed patterns: {sorted(self.allowed_patterns)}")
        logger.debug(f"  Allowed method paths: {sorted(self.allowed_method_paths)}")

    def is_allowed(self, method: str, path: str) -> bool:
        if path in self.allowed_exact_paths:
            return True
        if (method.upper(), path) in self.allowed_method_paths:
            return True
        if any(path.startswith(prefix) for prefix in self.allowed_prefixes):
            return True
        return any(fnmatch(path, pattern) for pattern in self.allowed_patterns)

    def authenticate(self, authorization: Optional[str]) -> AuthContext:
        """
        Проверяет заголовок Authorization и возвращает контекст запроса.
        Ошибки TokenService сводятся к двум видам: истекший и любой другой невалидный токен.
        """
        token = extract_bearer_token(authorization)
        try:
            claims = self.token_service.validate(token)
        except ExpiredTokenError:
            raise
        except TokenError as e:
            raise InvalidTokenError() from e
        return AuthContext.from_claims(claims)

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        request.state.auth = None
        current_path = request.url.path

        if self.is_allowed(request.method, current_path):
            logger.debug(f"AuthMiddleware: Skipping auth for allowed path: {request.method} {current_path}")
            return await call_next(request)

        try:
            auth_context = self.authenticate(request.headers.get(AUTHORIZATION_HEADER))
        except AuthSDKError as e:
            logger.info(
                f"AuthMiddleware: Rejected {request.method} {current_path}: {type(e).__name__}"
            )
            return _unauthorized(e)

        request.state.auth = auth_context
        logger.debug(
            f"AuthMiddleware: User {auth_context.subject_id} ({auth_context.username}) authenticated for path: {current_path}"
        )
        return await call_next(request)


def default_allowed_paths(api_prefix: str, extra: Optional[Iterable[str]] = None) -> List[str]:
    """Стандартный набор публичных путей сервиса."""
    paths = {
        f"{api_prefix}/docs",
        f"{api_prefix}/docs/oauth2-redirect",
        f"{api_prefix}/openapi.json",
        f"{api_prefix}/redoc",
        f"{api_prefix}/auth/login",
        f"{api_prefix}/auth/refresh",
        f"{api_prefix}/healthcheck",
    }
    if extra:
        paths.update(extra)
    return sorted(paths)
