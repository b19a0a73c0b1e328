# auth_sdk/exceptions.py
from starlette.status import (
    HTTP_401_UNAUTHORIZED,
    HTTP_409_CONFLICT,
    HTTP_500_INTERNAL_SERVER_ERROR,
)


class AuthSDKError(Exception):
    """
    Базовый класс для всех пользовательских исключений, возникающих в auth_sdk.
    Каждое исключение несет сообщение для клиента и HTTP статус-код,
    которые использует обработчик ошибок приложения.
    """

    status_code: int = HTTP_500_INTERNAL_SERVER_ERROR
    default_message: str = "Internal server error"

    def __init__(self, message: str | None = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class ConfigurationError(AuthSDKError):
    """
    Исключение, возникающее при ошибках конфигурации SDK.
    Например, если не задан секретный ключ или время жизни токена неположительное.
    """

    def __str__(self) -> str:
        return f"Configuration Error: {self.message}"


class SigningError(AuthSDKError):
    """
    Ошибка подписи токена (не задан секрет, сбой кодирования).
    Детали пишутся в лог, клиенту уходит только общее сообщение.
    """

    default_message = "Failed to generate tokens"


# --- Ошибки проверки токена ---


class TokenError(AuthSDKError):
    """Базовая ошибка проверки токена."""

    status_code = HTTP_401_UNAUTHORIZED
    default_message = "Invalid token"


class InvalidTokenError(TokenError):
    """
    Токен поврежден: неверный формат, подпись не совпадает,
    недопустимый алгоритм или payload не соответствует ожидаемой структуре.
    """

    default_message = "Invalid token"


class ExpiredTokenError(TokenError):
    """Подпись и структура корректны, но срок действия токена истек."""

    default_message = "Token has expired"


# --- Ошибки заголовка Authorization (до обращения к TokenService) ---


class CredentialError(AuthSDKError):
    status_code = HTTP_401_UNAUTHORIZED


class MissingCredentialError(CredentialError):
    default_message = "Authorization header is required"


class MalformedCredentialError(CredentialError):
    default_message = "Authorization header format must be Bearer <token>"


# --- Ошибки сценариев login / refresh ---


class InvalidCredentialsError(AuthSDKError):
    """
    Неизвестный username или неверный пароль.
    Оба случая намеренно неразличимы для клиента.
    """

    status_code = HTTP_401_UNAUTHORIZED
    default_message = "Invalid credentials"


class SubjectNotFoundError(AuthSDKError):
    """Пользователь из валидного refresh токена больше не существует."""

    status_code = HTTP_401_UNAUTHORIZED
    default_message = "User associated with token not found"


class DuplicateIdentityError(AuthSDKError):
    status_code = HTTP_409_CONFLICT
    default_message = "Username or email already exists"


class UpstreamFailureError(AuthSDKError):
    """
    Ошибка внешнего хранилища пользователей (БД и т.п.).
    Исходное исключение сохраняется в __cause__ и логируется, но клиенту не раскрывается.
    """

    default_message = "Internal server error"
