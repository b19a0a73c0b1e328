# auth_sdk/security.py

import logging

from jose import jwt, JWTError, ExpiredSignatureError
from passlib.context import CryptContext
from pydantic import ValidationError

from auth_sdk.exceptions import (
    ConfigurationError,
    ExpiredTokenError,
    InvalidTokenError,
    SigningError,
)
from auth_sdk.schemas.token import TokenClaims

logger = logging.getLogger(__name__)

# --- Password Hashing ---
pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """
    Проверяет, соответствует ли обычный пароль хешированному.

    :param plain_password: Пароль в открытом виде.
    :param hashed_password: Хешированный пароль для сравнения.
    :return: True, если пароли совпадают, иначе False.
    """
    if not plain_password or not hashed_password:
        return False
    try:
        return pwd_context.verify(plain_password, hashed_password)
    except ValueError as e:
        # Хеш имеет неверный формат
        logger.error(f"Error verifying password (invalid hash format?): {e}")
        return False


def get_password_hash(password: str) -> str:
    """
    Возвращает хеш для заданного пароля.

    :param password: Пароль для хеширования.
    :return: Строка с хешем пароля.
    :raises RuntimeError: Если произошла ошибка при хешировании.
    """
    if not password:
        logger.warning("Attempting to hash an empty password.")
    try:
        return pwd_context.hash(password)
    except Exception as e:
        logger.exception("Error generating password hash.")
        raise RuntimeError("Failed to hash password") from e


# --- JWT Token Handling ---
ALGORITHM = "HS256"  # Единственный поддерживаемый алгоритм подписи


class CredentialSigner:
    """
    Подписывает и проверяет самодостаточные токены (компактный JWS, HMAC-SHA256).
    Один общий секрет и подписывает, и проверяет; серверного хранилища сессий нет.
    Экземпляр неизменяем после создания и может разделяться между запросами.
    """

    def __init__(self, secret_key: str, algorithm: str = ALGORITHM):
        if not secret_key:
            logger.error("Cannot create CredentialSigner: secret_key is missing.")
            raise ConfigurationError("Secret key must be provided to sign tokens.")
        if algorithm != ALGORITHM:
            raise ConfigurationError(f"Unsupported signing algorithm: {algorithm}")
        self._secret_key = secret_key
        self.algorithm = algorithm

    def sign(self, claims: TokenClaims) -> str:
        """
        Кодирует claims в подписанную строку вида header.payload.signature.

        :raises SigningError: При любой ошибке кодирования (детали только в логе).
        """
        try:
            return jwt.encode(claims.to_payload(), self._secret_key, algorithm=self.algorithm)
        except Exception as e:
            logger.exception(f"Failed to sign token {claims.token_id} for user {claims.subject_id}.")
            raise SigningError() from e

    def verify(self, token: str) -> TokenClaims:
        """
        Проверяет подпись, алгоритм и срок действия, затем структуру claims.

        :raises ExpiredTokenError: Подпись верна, но срок действия истек.
        :raises InvalidTokenError: Любая другая ошибка проверки.
        """
        if not token:
            logger.debug("Token verification attempt with empty token string.")
            raise InvalidTokenError()

        try:
            # algorithms=[HS256] отклоняет токены с подмененным alg (в т.ч. 'none')
            payload = jwt.decode(token, self._secret_key, algorithms=[self.algorithm])
        except ExpiredSignatureError as e:
            logger.debug("Token verification failed: token has expired.")
            raise ExpiredTokenError() from e
        except JWTError as e:
            logger.debug(f"Token verification failed due to JWTError: {e}")
            raise InvalidTokenError() from e

        try:
            return TokenClaims.model_validate(payload)
        except ValidationError as e:
            logger.debug(f"Token verification failed: unexpected claim shape: {e.error_count()} error(s).")
            raise InvalidTokenError() from e
