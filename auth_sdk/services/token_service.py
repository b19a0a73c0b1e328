# auth_sdk/services/token_service.py
import logging
import uuid
from datetime import datetime, timedelta, timezone
from typing import Callable, Optional

from auth_sdk.config import BaseAppSettings
from auth_sdk.exceptions import ConfigurationError, SigningError
from auth_sdk.schemas.identity import Identity
from auth_sdk.schemas.token import TokenClaims, TokenPair
from auth_sdk.security import CredentialSigner

logger = logging.getLogger("auth_sdk.services.token_service")

Clock = Callable[[], datetime]


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class TokenService:
    """
    Выпуск, проверка и ротация пар токенов.
    Единственный компонент, которому известны время жизни токенов и издатель;
    все, что выше (middleware, эндпоинты), не знает устройства токенов.

    Access и refresh токены имеют одинаковую структуру claims и одну схему подписи,
    поэтому структурно неразличимы.
    """

    def __init__(
        self,
        signer: CredentialSigner,
        *,
        access_lifetime: timedelta,
        refresh_lifetime: timedelta,
        issuer: str,
        clock: Optional[Clock] = None,
    ):
        self.signer = signer
        self.access_lifetime = access_lifetime
        self.refresh_lifetime = refresh_lifetime
        self.issuer = issuer
        self._clock = clock or _utcnow

    @classmethod
    def from_settings(cls, settings: BaseAppSettings) -> "TokenService":
        """Создает сервис из настроек приложения."""
        if not settings.SECRET_KEY:
            raise ConfigurationError("SECRET_KEY is required to issue tokens.")
        return cls(
            CredentialSigner(settings.SECRET_KEY, settings.ALGORITHM),
            access_lifetime=settings.access_token_lifetime,
            refresh_lifetime=settings.refresh_token_lifetime,
            issuer=settings.JWT_ISSUER,
        )

    @property
    def expires_in(self) -> int:
        return int(self.access_lifetime.total_seconds())

    def _build_claims(self, identity: Identity, token_id: str, lifetime: timedelta) -> TokenClaims:
        now = self._clock()
        issued_at = int(now.timestamp())
        return TokenClaims(
            subject_id=identity.subject_id,
            username=identity.username,
            token_id=token_id,
            issued_at=issued_at,
            not_before=issued_at,
            expires_at=int((now + lifetime).timestamp()),
            issuer=self.issuer,
            sub=identity.subject_id,
        )

    def generate_pair(self, identity: Identity) -> TokenPair:
        """
        Выпускает access и refresh токены с общим token_id.

        :raises SigningError: Сбой подписи (уже залогирован подписывающим).
        """
        token_id = str(uuid.uuid4())
        try:
            access_token = self.signer.sign(self._build_claims(identity, token_id, self.access_lifetime))
            refresh_token = self.signer.sign(self._build_claims(identity, token_id, self.refresh_lifetime))
        except SigningError:
            logger.error(f"Failed to generate token pair for user {identity.subject_id}.")
            raise

        logger.debug(f"Issued token pair {token_id} for user {identity.subject_id}.")
        return TokenPair(
            access_token=access_token,
            refresh_token=refresh_token,
            expires_in=self.expires_in,
        )

    def validate(self, token: str) -> TokenClaims:
        """
        Проверяет токен. InvalidTokenError / ExpiredTokenError пробрасываются без изменений.
        """
        return self.signer.verify(token)

    def refresh(self, refresh_token: str) -> TokenPair:
        """
        Обменивает валидный токен на новую пару с новым token_id.
        Старый token_id не отслеживается: повторный refresh тем же токеном снова успешен.
        """
        claims = self.validate(refresh_token)
        identity = Identity(subject_id=claims.subject_id, username=claims.username)
        logger.debug(f"Refreshing token pair {claims.token_id} for user {claims.subject_id}.")
        return self.generate_pair(identity)
