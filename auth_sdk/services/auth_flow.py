# auth_sdk/services/auth_flow.py
import logging
from typing import Callable, Optional

from auth_sdk.data_access.identity import BaseIdentityLookup
from auth_sdk.exceptions import (
    InvalidCredentialsError,
    SubjectNotFoundError,
    UpstreamFailureError,
)
from auth_sdk.schemas.identity import StoredIdentity
from auth_sdk.schemas.token import TokenPair
from auth_sdk.security import verify_password
from auth_sdk.services.token_service import TokenService

logger = logging.getLogger("auth_sdk.services.auth_flow")

PasswordVerifier = Callable[[str, str], bool]


class AuthFlowService:
    """
    Сценарии login и refresh поверх TokenService.

    Каждый успешный вызов выпускает новую, независимо валидную пару токенов.
    """

    def __init__(
        self,
        token_service: TokenService,
        identities: BaseIdentityLookup,
        *,
        password_verifier: PasswordVerifier = verify_password,
        verify_subject_on_refresh: bool = True,
    ):
        self.token_service = token_service
        self.identities = identities
        self.password_verifier = password_verifier
        self.verify_subject_on_refresh = verify_subject_on_refresh

    async def _lookup_by_username(self, username: str) -> Optional[StoredIdentity]:
        try:
            return await self.identities.get_identity_by_username(username)
        except Exception as e:
            logger.exception(f"Identity lookup failed for username '{username}'.")
            raise UpstreamFailureError() from e

    async def _lookup_by_id(self, subject_id: str) -> Optional[StoredIdentity]:
        try:
            return await self.identities.get_identity_by_id(subject_id)
        except Exception as e:
            logger.exception(f"Identity lookup failed for user {subject_id}.")
            raise UpstreamFailureError() from e

    async def login(self, username: str, password: str) -> TokenPair:
        """
        Проверяет учетные данные и выпускает пару токенов.
        Неизвестный пользователь и неверный пароль дают одну и ту же ошибку.
        """
        identity = await self._lookup_by_username(username)
        if identity is None:
            logger.warning(f"Login attempt with non-existent user '{username}'.")
            raise InvalidCredentialsError()

        if not self.password_verifier(password, identity.hashed_password):
            logger.warning(f"Failed login attempt (wrong password) for user '{username}'.")
            raise InvalidCredentialsError()

        tokens = self.token_service.generate_pair(identity.to_identity())
        logger.info(f"Successful login for user '{username}'.")
        return tokens

    async def refresh(self, refresh_token: str) -> TokenPair:
        """
        Обменивает refresh токен на новую пару.
        При verify_subject_on_refresh пользователь из токена должен все еще существовать,
        а новые токены выпускаются по актуальной записи из хранилища.
        """
        if not self.verify_subject_on_refresh:
            tokens = self.token_service.refresh(refresh_token)
            logger.info("Token refreshed successfully.")
            return tokens

        claims = self.token_service.validate(refresh_token)
        identity = await self._lookup_by_id(claims.subject_id)
        if identity is None:
            logger.warning(f"User {claims.subject_id} for refresh token not found.")
            raise SubjectNotFoundError()

        tokens = self.token_service.generate_pair(identity.to_identity())
        logger.info(f"Token refreshed successfully for user {claims.subject_id}.")
        return tokens
