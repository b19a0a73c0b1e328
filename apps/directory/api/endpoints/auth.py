# apps/directory/api/endpoints/auth.py
import logging

from fastapi import APIRouter, Depends, Request

from auth_sdk.dependencies.auth import get_token_service
from auth_sdk.exceptions import ExpiredTokenError, InvalidTokenError, TokenError
from auth_sdk.schemas.token import LoginRequest, RefreshRequest, TokenPair
from auth_sdk.services.auth_flow import AuthFlowService
from auth_sdk.services.token_service import TokenService

from ...data_access.user_manager import BaseUserManager, get_user_manager

logger = logging.getLogger(__name__)  # Имя будет apps.directory.api.endpoints.auth

router = APIRouter(prefix="/auth", tags=["Authentication"])


def get_auth_flow(
    request: Request,
    users: BaseUserManager = Depends(get_user_manager),
    token_service: TokenService = Depends(get_token_service),
) -> AuthFlowService:
    settings = request.app.state.settings
    return AuthFlowService(
        token_service,
        users,
        verify_subject_on_refresh=getattr(settings, "REFRESH_VERIFY_SUBJECT", True),
    )


@router.post("/login", response_model=TokenPair)
async def login(
    credentials: LoginRequest,
    auth_flow: AuthFlowService = Depends(get_auth_flow),
) -> TokenPair:
    """
    Аутентифицирует пользователя по username и паролю, возвращая пару JWT токенов.
    """
    logger.info(f"Login attempt for user: {credentials.username}")
    return await auth_flow.login(credentials.username, credentials.password)


@router.post("/refresh", response_model=TokenPair)
async def refresh(
    payload: RefreshRequest,
    auth_flow: AuthFlowService = Depends(get_auth_flow),
) -> TokenPair:
    """
    Обменивает действующий refresh токен на новую пару токенов.
    """
    logger.info("Attempting to refresh tokens.")
    try:
        return await auth_flow.refresh(payload.refresh_token)
    except ExpiredTokenError as e:
        logger.info("Refresh rejected: token has expired.")
        raise ExpiredTokenError("Refresh token has expired") from e
    except TokenError as e:
        logger.info("Refresh rejected: invalid token.")
        raise InvalidTokenError("Invalid refresh token") from e
