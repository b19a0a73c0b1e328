from .token_service import TokenService
from .auth_flow import AuthFlowService

__all__ = ["TokenService", "AuthFlowService"]
