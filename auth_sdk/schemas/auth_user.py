# auth_sdk/schemas/auth_user.py
from pydantic import BaseModel, ConfigDict, Field

from .token import TokenClaims


class AuthContext(BaseModel):
    """
    Данные аутентифицированного запроса, извлекаемые из JWT токена.
    Кладется AuthMiddleware в request.state.auth и передается обработчикам
    явно через зависимость get_auth_context.
    """

    model_config = ConfigDict(frozen=True)

    subject_id: str = Field(description="ID пользователя.")
    username: str = Field(description="Имя пользователя из токена.")
    token_id: str = Field(description="ID пары токенов.")

    @classmethod
    def from_claims(cls, claims: TokenClaims) -> "AuthContext":
        return cls(
            subject_id=claims.subject_id,
            username=claims.username,
            token_id=claims.token_id,
        )
