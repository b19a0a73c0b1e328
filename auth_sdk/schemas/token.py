from pydantic import BaseModel, ConfigDict, Field


class TokenClaims(BaseModel):
    """
    Схема данных (claims), содержащихся внутри JWT токена.
    Имена полей на проводе (alias) являются стабильным контрактом:
    user_id, username, token_id + зарегистрированные exp, iat, nbf, iss, sub.
    Access и refresh токены имеют одинаковую структуру.
    """

    model_config = ConfigDict(populate_by_name=True, extra="ignore", frozen=True)

    subject_id: str = Field(alias="user_id", min_length=1, description="ID пользователя.")
    username: str = Field(description="Имя пользователя на момент выпуска токена.")
    token_id: str = Field(
        min_length=1,
        description="Случайный идентификатор, общий для access и refresh токенов одной пары.",
    )
    issued_at: int = Field(alias="iat", description="Время выпуска (UNIX).")
    not_before: int = Field(alias="nbf", description="Токен недействителен до (UNIX).")
    expires_at: int = Field(alias="exp", description="Время истечения (UNIX).")
    issuer: str = Field(alias="iss", description="Издатель токена.")
    sub: str = Field(description="Subject, совпадает с user_id.")

    def to_payload(self) -> dict:
        """Возвращает payload для кодирования с проводными именами полей."""
        return self.model_dump(by_alias=True)


class TokenPair(BaseModel):
    """
    Схема ответа API при успешном login или refresh.
    expires_in - время жизни access токена в секундах на момент выпуска.
    """

    access_token: str
    refresh_token: str
    expires_in: int


class LoginRequest(BaseModel):
    username: str = Field(min_length=1)
    password: str = Field(min_length=1)


class RefreshRequest(BaseModel):
    refresh_token: str = Field(min_length=1)
