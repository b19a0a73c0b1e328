# auth_sdk/config.py
import json
import logging
import os
from datetime import timedelta
from typing import Annotated, List, Optional, Union

from pydantic import Field, field_validator, model_validator
from pydantic_settings import (
    BaseSettings,
    NoDecode,
    SettingsConfigDict,
)

logger = logging.getLogger("auth_sdk.config")

DEFAULT_SECRET_KEY = "default_secret_key_change_this"


class BaseAppSettings(BaseSettings):
    PROJECT_NAME: str = "BaseService"
    API_V1_STR: str = "/api"
    LOGGING_LEVEL: str = Field(
        "INFO",
        json_schema_extra={"examples": ["DEBUG", "INFO", "WARNING", "ERROR"]}
    )
    # NoDecode: значение из окружения приходит в валидатор строкой, без JSON-разбора
    BACKEND_CORS_ORIGINS: Annotated[List[str], NoDecode] = []
    DB_POOL_SIZE: int = 10
    DB_MAX_OVERFLOW: int = 5
    ENV: str = os.getenv("ENV", "PROD")
    DATABASE_URL: str = "sqlite+aiosqlite:///./authdir.db"

    # --- JWT ---
    SECRET_KEY: str = Field(
        DEFAULT_SECRET_KEY,
        description="Общий секрет для подписи и проверки токенов (HMAC).",
    )
    ALGORITHM: str = Field("HS256", description="Алгоритм подписи JWT токенов.")
    ACCESS_TOKEN_EXPIRE_MINUTES: int = Field(
        15, description="Время жизни access токена в минутах (15 минут)."
    )
    REFRESH_TOKEN_EXPIRE_MINUTES: int = Field(
        60 * 72, description="Время жизни refresh токена в минутах (72 часа)."
    )
    JWT_ISSUER: str = Field("authdir", description="Значение claim 'iss' в выпускаемых токенах.")

    model_config = SettingsConfigDict(
        extra='ignore',
    )

    @field_validator("SECRET_KEY")
    @classmethod
    def secret_must_not_be_empty(cls, v: str) -> str:
        if not v or not v.strip():
            raise ValueError("SECRET_KEY must not be empty")
        return v

    @field_validator("ALGORITHM")
    @classmethod
    def only_hmac_sha256(cls, v: str) -> str:
        # Подпись симметричная: один секрет подписывает и проверяет
        if v != "HS256":
            raise ValueError("Only HS256 is supported")
        return v

    @field_validator("ACCESS_TOKEN_EXPIRE_MINUTES", "REFRESH_TOKEN_EXPIRE_MINUTES")
    @classmethod
    def lifetime_must_be_positive(cls, v: int) -> int:
        if v <= 0:
            raise ValueError("Token lifetime must be positive")
        return v

    @property
    def access_token_lifetime(self) -> timedelta:
        return timedelta(minutes=self.ACCESS_TOKEN_EXPIRE_MINUTES)

    @property
    def refresh_token_lifetime(self) -> timedelta:
        return timedelta(minutes=self.REFRESH_TOKEN_EXPIRE_MINUTES)

    @field_validator("BACKEND_CORS_ORIGINS", mode="before")
    @classmethod
    def assemble_cors_origins(cls, v: Optional[Union[str, List[str]]]) -> List[str]:
        """Принимает список, JSON-массив или строку через запятую."""
        if isinstance(v, str):
            v = v.strip()
            if v.startswith("["):
                v = json.loads(v)
            else:
                return [o.strip() for o in v.split(",") if o.strip()]
        if isinstance(v, list):
            return [str(o).strip() for o in v if str(o).strip()]
        return []

    @model_validator(mode="after")
    def warn_on_default_secret(self) -> "BaseAppSettings":
        if self.SECRET_KEY == DEFAULT_SECRET_KEY and self.ENV.lower() != "test":
            logger.warning(
                f"SECRET_KEY is set to the built-in default in ENV='{self.ENV}'. "
                "Tokens can be forged by anyone who knows it; set SECRET_KEY explicitly."
            )
        return self
