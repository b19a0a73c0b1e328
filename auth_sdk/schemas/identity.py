# auth_sdk/schemas/identity.py
from pydantic import BaseModel, ConfigDict, Field


class Identity(BaseModel):
    """
    Минимальная личность, достаточная для выпуска токенов.
    Владелец записи пользователя - внешнее хранилище.
    """

    model_config = ConfigDict(frozen=True)

    subject_id: str = Field(min_length=1, description="ID пользователя.")
    username: str = Field(description="Имя пользователя.")


class StoredIdentity(Identity):
    """Личность вместе с хешем пароля, как ее возвращает хранилище."""

    hashed_password: str = Field(repr=False)

    def to_identity(self) -> Identity:
        return Identity(subject_id=self.subject_id, username=self.username)
