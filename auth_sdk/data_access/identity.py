# auth_sdk/data_access/identity.py
import logging
from abc import ABC, abstractmethod
from typing import Optional

from auth_sdk.schemas.identity import StoredIdentity

logger = logging.getLogger("auth_sdk.data_access.identity")


class BaseIdentityLookup(ABC):
    """
    Абстрактный поиск пользователей, который потребляет ядро аутентификации.
    Ядро не знает, где хранятся пользователи: реализации могут работать с БД
    или со списком в памяти.

    Реализации возвращают None, если пользователь не найден, и выбрасывают
    исключение при сбое хранилища.
    """

    @abstractmethod
    async def get_identity_by_username(self, username: str) -> Optional[StoredIdentity]:
        """Находит пользователя по username."""
        pass

    @abstractmethod
    async def get_identity_by_id(self, subject_id: str) -> Optional[StoredIdentity]:
        """Находит пользователя по ID (subject_id из токена)."""
        pass
