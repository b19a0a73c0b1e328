# apps/directory/data_access/user_manager.py
import asyncio
import logging
import uuid
from abc import abstractmethod
from typing import AsyncGenerator, Dict, Iterable, List, Optional

from fastapi import Request
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from auth_sdk.data_access import BaseIdentityLookup
from auth_sdk.db.session import managed_session
from auth_sdk.exceptions import DuplicateIdentityError, UpstreamFailureError
from auth_sdk.schemas.identity import StoredIdentity
from auth_sdk.security import get_password_hash

from apps.directory.models.user import User
from apps.directory.schemas.user import UserCreate

logger = logging.getLogger("app.data_access.user_manager")


def parse_user_id(user_id: str) -> Optional[uuid.UUID]:
    """Возвращает UUID или None, если строка не является идентификатором пользователя."""
    try:
        return uuid.UUID(str(user_id))
    except (ValueError, AttributeError):
        return None


def to_stored_identity(user: User) -> StoredIdentity:
    return StoredIdentity(
        subject_id=str(user.id),
        username=user.username,
        hashed_password=user.hashed_password,
    )


def _hash_password(password: str) -> str:
    try:
        return get_password_hash(password)
    except RuntimeError as e:
        raise UpstreamFailureError("Failed to process request") from e


class BaseUserManager(BaseIdentityLookup):
    """
    Хранилище пользователей каталога.
    Одновременно служит источником личностей для сценариев login/refresh.
    """

    @abstractmethod
    async def list_users(self) -> List[User]:
        pass

    @abstractmethod
    async def get_user(self, user_id: str) -> Optional[User]:
        """Возвращает пользователя или None. Некорректный ID трактуется как отсутствующий."""
        pass

    @abstractmethod
    async def get_by_username(self, username: str) -> Optional[User]:
        pass

    @abstractmethod
    async def create_user(self, data: UserCreate) -> User:
        """
        Создает пользователя с хешированным паролем.

        :raises DuplicateIdentityError: username или email уже заняты.
        """
        pass

    async def get_identity_by_username(self, username: str) -> Optional[StoredIdentity]:
        user = await self.get_by_username(username)
        return to_stored_identity(user) if user else None

    async def get_identity_by_id(self, subject_id: str) -> Optional[StoredIdentity]:
        user = await self.get_user(subject_id)
        return to_stored_identity(user) if user else None


class LocalUserManager(BaseUserManager):
    """Пользователи в БД через SQLModel. Сессия передается явно и живет в рамках запроса."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def list_users(self) -> List[User]:
        logger.info("LocalUserManager: Fetching all users.")
        stmt = select(User).order_by(User.created_at)
        try:
            result = await self.session.execute(stmt)
        except SQLAlchemyError as e:
            logger.exception("LocalUserManager: Database error fetching users.")
            raise UpstreamFailureError("Database error") from e
        return list(result.scalars().all())

    async def get_user(self, user_id: str) -> Optional[User]:
        uid = parse_user_id(user_id)
        if uid is None:
            logger.warning(f"LocalUserManager: Invalid user ID format '{user_id}'.")
            return None
        try:
            return await self.session.get(User, uid)
        except SQLAlchemyError as e:
            logger.exception(f"LocalUserManager: Database error fetching user {uid}.")
            raise UpstreamFailureError("Database error") from e

    async def get_by_username(self, username: str) -> Optional[User]:
        stmt = select(User).where(User.username == username)
        try:
            result = await self.session.execute(stmt)
        except SQLAlchemyError as e:
            logger.exception(f"LocalUserManager: Database error fetching user '{username}'.")
            raise UpstreamFailureError("Database error") from e
        return result.scalar_one_or_none()

    async def create_user(self, data: UserCreate) -> User:
        logger.debug(f"LocalUserManager: Creating user '{data.username}'.")
        db_user = User(
            username=data.username,
            email=str(data.email),
            hashed_password=_hash_password(data.password),
        )
        self.session.add(db_user)
        try:
            await self.session.commit()
        except IntegrityError as e:
            await self.session.rollback()
            logger.warning(
                f"LocalUserManager: Attempted to create user with existing username or email: '{data.username}', '{data.email}'."
            )
            raise DuplicateIdentityError() from e
        except SQLAlchemyError as e:
            await self.session.rollback()
            logger.exception("LocalUserManager: Failed to create user in database.")
            raise UpstreamFailureError("Failed to create user") from e
        await self.session.refresh(db_user)
        logger.info(f"LocalUserManager: Created new user '{db_user.username}' (ID: {db_user.id}).")
        return db_user


class InMemoryUserManager(BaseUserManager):
    """
    Пользователи в памяти процесса. Используется в тестах и демо-режиме (USER_STORE=memory).
    Данные теряются при перезапуске.
    """

    def __init__(self, users: Optional[Iterable[User]] = None):
        self._users: Dict[uuid.UUID, User] = {}
        self._lock = asyncio.Lock()
        for user in users or []:
            self._users[user.id] = user

    async def list_users(self) -> List[User]:
        return sorted(self._users.values(), key=lambda u: u.created_at)

    async def get_user(self, user_id: str) -> Optional[User]:
        uid = parse_user_id(user_id)
        if uid is None:
            return None
        return self._users.get(uid)

    async def get_by_username(self, username: str) -> Optional[User]:
        for user in self._users.values():
            if user.username == username:
                return user
        return None

    async def create_user(self, data: UserCreate) -> User:
        email = str(data.email)
        hashed_password = _hash_password(data.password)
        async with self._lock:
            for user in self._users.values():
                if user.username == data.username or user.email == email:
                    logger.warning(
                        f"InMemoryUserManager: Username '{data.username}' or email '{email}' already exists."
                    )
                    raise DuplicateIdentityError()
            db_user = User(username=data.username, email=email, hashed_password=hashed_password)
            self._users[db_user.id] = db_user
        logger.info(f"InMemoryUserManager: Created new user '{db_user.username}' (ID: {db_user.id}).")
        return db_user


async def get_user_manager(request: Request) -> AsyncGenerator[BaseUserManager, None]:
    """
    Зависимость FastAPI: менеджер пользователей на время запроса.
    Если на app.state задан общий менеджер (режим memory), используется он,
    иначе открывается сессия БД.
    """
    shared_manager: Optional[BaseUserManager] = getattr(request.app.state, "user_manager", None)
    if shared_manager is not None:
        yield shared_manager
        return
    async with managed_session() as session:
        yield LocalUserManager(session)
