# auth_sdk/db/session.py
import contextlib
import logging
from typing import AsyncGenerator, Optional, Dict, Any

from sqlalchemy.ext.asyncio import (
    AsyncSession,
    AsyncEngine,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import StaticPool, NullPool
from sqlmodel import SQLModel

logger = logging.getLogger(__name__)

_db_engine: Optional[AsyncEngine] = None
_db_session_maker: Optional[async_sessionmaker[AsyncSession]] = None


def _masked_url(database_url: str) -> str:
    at = database_url.find("@")
    if at == -1:
        return database_url
    return f"{database_url[: at + 1]}********"


def init_db(
    database_url: str,
    engine_options: Optional[Dict[str, Any]] = None,
    echo: bool = False,
):
    global _db_engine, _db_session_maker
    if _db_engine:
        logger.warning(
            "Database engine and session maker already initialized. Skipping re-initialization."
        )
        return

    logger.info(f"Initializing database engine and session maker for URL: {_masked_url(database_url)}")

    options_to_pass = engine_options.copy() if engine_options else {}

    # SQLite и пулы без очереди не принимают pool_size/max_overflow
    pool_class_in_options = options_to_pass.get("poolclass")
    if database_url.startswith("sqlite") or (
        pool_class_in_options and pool_class_in_options in [StaticPool, NullPool]
    ):
        options_to_pass.pop("pool_size", None)
        options_to_pass.pop("max_overflow", None)
        logger.debug("Removed pool_size/max_overflow from engine options for this pool/dialect.")

    try:
        _db_engine = create_async_engine(database_url, echo=echo, **options_to_pass)
        _db_session_maker = async_sessionmaker(
            bind=_db_engine, class_=AsyncSession, expire_on_commit=False
        )
        logger.info("Database engine and session maker initialized successfully.")
    except Exception as e:
        logger.critical(
            "Failed to initialize database engine or session maker.", exc_info=True
        )
        raise RuntimeError("Failed to initialize database infrastructure") from e


async def close_db():
    global _db_engine, _db_session_maker
    if _db_engine:
        logger.info("Disposing database engine...")
        try:
            await _db_engine.dispose()
            logger.info("Database engine disposed successfully.")
        except Exception:
            logger.error("Error during database engine disposal.", exc_info=True)
        finally:
            _db_engine = None
            _db_session_maker = None
    else:
        logger.info(
            "Database engine was not initialized or already disposed. No action taken."
        )


@contextlib.asynccontextmanager
async def managed_session() -> AsyncGenerator[AsyncSession, None]:
    """
    Открывает новую сессию и закрывает ее по выходу.
    При исключении внутри блока выполняется rollback, исключение пробрасывается дальше.
    """
    if _db_session_maker is None:
        logger.error(
            "Session maker not initialized. Call init_db() first to configure database access."
        )
        raise RuntimeError("Session maker not initialized. Call init_db() first.")

    session = _db_session_maker()
    session_id_for_log = id(session)
    logger.debug(f"managed_session: Created new session {session_id_for_log}.")

    try:
        yield session
    except Exception:
        logger.debug(
            f"managed_session: Exception occurred within managed session {session_id_for_log}. Rolling back."
        )
        try:
            await session.rollback()
        except Exception as rb_exc:
            logger.error(
                f"managed_session: Critical error during rollback of session {session_id_for_log}.",
                exc_info=rb_exc,
            )
        raise
    finally:
        logger.debug(f"managed_session: Closing session {session_id_for_log}.")
        await session.close()


async def create_db_and_tables():
    if _db_engine is None:
        logger.error(
            "Database engine not initialized. Cannot create tables. Call init_db() first."
        )
        raise RuntimeError("Database engine not initialized. Call init_db() first.")

    logger.info("Attempting to create database tables based on SQLModel.metadata...")
    try:
        async with _db_engine.begin() as conn:
            await conn.run_sync(SQLModel.metadata.create_all)
        logger.info("Database tables checked/created successfully.")
    except Exception as e:
        logger.critical("Failed to create database tables.", exc_info=True)
        raise RuntimeError("Failed to create database tables") from e
