# auth_sdk/app_setup.py
import logging
from contextlib import asynccontextmanager, AsyncExitStack
from datetime import datetime, timezone
from typing import Any, Awaitable, Callable, Dict, List, Optional, Sequence

from fastapi import FastAPI, APIRouter
from starlette.middleware.cors import CORSMiddleware

from auth_sdk.config import BaseAppSettings
from auth_sdk.db.session import init_db, close_db, create_db_and_tables
from auth_sdk.error_handlers import register_error_handlers
from auth_sdk.middleware.auth import AuthMiddleware, default_allowed_paths
from auth_sdk.middleware.request_logging import RequestLoggingMiddleware
from auth_sdk.services.token_service import TokenService

logger = logging.getLogger("auth_sdk.app_setup")

Hook = Callable[[FastAPI], Awaitable[None]]


@asynccontextmanager
async def sdk_lifespan_manager(
    app: FastAPI,
    settings: BaseAppSettings,
    enable_database: bool = True,
    create_tables: bool = True,
    engine_options: Optional[Dict[str, Any]] = None,
    after_startup_hook: Optional[Hook] = None,
    before_shutdown_hook: Optional[Hook] = None,
):
    """
    Управляет общими ресурсами SDK в рамках жизненного цикла FastAPI приложения.
    Ошибки старта пробрасываются вызывающему коду: решение об остановке процесса
    принимает внешний уровень (uvicorn), а не SDK.
    """
    logger.info("SDK Lifespan: Starting up...")

    async with AsyncExitStack() as stack:
        if enable_database:
            logger.info("SDK Lifespan: Initializing Database...")
            db_options = {
                "pool_size": settings.DB_POOL_SIZE,
                "max_overflow": settings.DB_MAX_OVERFLOW,
                "pool_recycle": 300,
            }
            if engine_options:
                db_options.update(engine_options)
            try:
                init_db(
                    settings.DATABASE_URL,
                    engine_options=db_options,
                    echo=settings.LOGGING_LEVEL.upper() == "DEBUG",
                )
                stack.push_async_callback(close_db)
                if create_tables:
                    await create_db_and_tables()
            except Exception as e:
                logger.critical("SDK Lifespan: Database initialization failed.", exc_info=True)
                raise RuntimeError("Database initialization failed.") from e
            logger.info("SDK Lifespan: Database initialized and close_db registered for shutdown.")
        else:
            logger.info("SDK Lifespan: Skipping database initialization.")

        if after_startup_hook:
            logger.info("SDK Lifespan: Running after_startup_hook...")
            await after_startup_hook(app)

        logger.info("SDK Lifespan: Startup sequence complete. Application running...")
        yield
        logger.info("SDK Lifespan: Starting shutdown sequence...")

        if before_shutdown_hook:
            logger.info("SDK Lifespan: Running before_shutdown_hook...")
            await before_shutdown_hook(app)

    logger.info("SDK Lifespan: Shutdown sequence complete.")


def create_app_with_sdk_setup(
    settings: BaseAppSettings,
    api_routers: Sequence[APIRouter],
    token_service: Optional[TokenService] = None,
    enable_database: bool = True,
    create_tables: bool = True,
    engine_options: Optional[Dict[str, Any]] = None,
    after_startup_hook: Optional[Hook] = None,
    before_shutdown_hook: Optional[Hook] = None,
    enable_auth_middleware: bool = True,
    auth_allowed_paths: Optional[List[str]] = None,
    title: Optional[str] = None,
    description: Optional[str] = None,
    version: Optional[str] = "0.1.0",
    include_health_check: bool = True,
) -> FastAPI:
    """
    Создает и конфигурирует экземпляр FastAPI приложения с использованием стандартных настроек SDK.

    :param token_service: Готовый TokenService. Если не передан, создается из settings.
                          Ошибка конфигурации (пустой секрет) выбрасывается здесь же.
    :param auth_allowed_paths: Пути, которые не требуют аутентификации, в дополнение
                               к стандартным (docs, login, refresh, healthcheck).
    :param after_startup_hook: Корутина, вызываемая после инициализации БД.
    """
    effective_title = title or settings.PROJECT_NAME
    logger.info(f"Creating FastAPI app '{effective_title}' with SDK setup...")

    token_service = token_service or TokenService.from_settings(settings)

    @asynccontextmanager
    async def app_lifespan_wrapper(app: FastAPI):
        async with sdk_lifespan_manager(
            app=app,
            settings=settings,
            enable_database=enable_database,
            create_tables=create_tables,
            engine_options=engine_options,
            after_startup_hook=after_startup_hook,
            before_shutdown_hook=before_shutdown_hook,
        ):
            yield

    app = FastAPI(
        title=effective_title,
        description=description or f"{settings.PROJECT_NAME} application.",
        version=version,
        openapi_url=f"{settings.API_V1_STR}/openapi.json",
        docs_url=f"{settings.API_V1_STR}/docs",
        redoc_url=f"{settings.API_V1_STR}/redoc",
        lifespan=app_lifespan_wrapper,
    )
    app.state.settings = settings
    app.state.token_service = token_service

    register_error_handlers(app)

    # Порядок: последний добавленный middleware выполняется первым.
    # Итог: RequestLogging -> CORS -> Auth -> маршруты.
    if enable_auth_middleware:
        allowed_paths = default_allowed_paths(settings.API_V1_STR, auth_allowed_paths)
        app.add_middleware(
            AuthMiddleware,
            token_service=token_service,
            allowed_paths=allowed_paths,
        )
        logger.info(f"AuthMiddleware added. Allowed paths: {allowed_paths}")
    else:
        logger.info("AuthMiddleware is disabled by configuration.")

    cors_origins_config = settings.BACKEND_CORS_ORIGINS
    if cors_origins_config:
        origins = [str(origin).strip() for origin in cors_origins_config if str(origin).strip()]
        allow_all = "*" in origins
        app.add_middleware(
            CORSMiddleware,
            allow_origins=["*"] if allow_all else origins,
            allow_credentials=not allow_all,
            allow_methods=["*"],
            allow_headers=["*"],
        )
        logger.info(f"CORS middleware enabled for origins: {'*' if allow_all else origins}")
    else:
        logger.debug("CORS middleware is disabled (BACKEND_CORS_ORIGINS not set in settings).")

    app.add_middleware(RequestLoggingMiddleware)

    main_api_router = APIRouter(prefix=settings.API_V1_STR)
    for router_instance in api_routers:
        if isinstance(router_instance, APIRouter):
            main_api_router.include_router(router_instance)
            logger.debug(f"Included API router with prefix: {router_instance.prefix}")
        else:
            logger.warning(f"Item in api_routers is not an APIRouter instance: {type(router_instance)}. Skipping.")

    if include_health_check:
        @main_api_router.get(
            "/healthcheck",
            tags=["Health"],
            summary="Perform Health Check",
        )
        async def health_check():
            return {
                "status": "ok",
                "time": datetime.now(timezone.utc).isoformat(timespec="seconds"),
            }
        logger.debug(f"Health check endpoint '{settings.API_V1_STR}/healthcheck' added.")

    app.include_router(main_api_router)
    logger.info(f"All provided API routers included under prefix: {settings.API_V1_STR}")

    logger.info(f"FastAPI app '{app.title}' setup complete.")
    return app
