# auth_sdk/tests/test_app_setup.py
from unittest import mock

import pytest
from fastapi import APIRouter, Depends, FastAPI
from fastapi.testclient import TestClient

import auth_sdk.app_setup as app_setup_module
from auth_sdk.app_setup import create_app_with_sdk_setup
from auth_sdk.dependencies.auth import get_auth_context
from auth_sdk.middleware.auth import AuthMiddleware
from auth_sdk.middleware.request_logging import RequestLoggingMiddleware
from auth_sdk.schemas.auth_user import AuthContext
from auth_sdk.schemas.identity import Identity
from auth_sdk.services.token_service import TokenService

from .conftest import SdkTestSettings


def _router() -> APIRouter:
    router = APIRouter(prefix="/things")

    @router.get("")
    async def list_things(auth: AuthContext = Depends(get_auth_context)):
        return {"owner": auth.username}

    return router


def _middleware_classes(app: FastAPI) -> list:
    return [m.cls for m in app.user_middleware]


def test_create_app_basic_properties(sdk_settings: SdkTestSettings):
    app = create_app_with_sdk_setup(settings=sdk_settings, api_routers=[_router()], enable_database=False)

    assert app.title == sdk_settings.PROJECT_NAME
    assert app.openapi_url == "/api/openapi.json"
    assert app.docs_url == "/api/docs"
    assert isinstance(app.state.token_service, TokenService)
    assert app.state.settings is sdk_settings
    assert AuthMiddleware in _middleware_classes(app)
    # Логирование запросов оборачивает все остальные middleware
    assert _middleware_classes(app)[0] is RequestLoggingMiddleware


def test_create_app_uses_given_token_service(sdk_settings: SdkTestSettings, token_service: TokenService):
    app = create_app_with_sdk_setup(
        settings=sdk_settings, api_routers=[], token_service=token_service, enable_database=False
    )
    assert app.state.token_service is token_service


def test_create_app_without_auth_middleware(sdk_settings: SdkTestSettings):
    app = create_app_with_sdk_setup(
        settings=sdk_settings, api_routers=[], enable_database=False, enable_auth_middleware=False
    )
    assert AuthMiddleware not in _middleware_classes(app)


def test_health_check_is_public(sdk_settings: SdkTestSettings):
    app = create_app_with_sdk_setup(settings=sdk_settings, api_routers=[], enable_database=False)
    with TestClient(app) as client:
        response = client.get("/api/healthcheck")
    assert response.status_code == 200
    body = response.json()
    assert body["status"] == "ok"
    assert "T" in body["time"]


def test_without_health_check(sdk_settings: SdkTestSettings):
    app = create_app_with_sdk_setup(
        settings=sdk_settings,
        api_routers=[],
        enable_database=False,
        enable_auth_middleware=False,
        include_health_check=False,
    )
    with TestClient(app) as client:
        assert client.get("/api/healthcheck").status_code == 404


def test_routers_are_gated(sdk_settings: SdkTestSettings, token_service: TokenService):
    app = create_app_with_sdk_setup(
        settings=sdk_settings, api_routers=[_router()], token_service=token_service, enable_database=False
    )
    pair = token_service.generate_pair(Identity(subject_id="1", username="admin"))

    with TestClient(app) as client:
        rejected = client.get("/api/things")
        accepted = client.get("/api/things", headers={"Authorization": f"Bearer {pair.access_token}"})

    assert rejected.status_code == 401
    assert rejected.json() == {"error": "Authorization header is required"}
    assert accepted.status_code == 200
    assert accepted.json() == {"owner": "admin"}


def test_extra_allowed_paths(sdk_settings: SdkTestSettings):
    app = create_app_with_sdk_setup(
        settings=sdk_settings,
        api_routers=[_router()],
        enable_database=False,
        auth_allowed_paths=["GET /api/things"],
    )
    with TestClient(app) as client:
        # Маршрут публичен, но обработчик все равно требует контекст
        response = client.get("/api/things")
    assert response.status_code == 401
    assert response.json() == {"error": "Authorization header is required"}


def test_lifespan_initializes_and_closes_database(sdk_settings: SdkTestSettings):
    hooks = {"after": mock.AsyncMock(), "before": mock.AsyncMock()}
    with mock.patch.object(app_setup_module, "init_db") as init_db_mock, \
            mock.patch.object(app_setup_module, "create_db_and_tables", new=mock.AsyncMock()) as create_mock, \
            mock.patch.object(app_setup_module, "close_db", new=mock.AsyncMock()) as close_mock:
        app = create_app_with_sdk_setup(
            settings=sdk_settings,
            api_routers=[],
            after_startup_hook=hooks["after"],
            before_shutdown_hook=hooks["before"],
        )
        with TestClient(app):
            init_db_mock.assert_called_once()
            assert init_db_mock.call_args.args[0] == sdk_settings.DATABASE_URL
            create_mock.assert_awaited_once()
            hooks["after"].assert_awaited_once_with(app)
            close_mock.assert_not_awaited()

    hooks["before"].assert_awaited_once_with(app)
    close_mock.assert_awaited_once()


def test_lifespan_database_failure_raises(sdk_settings: SdkTestSettings):
    with mock.patch.object(app_setup_module, "init_db", side_effect=OSError("no db")):
        app = create_app_with_sdk_setup(settings=sdk_settings, api_routers=[])
        with pytest.raises(RuntimeError, match="Database initialization failed"):
            with TestClient(app):
                pass
