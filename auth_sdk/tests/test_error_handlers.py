# auth_sdk/tests/test_error_handlers.py
import httpx
import pytest
from fastapi import FastAPI, HTTPException
from pydantic import BaseModel, Field

from auth_sdk.error_handlers import register_error_handlers
from auth_sdk.exceptions import (
    DuplicateIdentityError,
    InvalidCredentialsError,
    SigningError,
    UpstreamFailureError,
)

pytestmark = pytest.mark.asyncio


class Payload(BaseModel):
    username: str = Field(min_length=1)


def _build_app() -> FastAPI:
    app = FastAPI()
    register_error_handlers(app)

    @app.get("/credentials")
    async def credentials():
        raise InvalidCredentialsError()

    @app.get("/conflict")
    async def conflict():
        raise DuplicateIdentityError()

    @app.get("/signing")
    async def signing():
        raise SigningError()

    @app.get("/upstream")
    async def upstream():
        raise UpstreamFailureError() from ConnectionError("db down")

    @app.get("/http")
    async def http_error():
        raise HTTPException(status_code=418, detail="I'm a teapot")

    @app.post("/payload")
    async def payload(data: Payload):
        return data

    @app.get("/boom")
    async def boom():
        raise RuntimeError("secret internals")

    return app


@pytest.fixture
def client() -> httpx.AsyncClient:
    transport = httpx.ASGITransport(app=_build_app(), raise_app_exceptions=False)
    return httpx.AsyncClient(transport=transport, base_url="http://test")


@pytest.mark.parametrize(
    "path, status_code, message",
    [
        ("/credentials", 401, "Invalid credentials"),
        ("/conflict", 409, "Username or email already exists"),
        ("/signing", 500, "Failed to generate tokens"),
        ("/upstream", 500, "Internal server error"),
        ("/http", 418, "I'm a teapot"),
    ],
)
async def test_sdk_errors_use_error_body(client: httpx.AsyncClient, path: str, status_code: int, message: str):
    async with client:
        response = await client.get(path)
    assert response.status_code == status_code
    assert response.json() == {"error": message}


async def test_unauthorized_carries_www_authenticate(client: httpx.AsyncClient):
    async with client:
        response = await client.get("/credentials")
    assert response.headers["www-authenticate"] == "Bearer"


async def test_validation_error_is_bad_request(client: httpx.AsyncClient):
    async with client:
        missing = await client.post("/payload", json={})
        malformed = await client.post("/payload", content=b"{not json", headers={"Content-Type": "application/json"})
    assert missing.status_code == 400
    assert "username" in missing.json()["error"]
    assert malformed.status_code == 400
    assert set(malformed.json()) == {"error"}


async def test_unexpected_error_hides_details(client: httpx.AsyncClient):
    async with client:
        response = await client.get("/boom")
    assert response.status_code == 500
    assert response.json() == {"error": "Internal server error"}
