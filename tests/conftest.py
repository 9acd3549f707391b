"""Pytest configuration and shared fixtures."""

from __future__ import annotations

import asyncio
from http import HTTPStatus
from typing import TYPE_CHECKING, Any
from unittest.mock import AsyncMock, MagicMock

import pytest
from aiohttp import BasicAuth, ClientSession, hdrs, web

from pysparkcloud.api import SparkCloudAPI
from pysparkcloud.models import Credentials


if TYPE_CHECKING:
    from collections.abc import AsyncGenerator

    from aiohttp.test_utils import TestClient


USERNAME = "user@example.com"
PASSWORD = "hunter2"
ACCESS_TOKEN = "good-token"
ISSUED_TOKEN = "issued-token"

SAMPLE_DEVICES = [
    {"id": "53ff6f065067544840551187", "name": "core_one", "connected": True},
    {"id": "48ff6a065067555008342387", "name": "core_two", "connected": False},
]

SAMPLE_TOKENS = [
    {"token": ACCESS_TOKEN, "expires_at": "2027-01-01T00:00:00.000Z", "client": "spark"},
]

REQUESTS = web.AppKey("requests", list)
TOKEN_DELAY = web.AppKey("token_delay", float)


def _error(status: HTTPStatus, error: str, description: str) -> web.Response:
    return web.json_response(
        {"code": int(status), "error": error, "error_description": description},
        status=status,
    )


def _bearer_ok(request: web.Request) -> bool:
    return request.headers.get(hdrs.AUTHORIZATION) in (f"Bearer {ACCESS_TOKEN}", f"Bearer {ISSUED_TOKEN}")


def _basic_ok(request: web.Request) -> bool:
    header = request.headers.get(hdrs.AUTHORIZATION, "")
    if not header.startswith("Basic "):
        return False
    auth = BasicAuth.decode(header)
    return auth.login == USERNAME and auth.password == PASSWORD


def create_cloud_app() -> web.Application:
    """Create an in-process fake of the cloud API under /v1."""
    app = web.Application()
    app[REQUESTS] = []
    app[TOKEN_DELAY] = 0.0

    @web.middleware
    async def record(request: web.Request, handler: Any) -> web.StreamResponse:
        body = await request.text()
        request.app[REQUESTS].append(
            {
                "method": request.method,
                "path": request.path,
                "query": dict(request.query),
                "headers": dict(request.headers),
                "body": body,
            }
        )
        return await handler(request)

    app.middlewares.append(record)

    async def list_devices(request: web.Request) -> web.Response:
        if not _bearer_ok(request):
            return _error(HTTPStatus.UNAUTHORIZED, "invalid_token", "The access token provided is invalid.")
        return web.json_response(SAMPLE_DEVICES)

    async def device_info(request: web.Request) -> web.Response:
        device_id = request.match_info["device_id"]
        if device_id == "missing":
            return _error(HTTPStatus.NOT_FOUND, "not_found", "no such device")
        return web.json_response({"id": device_id, "name": "core_one", "variables": {"temperature": "double"}})

    async def read_variable(request: web.Request) -> web.Response:
        name = request.match_info["name"]
        return web.json_response({"name": name, "result": 21.5, "coreInfo": {"connected": True}})

    async def call_function(request: web.Request) -> web.Response:
        name = request.match_info["name"]
        return_value = -1 if name == "broken" else 1
        return web.json_response({"id": request.match_info["device_id"], "name": name, "return_value": return_value})

    async def list_tokens(request: web.Request) -> web.Response:
        if not _basic_ok(request):
            return _error(HTTPStatus.UNAUTHORIZED, "invalid_client", "Client authentication failed")
        return web.json_response(SAMPLE_TOKENS)

    async def issue_token(request: web.Request) -> web.Response:
        await asyncio.sleep(request.app[TOKEN_DELAY])
        form = await request.post()
        if not _basic_ok(request) or form.get("grant_type") != "password":
            return _error(HTTPStatus.UNAUTHORIZED, "invalid_grant", "User credentials are invalid")
        return web.json_response({"access_token": ISSUED_TOKEN, "token_type": "bearer", "expires_in": 7776000})

    async def delete_token(request: web.Request) -> web.Response:
        if not _basic_ok(request):
            return _error(HTTPStatus.UNAUTHORIZED, "invalid_client", "Client authentication failed")
        return web.json_response({"ok": True})

    async def slow(request: web.Request) -> web.Response:
        await asyncio.sleep(float(request.query.get("delay", "1")))
        return web.json_response({"ok": True})

    async def garbage(request: web.Request) -> web.Response:
        return web.Response(text="not json")

    app.router.add_get("/v1/devices", list_devices)
    app.router.add_get("/v1/slow", slow)
    app.router.add_get("/v1/garbage", garbage)
    app.router.add_get("/v1/devices/{device_id}", device_info)
    app.router.add_get("/v1/devices/{device_id}/{name}", read_variable)
    app.router.add_post("/v1/devices/{device_id}/{name}", call_function)
    app.router.add_get("/v1/access_tokens", list_tokens)
    app.router.add_delete("/v1/access_tokens/{token}", delete_token)
    app.router.add_post("/v1/oauth/token", issue_token)

    return app


@pytest.fixture
def cloud_app() -> web.Application:
    """Create the fake cloud application."""
    return create_cloud_app()


@pytest.fixture
async def cloud(aiohttp_client: Any, cloud_app: web.Application) -> TestClient:
    """Serve the fake cloud application on a local port."""
    return await aiohttp_client(cloud_app)


@pytest.fixture
def credentials() -> Credentials:
    """Credentials holding both a password pair and a bearer token."""
    return Credentials(username=USERNAME, password=PASSWORD, access_token=ACCESS_TOKEN)


@pytest.fixture
async def api(cloud: TestClient, credentials: Credentials) -> AsyncGenerator[SparkCloudAPI]:
    """Dispatch engine pointed at the fake cloud."""
    api = SparkCloudAPI(credentials, session=cloud.session, base_url=str(cloud.make_url("")))
    async with api:
        yield api


@pytest.fixture
async def mock_session() -> AsyncGenerator[ClientSession]:
    """Create a mock aiohttp ClientSession.

    Yields:
        Mock ClientSession for testing.
    """
    session = AsyncMock(spec=ClientSession)
    session.closed = False
    session.request = MagicMock()

    async def mock_close() -> None:
        session.closed = True

    session.close = mock_close

    yield session

    if not session.closed:
        await session.close()


@pytest.fixture
def mock_response() -> MagicMock:
    """Create a mock aiohttp ClientResponse.

    Returns:
        Mock ClientResponse for testing.
    """
    response = MagicMock()
    response.status = 200
    response.headers = {}
    response.read = AsyncMock(return_value=b'{"ok": true}')
    return response


def stub_request(
    session: MagicMock,
    *,
    response: MagicMock | None = None,
    enter_error: BaseException | None = None,
) -> MagicMock:
    """Make ``session.request`` return an async context manager.

    Args:
        session: Mock session to configure.
        response: Response yielded by the context manager.
        enter_error: Exception raised when the request is entered instead.

    Returns:
        The context manager mock.
    """
    context = MagicMock()
    context.__aenter__ = AsyncMock(return_value=response, side_effect=enter_error)
    context.__aexit__ = AsyncMock(return_value=None)
    session.request.return_value = context
    return context
