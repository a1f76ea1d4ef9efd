"""Global pytest configuration and fixtures."""

import asyncio
import logging
import typing as _t

import httpx
import pytest

from httptool import client as client_module
from httptool import logger as logger_module
from httptool.logger import Logger

# Configure logging for tests
logging.basicConfig(level=logging.INFO)


class MockLogger(Logger):
    """Logger that records every call, for assertions."""

    def __init__(self):
        self.calls: list[tuple[str, str, dict[str, _t.Any]]] = []
        self.level = None
        self.scopes: list[_t.Any] = []

    def set_level(self, level):
        self.level = level
        return self

    def debug(self, scope, msg, **fields):
        self.scopes.append(scope)
        self.calls.append(("debug", msg, fields))

    def info(self, scope, msg, **fields):
        self.scopes.append(scope)
        self.calls.append(("info", msg, fields))

    def warn(self, scope, msg, **fields):
        self.scopes.append(scope)
        self.calls.append(("warn", msg, fields))

    def error(self, scope, msg, **fields):
        self.scopes.append(scope)
        self.calls.append(("error", msg, fields))

    def levels(self) -> list[str]:
        return [level for level, _, _ in self.calls]


@pytest.fixture(autouse=True)
def reset_shared_state():
    """Give every test a fresh shared client and default logger."""
    client_module.default_provider.reset()
    logger_module.set_default_logger(None)
    yield
    client_module.default_provider.reset()
    logger_module.set_default_logger(None)


@pytest.fixture
def mock_logger():
    return MockLogger()


async def _routes(request: httpx.Request) -> httpx.Response:
    """Handler standing in for a test server."""
    path = request.url.path
    if path == "/ok":
        return httpx.Response(200, content=b'{"status":"ok"}')
    if path == "/error":
        return httpx.Response(500, content=b'{"status":"error"}')
    if path == "/headers":
        if request.headers.get("X-Test-Header") == "test-value":
            return httpx.Response(200, content=b'{"headers":"ok"}')
        return httpx.Response(400)
    if path == "/post-data":
        if request.content == b'{"test":"data"}':
            return httpx.Response(200, content=b'{"data":"received"}')
        return httpx.Response(400)
    if path == "/fast":
        await asyncio.sleep(0.01)
        return httpx.Response(200, content=b'{"response":"fast"}')
    if path == "/slow":
        await asyncio.sleep(0.1)
        return httpx.Response(200, content=b'{"response":"slow"}')
    if path == "/hang":
        await asyncio.sleep(5)
        return httpx.Response(200)
    return httpx.Response(404)


class RecordingHandler:
    """Wraps a handler and keeps every request it receives."""

    def __init__(self, handler=_routes):
        self.handler = handler
        self.requests: list[httpx.Request] = []

    async def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        response = self.handler(request)
        if not isinstance(response, httpx.Response):
            response = await response
        return response


@pytest.fixture
def handler():
    return RecordingHandler()


@pytest.fixture
def mock_client(handler):
    """Async client served by ``handler`` instead of the network."""
    return httpx.AsyncClient(transport=httpx.MockTransport(handler))


@pytest.fixture
def shared_client(mock_client):
    """Install ``mock_client`` as the process-wide shared client."""
    client_module.set_http_client(mock_client)
    return mock_client
