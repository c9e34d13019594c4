"""Shared fixtures for backend tests."""

import pytest
from fastapi.testclient import TestClient
from httpx import ASGITransport, AsyncClient
from limits.storage import MemoryStorage
from limits.strategies import FixedWindowRateLimiter

from config import limiter
from estimation import RoomRegistry
from main import app


@pytest.fixture
def anyio_backend():
    return "asyncio"


@pytest.fixture(autouse=True)
def _reset_state():
    """Fresh room registry and rate-limiter storage for every test."""
    fresh = MemoryStorage()
    limiter._storage = fresh
    limiter._limiter = FixedWindowRateLimiter(fresh)
    app.state.registry = RoomRegistry()
    yield
    app.dependency_overrides.clear()


@pytest.fixture
def registry() -> RoomRegistry:
    return app.state.registry


@pytest.fixture
async def client():
    """Async HTTP client against the FastAPI app."""
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://testserver") as ac:
        yield ac


@pytest.fixture
def ws_client():
    """Sync client for WebSocket tests.

    Used as a context manager so every socket opened in a test shares one
    event loop with the registry.
    """
    with TestClient(app) as tc:
        yield tc
