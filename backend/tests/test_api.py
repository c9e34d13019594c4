"""Tests for the HTTP side of the room service."""

import pytest
from httpx import AsyncClient

from config import settings


@pytest.mark.anyio
async def test_create_room_returns_bare_id(client: AsyncClient, registry):
    resp = await client.post("/api/create_room")

    assert resp.status_code == 200
    room_id = resp.json()
    assert isinstance(room_id, str)
    assert len(room_id) == 3 and room_id.isdigit()
    assert await registry.exists(room_id)


@pytest.mark.anyio
async def test_room_exists_check(client: AsyncClient):
    room_id = (await client.post("/api/create_room")).json()

    resp = await client.get(f"/api/rooms/{room_id}")
    assert resp.json() == {"room_id": room_id, "exists": True}

    resp = await client.get("/api/rooms/nope")
    assert resp.status_code == 200
    assert resp.json() == {"room_id": "nope", "exists": False}


@pytest.mark.anyio
async def test_session_page_lookup(client: AsyncClient):
    room_id = (await client.post("/api/create_room")).json()

    resp = await client.get(f"/session/{room_id}")
    assert resp.status_code == 200
    assert resp.json() == {"room_id": room_id}

    resp = await client.get("/session/nope")
    assert resp.status_code == 404
    assert resp.json() == {"detail": "Room not found"}


@pytest.mark.anyio
async def test_health_reports_room_count(client: AsyncClient, registry):
    resp = await client.get("/health")
    assert resp.json() == {"status": "healthy", "rooms": 0}

    await registry.create()
    resp = await client.get("/health")
    assert resp.json()["rooms"] == 1


@pytest.mark.anyio
async def test_create_room_rate_limit(client: AsyncClient):
    """/api/create_room is limited per client address"""
    limit = int(settings.create_room_rate_limit.split("/")[0])
    for i in range(limit):
        resp = await client.post("/api/create_room")
        assert resp.status_code != 429, f"Request {i + 1}/{limit} was unexpectedly rate-limited"

    final = await client.post("/api/create_room")
    assert final.status_code == 429, (
        f"Request {limit + 1} should have been rate-limited but got {final.status_code}"
    )
