"""FastAPI router for estimation room endpoints."""

import logging

from fastapi import APIRouter, Depends, HTTPException, Request, WebSocket

from config import limiter, settings

from .session import RoomSession
from .store import RoomRegistry

logger = logging.getLogger(__name__)

router = APIRouter(tags=["rooms"])


def get_registry(request: Request) -> RoomRegistry:
    return request.app.state.registry


# ---------------------------------------------------------------------------
# Rooms
# ---------------------------------------------------------------------------


@router.post("/api/create_room")
@limiter.limit(settings.create_room_rate_limit)
async def create_room(request: Request, registry: RoomRegistry = Depends(get_registry)) -> str:
    """Create a new room. The response body is just its id."""
    return await registry.create()


@router.get("/api/rooms/{room_id}")
async def room_exists(room_id: str, registry: RoomRegistry = Depends(get_registry)):
    """Whether a room exists (lets a page pick the session or the error view)."""
    return {"room_id": room_id, "exists": await registry.exists(room_id)}


@router.get("/session/{room_id}")
async def session_page(room_id: str, registry: RoomRegistry = Depends(get_registry)):
    if not await registry.exists(room_id):
        raise HTTPException(status_code=404, detail="Room not found")
    return {"room_id": room_id}


# ---------------------------------------------------------------------------
# WebSocket: real-time room protocol
# ---------------------------------------------------------------------------


@router.websocket("/ws")
async def room_ws(ws: WebSocket):
    await ws.accept()
    session = RoomSession(ws, ws.app.state.registry)
    try:
        await session.run()
    except Exception:
        # Only this connection goes down; the registry and other sessions are untouched.
        logger.exception("WebSocket session for room %s failed", session.room_id)
