"""Per-connection session: multiplexes client commands with room broadcasts."""

import asyncio
import logging

from fastapi import WebSocket, WebSocketDisconnect

from .exceptions import MalformedMessage, RoomNotFound
from .handlers import handle_message
from .models import (
    ClientMessage,
    Error,
    Join,
    Joined,
    Rejoin,
    RoomState,
    ServerMessage,
    parse_client_message,
)
from .realtime import Subscription
from .store import RoomRegistry

logger = logging.getLogger(__name__)


class RoomSession:
    """Drives one WebSocket until it closes.

    A session starts unjoined. A successful Join/Rejoin subscribes it to that
    room's broadcast channel, replacing any earlier subscription. It never
    leaves a room except by disconnecting.
    """

    def __init__(self, ws: WebSocket, registry: RoomRegistry) -> None:
        self.ws = ws
        self.registry = registry
        self.room_id: str | None = None
        self.subscription: Subscription | None = None
        self._broadcast_task: asyncio.Task | None = None

    async def run(self) -> None:
        inbound = asyncio.ensure_future(self.ws.receive())
        try:
            while True:
                if self._broadcast_task is None and self.subscription is not None:
                    self._broadcast_task = asyncio.ensure_future(self.subscription.recv())

                waiting = {inbound}
                if self._broadcast_task is not None:
                    waiting.add(self._broadcast_task)
                done, _ = await asyncio.wait(waiting, return_when=asyncio.FIRST_COMPLETED)

                if self._broadcast_task in done:
                    text = self._broadcast_task.result()
                    self._broadcast_task = None
                    await self._send_text(text)

                if inbound in done:
                    frame = inbound.result()
                    if frame["type"] == "websocket.disconnect":
                        break
                    if frame.get("text") is not None:
                        await self._on_text(frame["text"])
                    inbound = asyncio.ensure_future(self.ws.receive())
        except WebSocketDisconnect:
            pass
        finally:
            inbound.cancel()
            self._unsubscribe()
            logger.debug("Session for room %s closed", self.room_id)

    async def _on_text(self, text: str) -> None:
        try:
            msg = parse_client_message(text)
        except MalformedMessage as e:
            logger.debug("Ignoring malformed frame: %s", e)
            return

        try:
            if isinstance(msg, (Join, Rejoin)):
                await self._subscribe(msg.room_id)
            reply = await handle_message(self.registry, msg)
        except RoomNotFound as e:
            logger.info("Room %s not found", e.room_id)
            await self._send(Error(message=str(e)))
            return

        await self._send(reply)
        await self._broadcast(msg, reply)

    async def _broadcast(self, msg: ClientMessage, reply: ServerMessage) -> None:
        if isinstance(reply, Joined):
            room = await self.registry.get(msg.room_id)
            if room is None:
                return
            reply = RoomState(room=room)
        await self.registry.publish(msg.room_id, reply.model_dump_json())

    async def _subscribe(self, room_id: str) -> None:
        channel = await self.registry.channel(room_id)
        self._unsubscribe()
        self.subscription = channel.subscribe()
        self.room_id = room_id

    def _unsubscribe(self) -> None:
        if self._broadcast_task is not None:
            self._broadcast_task.cancel()
            self._broadcast_task = None
        if self.subscription is not None:
            self.subscription.close()
            self.subscription = None

    async def _send(self, message: ServerMessage) -> None:
        await self._send_text(message.model_dump_json())

    async def _send_text(self, text: str) -> None:
        try:
            await self.ws.send_text(text)
        except (WebSocketDisconnect, RuntimeError) as e:
            logger.debug("Dropping outbound message for room %s: %s", self.room_id, e)
