"""Apply inbound client commands to the room registry."""

import logging
import uuid

from .models import (
    Clear,
    ClientMessage,
    Join,
    Joined,
    Participant,
    Rejoin,
    Room,
    RoomState,
    ServerMessage,
    Show,
    Vote,
)
from .store import RoomRegistry

logger = logging.getLogger(__name__)


def _join(room: Room, user_id: str, name: str) -> Joined:
    user = room.users.get(user_id)
    if user is not None:
        user.name = name
    else:
        room.users[user_id] = Participant(id=user_id, name=name)
    return Joined(user_id=user_id, room_id=room.id)


def _vote(room: Room, user_id: str, estimate: str) -> RoomState:
    user = room.users.get(user_id)
    if user is not None:
        user.estimate = estimate
    return RoomState(room=room.snapshot())


def _show(room: Room) -> RoomState:
    room.revealed = True
    return RoomState(room=room.snapshot())


def _clear(room: Room) -> RoomState:
    for user in room.users.values():
        user.estimate = None
    room.revealed = False
    return RoomState(room=room.snapshot())


async def handle_message(registry: RoomRegistry, msg: ClientMessage) -> ServerMessage:
    """Apply one command and build the reply for the sender.

    Raises RoomNotFound when ``msg.room_id`` is unknown; nothing is mutated
    in that case.
    """
    if isinstance(msg, Join):
        user_id = str(uuid.uuid4())
        reply = await registry.mutate(msg.room_id, lambda room: _join(room, user_id, msg.name))
        logger.info("User %s (%s) joined room %s", user_id, msg.name, msg.room_id)
        return reply

    if isinstance(msg, Rejoin):
        reply = await registry.mutate(msg.room_id, lambda room: _join(room, msg.user_id, msg.name))
        logger.info("User %s (%s) rejoined room %s", msg.user_id, msg.name, msg.room_id)
        return reply

    if isinstance(msg, Vote):
        reply = await registry.mutate(msg.room_id, lambda room: _vote(room, msg.user_id, msg.estimate))
        logger.debug("User %s voted in room %s", msg.user_id, msg.room_id)
        return reply

    if isinstance(msg, Show):
        reply = await registry.mutate(msg.room_id, _show)
        logger.info("Room %s revealed", msg.room_id)
        return reply

    if isinstance(msg, Clear):
        reply = await registry.mutate(msg.room_id, _clear)
        logger.info("Room %s cleared", msg.room_id)
        return reply

    raise TypeError(f"Unhandled client message: {msg!r}")
