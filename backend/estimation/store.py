"""In-memory room registry shared by every WebSocket session.

One reader/writer lock guards the whole map. Rooms live for the lifetime of
the process; nothing is evicted.
"""

import logging
import random
from typing import Callable, TypeVar

from .exceptions import RoomNotFound
from .locks import RWLock
from .models import Room
from .realtime import BroadcastChannel

logger = logging.getLogger(__name__)

T = TypeVar("T")


def generate_room_id(id_min: int = 100, id_max: int = 999) -> str:
    """Short, human-typable room code: three zero-padded digits by default."""
    return f"{random.randint(id_min, id_max):03d}"


class RoomRegistry:
    """room_id -> Room, plus each room's broadcast channel."""

    def __init__(
        self,
        broadcast_capacity: int = 100,
        id_min: int = 100,
        id_max: int = 999,
    ) -> None:
        self._rooms: dict[str, Room] = {}
        self._lock = RWLock()
        self.broadcast_capacity = broadcast_capacity
        self.id_min = id_min
        self.id_max = id_max

    def __len__(self) -> int:
        return len(self._rooms)

    async def create(self) -> str:
        """Register a new empty room and return its id.

        Ids are not deduplicated: a collision replaces the older room.
        """
        room_id = generate_room_id(self.id_min, self.id_max)
        room = Room(id=room_id)
        room._channel = BroadcastChannel(self.broadcast_capacity, name=room_id)
        async with self._lock.write():
            if room_id in self._rooms:
                logger.warning("Room id collision on %s, replacing existing room", room_id)
            self._rooms[room_id] = room
        logger.info("Created room %s", room_id)
        return room_id

    async def get(self, room_id: str) -> Room | None:
        async with self._lock.read():
            room = self._rooms.get(room_id)
            return room.snapshot() if room is not None else None

    async def exists(self, room_id: str) -> bool:
        async with self._lock.read():
            return room_id in self._rooms

    async def mutate(self, room_id: str, fn: Callable[[Room], T]) -> T:
        """Run ``fn`` on the live room under the write lock and return its result."""
        async with self._lock.write():
            room = self._rooms.get(room_id)
            if room is None:
                raise RoomNotFound(room_id)
            return fn(room)

    async def channel(self, room_id: str) -> BroadcastChannel:
        async with self._lock.read():
            room = self._rooms.get(room_id)
            if room is None:
                raise RoomNotFound(room_id)
            return room.channel

    async def publish(self, room_id: str, message: str) -> int:
        """Send a message to everyone subscribed to the room.

        The channel is looked up under the read lock and published to after
        releasing it. Returns the number of receivers; 0 for an unknown room.
        """
        try:
            channel = await self.channel(room_id)
        except RoomNotFound:
            return 0
        return channel.publish(message)
