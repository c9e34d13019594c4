"""
Exceptions raised by the estimation room engine.

The WebSocket session turns these into protocol replies; the HTTP router
turns them into status codes.
"""


class EstimationError(Exception):
    """Base class for every room engine error."""
    pass


class RoomNotFound(EstimationError):
    """The referenced room id is not in the registry."""
    def __init__(self, room_id: str):
        self.room_id = room_id
        super().__init__("Room not found")


class MalformedMessage(EstimationError):
    """A frame did not decode as any known client message."""
    pass
