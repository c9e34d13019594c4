"""Pydantic models for estimation rooms and the WebSocket message protocol."""

from typing import Annotated, Literal, Union

from pydantic import BaseModel, Field, PrivateAttr, TypeAdapter, ValidationError

from .exceptions import MalformedMessage
from .realtime import BroadcastChannel


class Participant(BaseModel):
    """One member of a room."""
    id: str
    name: str
    estimate: str | None = None  # free-form token: "5", "?", "☕"


class Room(BaseModel):
    id: str
    users: dict[str, Participant] = {}
    revealed: bool = False

    # Created with the room and never serialized.
    _channel: BroadcastChannel | None = PrivateAttr(default=None)

    @property
    def channel(self) -> BroadcastChannel | None:
        return self._channel

    def snapshot(self) -> "Room":
        """A copy detached from the registry; shares the channel handle."""
        return self.model_copy(
            update={"users": {uid: u.model_copy() for uid, u in self.users.items()}}
        )


# ---------------------------------------------------------------------------
# Client -> server
# ---------------------------------------------------------------------------


class Join(BaseModel):
    type: Literal["Join"] = "Join"
    room_id: str
    name: str


class Rejoin(BaseModel):
    type: Literal["Rejoin"] = "Rejoin"
    room_id: str
    user_id: str
    name: str


class Vote(BaseModel):
    type: Literal["Vote"] = "Vote"
    room_id: str
    user_id: str
    estimate: str


class Show(BaseModel):
    type: Literal["Show"] = "Show"
    room_id: str


class Clear(BaseModel):
    type: Literal["Clear"] = "Clear"
    room_id: str


ClientMessage = Annotated[
    Union[Join, Rejoin, Vote, Show, Clear],
    Field(discriminator="type"),
]

_client_message_adapter = TypeAdapter(ClientMessage)


def parse_client_message(text: str | bytes) -> ClientMessage:
    """Decode one inbound frame. Raises MalformedMessage on anything unrecognised."""
    try:
        return _client_message_adapter.validate_json(text)
    except ValidationError as e:
        raise MalformedMessage(str(e)) from e


# ---------------------------------------------------------------------------
# Server -> client
# ---------------------------------------------------------------------------


class Joined(BaseModel):
    type: Literal["Joined"] = "Joined"
    user_id: str
    room_id: str


class RoomState(BaseModel):
    type: Literal["RoomState"] = "RoomState"
    room: Room


class Error(BaseModel):
    type: Literal["Error"] = "Error"
    message: str


ServerMessage = Union[Joined, RoomState, Error]
