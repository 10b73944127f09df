"""
Room Schema Definitions

This module defines the room events and the initial sync response.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple

from .base import BaseResponse

# Well-known state event types
EVENT_TYPE_ROOM_NAME = "m.room.name"
EVENT_TYPE_ROOM_AVATAR = "m.room.avatar"
EVENT_TYPE_ROOM_MEMBER = "m.room.member"
EVENT_TYPE_ROOM_CANONICAL_ALIAS = "m.room.canonical_alias"
EVENT_TYPE_ROOM_ALIASES = "m.room.aliases"

StateKey = Tuple[str, str]


@dataclass(frozen=True)
class StateEvent(BaseResponse):
    """
    A state change in a room.

    Attributes:
        type: Event type (e.g., m.room.name)
        state_key: Disambiguates instances of the same type (e.g., user id)
        content: Event payload
        origin_server_ts: Server timestamp in milliseconds
        sender: User id of the sender, if known
        event_id: Event id, if known
    """

    type: str
    state_key: str
    content: Dict[str, Any] = field(default_factory=dict)
    origin_server_ts: int = 0
    sender: Optional[str] = None
    event_id: Optional[str] = None

    @property
    def key(self) -> StateKey:
        """The (type, state_key) pair identifying this piece of state."""
        return (self.type, self.state_key)

    @classmethod
    def _from_data(cls, data: Dict[str, Any]) -> "StateEvent":
        """
        Create from an event dictionary.

        Raises:
            KeyError: If type or state_key is missing
            TypeError: If a field has the wrong type
        """
        event_type = data["type"]
        state_key = data["state_key"]
        content = data.get("content", {})
        if not isinstance(event_type, str) or not isinstance(state_key, str):
            raise TypeError("state event type and state_key must be strings")
        if not isinstance(content, dict):
            raise TypeError(
                f"content of {event_type} event must be an object"
            )
        return cls(
            type=event_type,
            state_key=state_key,
            content=content,
            origin_server_ts=data.get("origin_server_ts", 0),
            sender=data.get("sender"),
            event_id=data.get("event_id"),
        )


@dataclass
class TokensChunk(BaseResponse):
    """
    A chunk of timeline events with its pagination tokens.

    Attributes:
        start: Token of the start of the chunk
        end: Token of the end of the chunk
        chunk: Raw event dictionaries
    """

    start: Optional[str] = None
    end: Optional[str] = None
    chunk: List[Dict[str, Any]] = field(default_factory=list)

    @classmethod
    def _from_data(cls, data: Dict[str, Any]) -> "TokensChunk":
        """Create from response data dictionary."""
        return cls(
            start=data.get("start"),
            end=data.get("end"),
            chunk=list(data.get("chunk", [])),
        )


@dataclass
class RoomResponse(BaseResponse):
    """
    Response of a room initial sync.

    Attributes:
        room_id: Id of the synced room
        state: State events in chronological order
        messages: Most recent timeline events, if returned
        membership: Membership of the requesting user, if any
        visibility: Room visibility (public or private), if returned
    """

    room_id: str
    state: List[StateEvent] = field(default_factory=list)
    messages: Optional[TokensChunk] = None
    membership: Optional[str] = None
    visibility: Optional[str] = None

    @classmethod
    def _from_data(cls, data: Dict[str, Any]) -> "RoomResponse":
        """Create from response data dictionary."""
        messages = data.get("messages")
        return cls(
            room_id=data["room_id"],
            state=[StateEvent.from_dict(event) for event in data.get("state", [])],
            messages=TokensChunk.from_dict(messages) if messages else None,
            membership=data.get("membership"),
            visibility=data.get("visibility"),
        )
