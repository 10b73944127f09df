"""
Room State Materialization

This module folds an ordered sequence of state events into a RoomState
snapshot and derives the room's display name and avatar from it.

Materialization never mutates its inputs: each call returns a new RoomState,
so a session can swap snapshots atomically and consumers never observe a
half-applied one.

Direction:
    - FORWARDS: events are in chronological order, the last event seen for
      a (type, state_key) wins
    - BACKWARDS: events are in reverse-chronological order, the first event
      seen for a key wins and keys already present are kept
"""

import copy
import logging
from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Any, Dict, Iterable, List, Mapping, Optional, Tuple

from .schemas.room import (
    EVENT_TYPE_ROOM_ALIASES,
    EVENT_TYPE_ROOM_AVATAR,
    EVENT_TYPE_ROOM_CANONICAL_ALIAS,
    EVENT_TYPE_ROOM_MEMBER,
    EVENT_TYPE_ROOM_NAME,
    StateEvent,
    StateKey,
)

logger = logging.getLogger(__name__)

EMPTY_ROOM_NAME = "Empty room"
ROOM_INVITE_NAME = "Room Invite"

# Memberships that count towards member-based room naming
_NAMING_MEMBERSHIPS = ("join", "invite")


class Direction(Enum):
    """Order in which a sequence of events is replayed."""

    FORWARDS = "forwards"
    BACKWARDS = "backwards"


@dataclass(frozen=True)
class RoomState:
    """
    Current-state snapshot of a room.

    Attributes:
        room_id: Id of the room this state belongs to
        display_name: Name derived from the state, from the viewer's side
        avatar_url: Avatar reference from the state, if any
        entries: Read-only mapping of (type, state_key) to a read-only copy
                 of the event content
    """

    room_id: Optional[str] = None
    display_name: Optional[str] = None
    avatar_url: Optional[str] = None
    entries: Mapping[StateKey, Mapping[str, Any]] = field(
        default_factory=lambda: MappingProxyType({})
    )

    def get_content(
        self, event_type: str, state_key: str = ""
    ) -> Optional[Mapping[str, Any]]:
        """Content of the state entry for (event_type, state_key), if any."""
        return self.entries.get((event_type, state_key))

    def get_members(self) -> Dict[str, Mapping[str, Any]]:
        """Member event content keyed by user id."""
        return {
            state_key: content
            for (event_type, state_key), content in self.entries.items()
            if event_type == EVENT_TYPE_ROOM_MEMBER
        }


def materialize(
    events: Iterable[StateEvent],
    direction: Direction = Direction.FORWARDS,
    initial: Optional[RoomState] = None,
    my_user_id: Optional[str] = None,
) -> RoomState:
    """
    Fold state events into a new snapshot.

    Args:
        events: State events, ordered according to `direction`
        direction: FORWARDS (last write wins) or BACKWARDS (first write wins)
        initial: Snapshot to start from (empty if None); left untouched
        my_user_id: The viewer, excluded from member-based naming

    Returns:
        A new RoomState with the derived name and avatar recomputed
    """
    initial = initial or RoomState()
    entries: Dict[StateKey, Mapping[str, Any]] = {
        key: _freeze(content) for key, content in initial.entries.items()
    }

    applied = 0
    for event in events:
        if direction is Direction.BACKWARDS and event.key in entries:
            continue
        entries[event.key] = _freeze(event.content)
        applied += 1

    logger.debug(
        f"Materialized {len(entries)} state entries "
        f"({applied} applied, {direction.value})"
    )

    return RoomState(
        room_id=initial.room_id,
        display_name=compute_display_name(entries, my_user_id),
        avatar_url=compute_avatar_url(entries),
        entries=MappingProxyType(entries),
    )


def _freeze(content: Mapping[str, Any]) -> Mapping[str, Any]:
    """Private read-only copy of an event content."""
    return MappingProxyType(copy.deepcopy(dict(content)))


def compute_avatar_url(
    entries: Mapping[StateKey, Mapping[str, Any]]
) -> Optional[str]:
    """Avatar reference from the m.room.avatar state, if set."""
    content = entries.get((EVENT_TYPE_ROOM_AVATAR, ""))
    if content and isinstance(content.get("url"), str) and content["url"]:
        return content["url"]
    return None


def compute_display_name(
    entries: Mapping[StateKey, Mapping[str, Any]],
    my_user_id: Optional[str] = None,
) -> str:
    """
    Derive the name a viewer should see for a room.

    Resolution order: explicit room name, canonical alias, first alias,
    then the other joined or invited members.

    Args:
        entries: Materialized state entries
        my_user_id: The viewer, never listed among the members

    Returns:
        The display name; never empty
    """
    name = _string_field(entries, EVENT_TYPE_ROOM_NAME, "name")
    if name:
        return name

    alias = _string_field(entries, EVENT_TYPE_ROOM_CANONICAL_ALIAS, "alias")
    if alias:
        return alias

    aliases = (entries.get((EVENT_TYPE_ROOM_ALIASES, "")) or {}).get("aliases")
    if isinstance(aliases, list) and aliases and isinstance(aliases[0], str):
        return aliases[0]

    others = _other_members(entries, my_user_id)
    if len(others) == 1:
        return others[0][1]
    if len(others) == 2:
        return f"{others[0][1]} and {others[1][1]}"
    if len(others) > 2:
        return f"{others[0][1]} and {len(others) - 1} others"

    if my_user_id is not None:
        mine = entries.get((EVENT_TYPE_ROOM_MEMBER, my_user_id)) or {}
        if mine.get("membership") == "invite":
            return ROOM_INVITE_NAME
    return EMPTY_ROOM_NAME


def _string_field(
    entries: Mapping[StateKey, Mapping[str, Any]], event_type: str, key: str
) -> Optional[str]:
    value = (entries.get((event_type, "")) or {}).get(key)
    if isinstance(value, str) and value.strip():
        return value
    return None


def _other_members(
    entries: Mapping[StateKey, Mapping[str, Any]], my_user_id: Optional[str]
) -> List[Tuple[str, str]]:
    """(user_id, display name) of joined or invited members other than the viewer."""
    members = []
    for (event_type, user_id), content in entries.items():
        if event_type != EVENT_TYPE_ROOM_MEMBER or user_id == my_user_id:
            continue
        if content.get("membership") not in _NAMING_MEMBERSHIPS:
            continue
        displayname = content.get("displayname")
        if not isinstance(displayname, str) or not displayname:
            displayname = user_id
        members.append((user_id, displayname))
    members.sort()
    return members
