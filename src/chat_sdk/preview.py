"""
Room Preview

This module provides RoomPreviewData, which gathers what is needed to show a
preview of a room the local user has not joined. The room can come from an
e-mail invitation link or from a plain link to a room.

Lifecycle:
    SEEDED / IDLE -> FETCH_IN_FLIGHT -> MATERIALIZED | FAILED

Every state may fetch again; each successful fetch replaces the snapshot as
a whole, and a failed fetch leaves the previous name, avatar and snapshot
untouched.

Overlapping fetches:
    Each fetch takes a sequence number. By default only the most recently
    issued fetch may replace the snapshot; an older fetch that settles later
    still reports success to its own callback but its result is discarded.
    With apply_stale_responses=True, whichever fetch settles last wins, and
    a snapshot it installs marks the preview MATERIALIZED unless a newer
    fetch is still in flight.
"""

import logging
from enum import Enum
from typing import Mapping, Optional

from .invitation import RoomEmailInvitation
from .outcome import (
    ApiCallback,
    Outcome,
    Success,
    UnexpectedFailure,
    dispatch,
)
from .room_state import Direction, RoomState, materialize
from .schemas.room import TokensChunk
from .session import Session

logger = logging.getLogger(__name__)

FETCH_DESCRIPTION = "fetch room preview"


class PreviewState(Enum):
    """Where a preview is in its fetch lifecycle."""

    IDLE = "idle"
    SEEDED = "seeded"
    FETCH_IN_FLIGHT = "fetch_in_flight"
    MATERIALIZED = "materialized"
    FAILED = "failed"


class RoomPreviewData:
    """
    Preview of a room unknown to the local user.

    Attributes:
        session: Session used to fetch the room state
        state: Current lifecycle state
        last_failure: Outcome of the most recent failed fetch, if any
    """

    def __init__(
        self,
        session: Session,
        room_id: str,
        event_id: Optional[str] = None,
        email_invitation_params: Optional[Mapping[str, str]] = None,
        apply_stale_responses: bool = False,
    ):
        """
        Create a room preview.

        Args:
            session: The session
            room_id: Id of the room to preview
            event_id: Id of the event to preview (optional)
            email_invitation_params: E-mail invitation parameters (optional)
            apply_stale_responses: Let an older fetch that settles last
                                   replace the snapshot
        """
        if not room_id:
            raise ValueError("room_id must not be empty")

        self.session = session
        self._room_id = room_id
        self._event_id = event_id
        self._apply_stale_responses = apply_stale_responses

        self._room_email_invitation: Optional[RoomEmailInvitation] = None
        self._room_name: Optional[str] = None
        self._room_avatar_url: Optional[str] = None
        self._room_state: Optional[RoomState] = None
        self._messages: Optional[TokensChunk] = None
        self._fetch_seq = 0

        self.state = PreviewState.IDLE
        self.last_failure: Optional[Outcome] = None

        if email_invitation_params is not None:
            self._room_email_invitation = RoomEmailInvitation.from_params(
                email_invitation_params
            )
            self._room_name = self._room_email_invitation.room_name
            self._room_avatar_url = self._room_email_invitation.room_avatar_url
            self.state = PreviewState.SEEDED

    @property
    def room_id(self) -> str:
        return self._room_id

    @property
    def event_id(self) -> Optional[str]:
        return self._event_id

    @property
    def room_name(self) -> Optional[str]:
        """Name from the latest fetch, else from the invitation."""
        return self._room_name

    @property
    def room_avatar_url(self) -> Optional[str]:
        """Avatar from the latest fetch, else from the invitation."""
        return self._room_avatar_url

    @property
    def room_state(self) -> Optional[RoomState]:
        """Materialized state of the latest successful fetch, if any."""
        return self._room_state

    @property
    def messages(self) -> Optional[TokensChunk]:
        """Most recent messages returned by the latest successful fetch."""
        return self._messages

    @property
    def room_email_invitation(self) -> Optional[RoomEmailInvitation]:
        return self._room_email_invitation

    async def fetch_preview_data(
        self, callback: Optional[ApiCallback[None]] = None
    ) -> Outcome[None]:
        """
        Fetch the room state from the server and rebuild the preview.

        Args:
            callback: Optional callback notified once, with no payload on
                      success; read the result through the accessors

        Returns:
            Success(None), or the failure outcome of the initial sync
        """
        self._fetch_seq += 1
        seq = self._fetch_seq
        self.state = PreviewState.FETCH_IN_FLIGHT

        outcome = await self.session.rooms_api_client.initial_sync(
            self._room_id, description=FETCH_DESCRIPTION
        )

        if isinstance(outcome, Success):
            response = outcome.value
            try:
                room_state = materialize(
                    response.state,
                    Direction.FORWARDS,
                    initial=RoomState(room_id=self._room_id),
                    my_user_id=self.session.my_user_id,
                )
            except Exception as e:
                logger.error(
                    f"{FETCH_DESCRIPTION}: could not materialize state of "
                    f"{self._room_id}: {e}"
                )
                outcome = UnexpectedFailure(e)
            else:
                self._swap(seq, room_state, response.messages)
                outcome = Success(None)

        if not isinstance(outcome, Success) and seq == self._fetch_seq:
            self.state = PreviewState.FAILED
            self.last_failure = outcome

        if callback is not None:
            dispatch(outcome, callback)
        return outcome

    def _swap(
        self,
        seq: int,
        room_state: RoomState,
        messages: Optional[TokensChunk],
    ) -> None:
        """Install a freshly materialized snapshot, unless it is stale."""
        if seq != self._fetch_seq and not self._apply_stale_responses:
            logger.warning(
                f"Discarding stale preview of {self._room_id} "
                f"(fetch {seq}, latest {self._fetch_seq})"
            )
            return

        self._room_state = room_state
        self._messages = messages
        self._room_name = room_state.display_name
        self._room_avatar_url = room_state.avatar_url
        # A stale snapshot does not end a newer fetch still in flight
        if (
            seq == self._fetch_seq
            or self.state is not PreviewState.FETCH_IN_FLIGHT
        ):
            self.state = PreviewState.MATERIALIZED
            self.last_failure = None

        logger.info(
            f"Preview of {self._room_id} materialized: {self._room_name!r} "
            f"({len(room_state.entries)} state entries)"
        )
