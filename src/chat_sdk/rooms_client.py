"""
Rooms Client

Requests to the room API. Only the initial sync, used to bootstrap a room
preview, is provided.
"""

from typing import Optional
from urllib.parse import quote

from .operation import AsyncOperation
from .outcome import ApiCallback, Outcome
from .retry import RetryPolicy
from .schemas.room import RoomResponse
from .transport import Transport


class RoomsClient:
    """Client for the room API."""

    def __init__(
        self, transport: Transport, retry_policy: Optional[RetryPolicy] = None
    ):
        self._transport = transport
        self._retry_policy = retry_policy

    async def initial_sync(
        self,
        room_id: str,
        callback: Optional[ApiCallback[RoomResponse]] = None,
        description: Optional[str] = None,
    ) -> Outcome[RoomResponse]:
        """
        Get the current state and the most recent messages of a room.

        Args:
            room_id: Id of the room
            callback: Optional callback notified of the outcome
            description: Label used in log lines

        Returns:
            Success carrying the RoomResponse, or a failure outcome
        """
        if not room_id:
            raise ValueError("room_id must not be empty")

        path = f"/rooms/{quote(room_id, safe='')}/initialSync"
        operation = AsyncOperation(
            description or f"initial sync {room_id}",
            lambda: self._transport.request("GET", path),
            transform=RoomResponse.from_dict,
            callback=callback,
            retry_policy=self._retry_policy,
        )
        return await operation.run()
