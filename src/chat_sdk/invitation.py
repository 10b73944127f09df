"""
Room Email Invitation

Information extracted from the parameters of an e-mail invitation link. It
seeds a room preview before anything has been fetched from the server.
"""

from dataclasses import dataclass
from typing import Mapping, Optional


@dataclass(frozen=True)
class RoomEmailInvitation:
    """
    Parameters of an e-mail invitation.

    Attributes:
        email: Invited e-mail address
        sign_url: Identity server URL used to sign the invitation
        room_name: Name of the room at the time of the invitation
        room_avatar_url: Avatar of the room at the time of the invitation
        inviter_name: Display name of the inviter
        guest_access_token: Guest access token, if the server issued one
        guest_user_id: Guest user id, if the server issued one
    """

    email: Optional[str] = None
    sign_url: Optional[str] = None
    room_name: Optional[str] = None
    room_avatar_url: Optional[str] = None
    inviter_name: Optional[str] = None
    guest_access_token: Optional[str] = None
    guest_user_id: Optional[str] = None

    @classmethod
    def from_params(cls, params: Mapping[str, str]) -> "RoomEmailInvitation":
        """Create from invitation link parameters; absent keys stay None."""
        return cls(
            email=params.get("email"),
            sign_url=params.get("signurl"),
            room_name=params.get("room_name"),
            room_avatar_url=params.get("room_avatar_url"),
            inviter_name=params.get("inviter_name"),
            guest_access_token=params.get("guest_access_token"),
            guest_user_id=params.get("guest_user_id"),
        )
