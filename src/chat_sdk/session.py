"""
Session

A Session ties a transport to the identity of the local user and hands out
the API clients built on top of it.
"""

import logging
from typing import Optional

from .login_client import LoginClient
from .retry import RetryPolicy
from .rooms_client import RoomsClient
from .transport import Transport

logger = logging.getLogger(__name__)


class Session:
    """
    Connection to one homeserver as one user.

    Attributes:
        transport: Transport executing every request of the session
        my_user_id: Id of the local user, if logged in
        rooms_api_client: Client for the room API
        login_client: Client for the login API
    """

    def __init__(
        self,
        transport: Transport,
        my_user_id: Optional[str] = None,
        retry_policy: Optional[RetryPolicy] = None,
    ):
        """
        Initialize the session.

        Args:
            transport: Transport executing the requests
            my_user_id: Id of the local user, if known
            retry_policy: Default policy for network failures
        """
        self.transport = transport
        self.my_user_id = my_user_id
        self.rooms_api_client = RoomsClient(transport, retry_policy)
        self.login_client = LoginClient(transport, retry_policy)

        logger.info(f"Session initialized for user: {my_user_id}")
