"""
Login Client

Requests to the login and registration API. Every method builds an
AsyncOperation whose retry action re-issues the exact same request, so a
retry of a token login, for instance, reuses the original transaction id.
"""

import logging
import re
import uuid
from typing import Any, Dict, List, Optional

from .operation import AsyncOperation, RequestFactory
from .outcome import ApiCallback, Outcome, Success, dispatch
from .retry import RetryPolicy
from .schemas.login import (
    Credentials,
    LoginFlow,
    LoginFlowResponse,
    PasswordLoginParams,
    RegistrationParams,
    TokenLoginParams,
)
from .transport import Transport

logger = logging.getLogger(__name__)

_EMAIL_ADDRESS = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")


def _extract_flows(payload: Dict[str, Any]) -> List[LoginFlow]:
    return LoginFlowResponse.from_dict(payload).flows


class LoginClient:
    """
    Client for the login API.

    Attributes:
        credentials: Credentials of the last successful login or registration
    """

    def __init__(
        self, transport: Transport, retry_policy: Optional[RetryPolicy] = None
    ):
        """
        Initialize the login client.

        Args:
            transport: Transport executing the requests
            retry_policy: Default policy for network failures
        """
        self.credentials: Optional[Credentials] = None
        self._transport = transport
        self._retry_policy = retry_policy

    async def get_supported_login_flows(
        self, callback: Optional[ApiCallback[List[LoginFlow]]] = None
    ) -> Outcome[List[LoginFlow]]:
        """
        Retrieve the login flows supported by the server.

        It should be done before displaying a default login form.

        Args:
            callback: Optional callback notified of the outcome

        Returns:
            Success carrying the list of LoginFlow, or a failure outcome
        """
        operation = AsyncOperation(
            "get supported login flows",
            lambda: self._transport.request("GET", "/login"),
            transform=_extract_flows,
            callback=callback,
            retry_policy=self._retry_policy,
        )
        return await operation.run()

    async def register(
        self,
        params: RegistrationParams,
        callback: Optional[ApiCallback[Credentials]] = None,
    ) -> Outcome[Credentials]:
        """
        Request an account creation.

        Args:
            params: Registration parameters
            callback: Optional callback notified of the outcome

        Returns:
            Success carrying the new Credentials, or a failure outcome
        """
        body = params.to_dict()
        return await self._run_login(
            "register",
            lambda: self._transport.request("POST", "/register", body=body),
            callback,
        )

    async def login_with_password(
        self,
        user: str,
        password: str,
        callback: Optional[ApiCallback[Credentials]] = None,
    ) -> Outcome[Credentials]:
        """
        Attempt a user/password log in.

        A user that looks like an e-mail address is sent as a third-party
        identifier; anything else as a user name.

        Args:
            user: User name or e-mail address
            password: Password
            callback: Optional callback notified of the outcome

        Returns:
            Success carrying the Credentials, or a failure outcome
        """
        if _EMAIL_ADDRESS.match(user):
            params = PasswordLoginParams(
                password=password, medium="email", address=user
            )
        else:
            params = PasswordLoginParams(password=password, user=user)

        body = params.to_dict()
        return await self._run_login(
            f"login with password user: {user}",
            lambda: self._transport.request("POST", "/login", body=body),
            callback,
        )

    async def login_with_token(
        self,
        user: str,
        token: str,
        txn_id: Optional[str] = None,
        callback: Optional[ApiCallback[Credentials]] = None,
    ) -> Outcome[Credentials]:
        """
        Attempt a user/token log in.

        Args:
            user: User name
            token: Login token
            txn_id: Client transaction id (a random one if omitted)
            callback: Optional callback notified of the outcome

        Returns:
            Success carrying the Credentials, or a failure outcome
        """
        params = TokenLoginParams(
            user=user, token=token, txn_id=txn_id or str(uuid.uuid4())
        )
        body = params.to_dict()
        return await self._run_login(
            f"login with token user: {user}",
            lambda: self._transport.request("POST", "/login", body=body),
            callback,
        )

    async def _run_login(
        self,
        description: str,
        request: RequestFactory,
        callback: Optional[ApiCallback[Credentials]],
    ) -> Outcome[Credentials]:
        """Run a request returning credentials and remember them on success."""
        operation = AsyncOperation(
            description,
            request,
            transform=Credentials.from_dict,
            retry_policy=self._retry_policy,
        )
        outcome = await operation.run()
        if isinstance(outcome, Success):
            self.credentials = outcome.value
            logger.info(f"Logged in as {outcome.value.user_id}")
        if callback is not None:
            dispatch(outcome, callback)
        return outcome
