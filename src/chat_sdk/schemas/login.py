"""
Login Schema Definitions

This module defines the request bodies and responses of the login and
registration endpoints.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from .base import BaseRequest, BaseResponse

LOGIN_FLOW_TYPE_PASSWORD = "m.login.password"
LOGIN_FLOW_TYPE_OAUTH2 = "m.login.oauth2"
LOGIN_FLOW_TYPE_EMAIL_CODE = "m.login.email.code"
LOGIN_FLOW_TYPE_EMAIL_URL = "m.login.email.url"
LOGIN_FLOW_TYPE_EMAIL_IDENTITY = "m.login.email.identity"
LOGIN_FLOW_TYPE_EMAIL_RECAPTCHA = "m.login.recaptcha"
LOGIN_FLOW_TYPE_TOKEN = "m.login.token"


@dataclass
class LoginFlow:
    """
    One login flow supported by the server.

    Attributes:
        type: Flow type (e.g., m.login.password)
        stages: Ordered stage types, for multi-stage flows
    """

    type: str
    stages: List[str] = field(default_factory=list)


@dataclass
class LoginFlowResponse(BaseResponse):
    """Response listing the login flows supported by the server."""

    flows: List[LoginFlow]

    @classmethod
    def _from_data(cls, data: Dict[str, Any]) -> "LoginFlowResponse":
        """Create from response data dictionary."""
        flows = [
            LoginFlow(
                type=flow["type"],
                stages=list(flow.get("stages", [])),
            )
            for flow in data["flows"]
        ]
        return cls(flows=flows)


@dataclass
class PasswordLoginParams(BaseRequest):
    """
    Body of a user/password login.

    Exactly one of `user` or (`medium`, `address`) identifies the account.
    """

    password: str
    user: Optional[str] = None
    medium: Optional[str] = None
    address: Optional[str] = None
    type: str = LOGIN_FLOW_TYPE_PASSWORD


@dataclass
class TokenLoginParams(BaseRequest):
    """
    Body of a user/token login.

    Attributes:
        user: User name
        token: Login token
        txn_id: Client transaction id, constant across retries of one login
    """

    user: str
    token: str
    txn_id: str
    type: str = LOGIN_FLOW_TYPE_TOKEN


@dataclass
class RegistrationParams(BaseRequest):
    """
    Body of an account registration request.

    Attributes:
        username: Requested local part of the user id
        password: Account password
        auth: Interactive-auth dictionary for the current stage
        bind_email: Whether to bind the e-mail used during auth
        initial_device_display_name: Display name of the new device
    """

    username: Optional[str] = None
    password: Optional[str] = None
    auth: Optional[Dict[str, Any]] = None
    bind_email: Optional[bool] = None
    initial_device_display_name: Optional[str] = None


@dataclass
class Credentials(BaseResponse):
    """
    Credentials returned by a successful login or registration.

    Attributes:
        user_id: Fully qualified user id
        access_token: Token authenticating further requests
        home_server: Server name the account lives on
        device_id: Id of the device the token is bound to
        refresh_token: Optional token used to refresh the access token
    """

    user_id: str
    access_token: str
    home_server: Optional[str] = None
    device_id: Optional[str] = None
    refresh_token: Optional[str] = None

    @classmethod
    def _from_data(cls, data: Dict[str, Any]) -> "Credentials":
        """Create from response data dictionary, ignoring unknown keys."""
        return cls(
            user_id=data["user_id"],
            access_token=data["access_token"],
            home_server=data.get("home_server"),
            device_id=data.get("device_id"),
            refresh_token=data.get("refresh_token"),
        )
