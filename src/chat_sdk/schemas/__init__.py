"""
Schemas Package

This package contains request and response schemas for the client-server API.
Schemas are organized by category: login/registration and room operations.

The package provides base classes (BaseRequest, BaseResponse) that eliminate
code duplication for serialization and deserialization methods.
"""

from .base import BaseRequest, BaseResponse
from .login import (
    LOGIN_FLOW_TYPE_EMAIL_CODE,
    LOGIN_FLOW_TYPE_EMAIL_IDENTITY,
    LOGIN_FLOW_TYPE_EMAIL_RECAPTCHA,
    LOGIN_FLOW_TYPE_EMAIL_URL,
    LOGIN_FLOW_TYPE_OAUTH2,
    LOGIN_FLOW_TYPE_PASSWORD,
    LOGIN_FLOW_TYPE_TOKEN,
    Credentials,
    LoginFlow,
    LoginFlowResponse,
    PasswordLoginParams,
    RegistrationParams,
    TokenLoginParams,
)
from .room import (
    EVENT_TYPE_ROOM_ALIASES,
    EVENT_TYPE_ROOM_AVATAR,
    EVENT_TYPE_ROOM_CANONICAL_ALIAS,
    EVENT_TYPE_ROOM_MEMBER,
    EVENT_TYPE_ROOM_NAME,
    RoomResponse,
    StateEvent,
    TokensChunk,
)

__all__ = [
    # Base classes
    "BaseRequest",
    "BaseResponse",
    # Login schemas
    "LOGIN_FLOW_TYPE_PASSWORD",
    "LOGIN_FLOW_TYPE_OAUTH2",
    "LOGIN_FLOW_TYPE_EMAIL_CODE",
    "LOGIN_FLOW_TYPE_EMAIL_URL",
    "LOGIN_FLOW_TYPE_EMAIL_IDENTITY",
    "LOGIN_FLOW_TYPE_EMAIL_RECAPTCHA",
    "LOGIN_FLOW_TYPE_TOKEN",
    "Credentials",
    "LoginFlow",
    "LoginFlowResponse",
    "PasswordLoginParams",
    "RegistrationParams",
    "TokenLoginParams",
    # Room schemas
    "EVENT_TYPE_ROOM_NAME",
    "EVENT_TYPE_ROOM_AVATAR",
    "EVENT_TYPE_ROOM_MEMBER",
    "EVENT_TYPE_ROOM_CANONICAL_ALIAS",
    "EVENT_TYPE_ROOM_ALIASES",
    "RoomResponse",
    "StateEvent",
    "TokensChunk",
]
