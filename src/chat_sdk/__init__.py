"""
Chat SDK Package

This package provides the client-side pieces of the federated chat SDK:
resilient remote operations with explicit retry, login and registration,
and room previews built by replaying room state events.

Modules:
    - operation: AsyncOperation, the uniform outcome/retry wrapper
    - room_state: Folding state events into a RoomState snapshot
    - preview: RoomPreviewData, previewing a room before joining it
    - login_client / rooms_client: Endpoint clients
    - transport: HTTP and WebSocket transports
"""

from .config import ClientConfig, load_config
from .errors import ChatSDKError, NetworkError, ProtocolError, UnexpectedError
from .invitation import RoomEmailInvitation
from .login_client import LoginClient
from .operation import AsyncOperation
from .outcome import (
    ApiCallback,
    NetworkFailure,
    Outcome,
    ProtocolFailure,
    Success,
    UnexpectedFailure,
    dispatch,
)
from .preview import PreviewState, RoomPreviewData
from .retry import NO_RETRY, RetryPolicy
from .room_state import Direction, RoomState, materialize
from .rooms_client import RoomsClient
from .session import Session
from .transport import HttpTransport, Transport, WebSocketTransport
from .schemas import (
    Credentials,
    LoginFlow,
    RegistrationParams,
    RoomResponse,
    StateEvent,
    TokensChunk,
)

__all__ = [
    # Configuration and errors
    "ClientConfig",
    "load_config",
    "ChatSDKError",
    "NetworkError",
    "ProtocolError",
    "UnexpectedError",
    # Outcomes and operations
    "ApiCallback",
    "AsyncOperation",
    "NetworkFailure",
    "Outcome",
    "ProtocolFailure",
    "Success",
    "UnexpectedFailure",
    "dispatch",
    "NO_RETRY",
    "RetryPolicy",
    # Transports and clients
    "HttpTransport",
    "Transport",
    "WebSocketTransport",
    "LoginClient",
    "RoomsClient",
    "Session",
    # Room state and preview
    "Direction",
    "RoomState",
    "materialize",
    "PreviewState",
    "RoomPreviewData",
    "RoomEmailInvitation",
    # Schemas
    "Credentials",
    "LoginFlow",
    "RegistrationParams",
    "RoomResponse",
    "StateEvent",
    "TokensChunk",
]
