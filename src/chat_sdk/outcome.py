"""
Request Outcomes

Every remote operation settles into exactly one of four outcomes:

    - Success: the decoded and transformed payload
    - NetworkFailure: the server could not be reached
    - ProtocolFailure: the server answered with a structured error
    - UnexpectedFailure: the answer could not be decoded or transformed

ApiCallback is the callback-style view of the same four cases, for callers
that prefer to be notified rather than await a return value.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, Generic, Optional, TypeVar, Union

from .errors import ProtocolError

T = TypeVar("T")


@dataclass(frozen=True)
class Success(Generic[T]):
    """Successful outcome carrying the transformed payload."""

    value: T


@dataclass(frozen=True)
class NetworkFailure:
    """Outcome of a request that never reached the server."""

    cause: Exception


@dataclass(frozen=True)
class ProtocolFailure:
    """
    Outcome of a request rejected by the server.

    Attributes:
        errcode: Machine-readable error code, verbatim from the server
        error: Human-readable message, verbatim from the server
        status_code: HTTP status code, if any
        retry_after_ms: Server-suggested retry delay, if any
        details: Raw decoded error body
    """

    errcode: str
    error: str
    status_code: Optional[int] = None
    retry_after_ms: Optional[int] = None
    details: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_error(cls, exc: ProtocolError) -> "ProtocolFailure":
        """Create from a ProtocolError raised by a transport."""
        return cls(
            errcode=exc.errcode,
            error=exc.error,
            status_code=exc.status_code,
            retry_after_ms=exc.retry_after_ms,
            details=exc.details,
        )


@dataclass(frozen=True)
class UnexpectedFailure:
    """Outcome of a response that could not be decoded or transformed."""

    cause: Exception


Outcome = Union[Success[T], NetworkFailure, ProtocolFailure, UnexpectedFailure]


class ApiCallback(Generic[T]):
    """
    Callback with one hook per outcome.

    Subclasses override the hooks they care about. Exactly one hook is
    called per settled request.
    """

    def on_success(self, value: T) -> None:
        pass

    def on_network_error(self, exc: Exception) -> None:
        pass

    def on_protocol_error(self, failure: ProtocolFailure) -> None:
        pass

    def on_unexpected_error(self, exc: Exception) -> None:
        pass


def dispatch(outcome: "Outcome[T]", callback: ApiCallback[T]) -> None:
    """
    Route an outcome to the matching callback hook.

    Args:
        outcome: The settled outcome
        callback: Callback receiving exactly one notification
    """
    if isinstance(outcome, Success):
        callback.on_success(outcome.value)
    elif isinstance(outcome, NetworkFailure):
        callback.on_network_error(outcome.cause)
    elif isinstance(outcome, ProtocolFailure):
        callback.on_protocol_error(outcome)
    elif isinstance(outcome, UnexpectedFailure):
        callback.on_unexpected_error(outcome.cause)
    else:
        raise TypeError(f"Not an outcome: {outcome!r}")
