"""
Error Types for Remote Operations

Transports raise these exceptions; AsyncOperation turns them into outcomes.

Taxonomy:
    - NetworkError: the server could not be reached or the request timed out
    - ProtocolError: the server rejected the request with a structured code
    - UnexpectedError: the response could not be decoded into the expected shape
"""

from typing import Any, Dict, Optional


class ChatSDKError(Exception):
    """Base class for all errors raised by the SDK."""


class NetworkError(ChatSDKError):
    """
    Transport-level failure (connection refused, reset, timeout).

    Potentially retryable, depending on the caller's retry policy.
    """


class ProtocolError(ChatSDKError):
    """
    Structured rejection returned by the server.

    Attributes:
        errcode: Machine-readable error code (e.g., M_FORBIDDEN)
        error: Human-readable error message
        status_code: HTTP status code, if the transport has one
        retry_after_ms: Server-suggested delay before retrying, if any
        details: Raw decoded error body, kept verbatim
    """

    def __init__(
        self,
        errcode: str,
        error: str = "",
        status_code: Optional[int] = None,
        retry_after_ms: Optional[int] = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(f"{errcode}: {error}" if error else errcode)
        self.errcode = errcode
        self.error = error
        self.status_code = status_code
        self.retry_after_ms = retry_after_ms
        self.details = details if details is not None else {}

    @classmethod
    def from_body(
        cls, body: Dict[str, Any], status_code: Optional[int] = None
    ) -> "ProtocolError":
        """
        Build a ProtocolError from a decoded error body.

        Args:
            body: Decoded JSON error object
            status_code: HTTP status code of the response, if any

        Returns:
            ProtocolError with errcode defaulting to M_UNKNOWN
        """
        retry_after = body.get("retry_after_ms")
        return cls(
            errcode=body.get("errcode") or "M_UNKNOWN",
            error=body.get("error", ""),
            status_code=status_code,
            retry_after_ms=retry_after if isinstance(retry_after, int) else None,
            details=body,
        )


class UnexpectedError(ChatSDKError):
    """The response was received but could not be decoded or transformed."""
