"""
Client Configuration

Runtime settings for the SDK, read from environment variables.
"""

import os
from dataclasses import dataclass
from typing import Optional

DEFAULT_HOMESERVER_URL = "http://localhost:8008"
DEFAULT_API_PREFIX = "/_matrix/client/r0"
DEFAULT_REQUEST_TIMEOUT = 30.0  # seconds
DEFAULT_MAX_ATTEMPTS = 1  # no retry unless asked for
DEFAULT_RETRY_BACKOFF = 1.0  # seconds before the first retry, doubled after


@dataclass(frozen=True)
class ClientConfig:
    """
    Connection and retry settings.

    Attributes:
        homeserver_url: Base URL of the homeserver
        api_prefix: Path prefix of the client-server API
        request_timeout: Per-request timeout in seconds
        max_attempts: Total attempts per request (1 disables retries)
        retry_backoff: Delay before the first retry in seconds
        access_token: Optional access token sent with every request
    """

    homeserver_url: str = DEFAULT_HOMESERVER_URL
    api_prefix: str = DEFAULT_API_PREFIX
    request_timeout: float = DEFAULT_REQUEST_TIMEOUT
    max_attempts: int = DEFAULT_MAX_ATTEMPTS
    retry_backoff: float = DEFAULT_RETRY_BACKOFF
    access_token: Optional[str] = None


def load_config() -> ClientConfig:
    """Load a ClientConfig from CHAT_SDK_* environment variables."""
    max_attempts = int(
        os.getenv("CHAT_SDK_MAX_ATTEMPTS", str(DEFAULT_MAX_ATTEMPTS))
    )
    if max_attempts < 1:
        raise ValueError("CHAT_SDK_MAX_ATTEMPTS must be at least 1")

    return ClientConfig(
        homeserver_url=os.getenv(
            "CHAT_SDK_HOMESERVER_URL", DEFAULT_HOMESERVER_URL
        ),
        api_prefix=os.getenv("CHAT_SDK_API_PREFIX", DEFAULT_API_PREFIX),
        request_timeout=float(
            os.getenv("CHAT_SDK_REQUEST_TIMEOUT", str(DEFAULT_REQUEST_TIMEOUT))
        ),
        max_attempts=max_attempts,
        retry_backoff=float(
            os.getenv("CHAT_SDK_RETRY_BACKOFF", str(DEFAULT_RETRY_BACKOFF))
        ),
        access_token=os.getenv("CHAT_SDK_ACCESS_TOKEN"),
    )
