"""
Transports for the Client-Server API

A transport executes one request and either returns the decoded JSON object
of a successful response or raises one of:

    - NetworkError: the server could not be reached, or the connection dropped
    - ProtocolError: the server answered with a structured error
    - UnexpectedError: the answer could not be decoded

Two implementations are provided:
    - HttpTransport: plain HTTP(S) requests through httpx
    - WebSocketTransport: request/response frames over a WebSocket connection,
      for gateways that tunnel the API over a persistent connection

Both support dependency injection of the network layer for testability.
"""

import asyncio
import json
import logging
import uuid
from typing import Any, Callable, Dict, Optional, Protocol

import httpx
import websockets
import websockets.exceptions

from .config import ClientConfig
from .errors import NetworkError, ProtocolError, UnexpectedError

logger = logging.getLogger(__name__)

# Frames received while waiting for a reply before giving up
DEFAULT_MAX_SKIPPED_FRAMES = 10


class Transport(Protocol):
    """Anything able to execute one API request."""

    async def request(
        self,
        method: str,
        path: str,
        body: Optional[Dict[str, Any]] = None,
        params: Optional[Dict[str, Any]] = None,
    ) -> Dict[str, Any]:
        ...


class HttpTransport:
    """
    Transport sending requests over HTTP with httpx.

    Attributes:
        config: Client configuration (base URL, prefix, timeout)
        access_token: Token sent as a bearer credential, if set
    """

    def __init__(
        self,
        config: Optional[ClientConfig] = None,
        http_transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """
        Initialize the transport.

        Args:
            config: Client configuration (defaults to ClientConfig())
            http_transport: Optional httpx transport (for testing)
        """
        self.config = config or ClientConfig()
        self.access_token = self.config.access_token
        self._client = httpx.AsyncClient(
            base_url=self.config.homeserver_url,
            timeout=self.config.request_timeout,
            transport=http_transport,
        )

        logger.info(
            f"HttpTransport initialized for {self.config.homeserver_url}"
        )

    async def request(
        self,
        method: str,
        path: str,
        body: Optional[Dict[str, Any]] = None,
        params: Optional[Dict[str, Any]] = None,
    ) -> Dict[str, Any]:
        """
        Send one request and decode the response.

        Args:
            method: HTTP method
            path: Endpoint path below the API prefix (e.g., /login)
            body: Optional JSON body
            params: Optional query parameters

        Returns:
            The decoded JSON object of a successful response

        Raises:
            NetworkError: On connection failure or timeout
            ProtocolError: On an HTTP error status
            UnexpectedError: If the response body is not a JSON object
        """
        url = self.config.api_prefix + path
        headers = {}
        if self.access_token:
            headers["Authorization"] = f"Bearer {self.access_token}"

        logger.debug(f"{method} {url}")
        try:
            response = await self._client.request(
                method, url, json=body, params=params, headers=headers
            )
        except httpx.TransportError as e:
            raise NetworkError(f"{method} {url} failed: {e}") from e

        try:
            data = response.json()
        except ValueError as e:
            if response.is_error:
                raise ProtocolError(
                    "M_UNKNOWN",
                    response.reason_phrase,
                    status_code=response.status_code,
                ) from e
            raise UnexpectedError(
                f"{method} {url} returned a non-JSON body"
            ) from e

        if response.is_error:
            raise ProtocolError.from_body(
                data if isinstance(data, dict) else {}, response.status_code
            )
        if not isinstance(data, dict):
            raise UnexpectedError(
                f"{method} {url} returned {type(data).__name__}, "
                "expected an object"
            )
        return data

    async def aclose(self) -> None:
        """Close the underlying HTTP client."""
        await self._client.aclose()

    async def __aenter__(self) -> "HttpTransport":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()


class WebSocketTransport:
    """
    Transport tunnelling requests over a WebSocket connection.

    Frame Format:
        request:  {"type": "request",
                   "data": {"request_id", "method", "path", "body", "params"}}
        reply:    {"type": "response", "data": {"request_id", "body"}}
        error:    {"type": "error",
                   "data": {"request_id", "status", "body"}}

    Requests share the connection one at a time: a request holds the
    exchange lock from sending its frame until its reply arrives. Frames
    that are not a reply to the pending request, including undecodable
    ones, are skipped.

    Attributes:
        url: WebSocket URL of the gateway (e.g., ws://localhost:8000)
        websocket: Active WebSocket connection (None if not connected)
    """

    def __init__(
        self,
        url: str,
        websocket_factory: Optional[Callable] = None,
        max_skipped_frames: int = DEFAULT_MAX_SKIPPED_FRAMES,
    ):
        """
        Initialize the transport.

        Args:
            url: WebSocket URL of the gateway
            websocket_factory: Optional factory for creating WebSocket
                             connections (for dependency injection/testing)
            max_skipped_frames: Unrelated frames tolerated per request
        """
        self.url = url
        self.websocket = None
        self.max_skipped_frames = max_skipped_frames
        self._websocket_factory = websocket_factory or websockets.connect
        self._connected = False
        self._exchange_lock: Optional[asyncio.Lock] = None

        logger.info(f"WebSocketTransport initialized for {url}")

    async def connect(self) -> None:
        """
        Establish the WebSocket connection.

        Raises:
            NetworkError: If the connection fails
        """
        try:
            logger.info(f"Connecting to {self.url}...")
            self.websocket = await self._websocket_factory(self.url)
            self._exchange_lock = asyncio.Lock()
            self._connected = True
            logger.info("Successfully connected to gateway")
        except (
            OSError,
            asyncio.TimeoutError,
            websockets.exceptions.WebSocketException,
        ) as e:
            logger.error(f"Failed to connect to gateway: {e}")
            raise NetworkError(f"Could not connect to {self.url}: {e}") from e

    async def disconnect(self) -> None:
        """Close the WebSocket connection."""
        if self.websocket:
            await self.websocket.close()
            self.websocket = None
            self._connected = False
            logger.info("Disconnected from gateway")

    @property
    def is_connected(self) -> bool:
        """Check if currently connected to the gateway."""
        return self._connected and self.websocket is not None

    async def request(
        self,
        method: str,
        path: str,
        body: Optional[Dict[str, Any]] = None,
        params: Optional[Dict[str, Any]] = None,
    ) -> Dict[str, Any]:
        """
        Send one request frame and wait for its reply.

        Args:
            method: HTTP method of the tunnelled request
            path: Endpoint path below the API prefix
            body: Optional JSON body
            params: Optional query parameters

        Returns:
            The body of the matching response frame

        Raises:
            NetworkError: If not connected, the connection drops, or no
                          reply arrives within max_skipped_frames frames
            ProtocolError: On a matching error frame
            UnexpectedError: On a matching reply of unknown type or with
                             a non-object body
        """
        if not self.is_connected:
            raise NetworkError("Not connected to a gateway")

        request_id = uuid.uuid4().hex
        frame = {
            "type": "request",
            "data": {
                "request_id": request_id,
                "method": method,
                "path": path,
                "body": body,
                "params": params,
            },
        }

        try:
            async with self._exchange_lock:
                # The connection may have dropped while waiting for the lock
                if not self.is_connected:
                    raise NetworkError(f"Connection to {self.url} closed")
                await self.websocket.send(json.dumps(frame))

                # Other frames (e.g., server notices) may be pending
                for _ in range(self.max_skipped_frames):
                    raw = await self.websocket.recv()
                    reply = self._decode_frame(raw)
                    if reply is None:
                        logger.debug(f"Skipping undecodable frame: {raw!r:.80}")
                        continue
                    reply_data = reply.get("data")
                    if not isinstance(reply_data, dict):
                        reply_data = {}
                    if reply_data.get("request_id") != request_id:
                        logger.debug(
                            f"Skipping unrelated frame: {reply.get('type')}"
                        )
                        continue
                    return self._unwrap_reply(reply.get("type"), reply_data)
        except websockets.exceptions.ConnectionClosed as e:
            self._connected = False
            raise NetworkError(f"Connection to {self.url} closed: {e}") from e
        except OSError as e:
            raise NetworkError(f"Connection to {self.url} failed: {e}") from e

        logger.error(f"No reply to {method} {path}")
        raise NetworkError(f"Timed out waiting for reply to {method} {path}")

    @staticmethod
    def _decode_frame(raw: Any) -> Optional[Dict[str, Any]]:
        """Decode a frame, or return None if it is not a JSON object."""
        try:
            frame = json.loads(raw)
        except (TypeError, ValueError):
            return None
        return frame if isinstance(frame, dict) else None

    @staticmethod
    def _unwrap_reply(frame_type: Any, data: Dict[str, Any]) -> Dict[str, Any]:
        body = data.get("body")
        if frame_type == "error":
            raise ProtocolError.from_body(
                body if isinstance(body, dict) else {}, data.get("status")
            )
        if frame_type != "response":
            raise UnexpectedError(f"Unknown reply type: {frame_type}")
        if not isinstance(body, dict):
            raise UnexpectedError("Reply body is not a JSON object")
        return body
