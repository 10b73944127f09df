#!/usr/bin/env python3
"""
Room Preview Demo

Previews a room from the command line: runs one initial sync through the
SDK and prints the resolved name, avatar and number of state entries.

Usage:
    chat-preview --room-id '!abc:example.org'
    chat-preview --homeserver https://example.org --room-id '!abc:example.org'
    chat-preview --transport ws --homeserver ws://localhost:8000 --room-id ...

Defaults for the homeserver, access token and retries come from the
CHAT_SDK_* environment variables.
"""

import argparse
import asyncio
import logging
import sys
from dataclasses import replace
from typing import List, Optional

from .config import load_config
from .outcome import ApiCallback, ProtocolFailure
from .preview import RoomPreviewData
from .retry import RetryPolicy
from .session import Session
from .transport import HttpTransport, WebSocketTransport

logger = logging.getLogger(__name__)


class _PrintingCallback(ApiCallback[None]):
    """Reports the outcome of the fetch on the terminal."""

    def __init__(self, preview: RoomPreviewData):
        self.preview = preview
        self.failed = False

    def on_success(self, value: None) -> None:
        room_state = self.preview.room_state
        print(f"Room:    {self.preview.room_id}")
        print(f"Name:    {self.preview.room_name}")
        print(f"Avatar:  {self.preview.room_avatar_url or '-'}")
        print(f"State:   {len(room_state.entries) if room_state else 0} entries")

    def on_network_error(self, exc: Exception) -> None:
        self.failed = True
        print(f"Network error: {exc}", file=sys.stderr)

    def on_protocol_error(self, failure: ProtocolFailure) -> None:
        self.failed = True
        print(f"Server error {failure.errcode}: {failure.error}", file=sys.stderr)

    def on_unexpected_error(self, exc: Exception) -> None:
        self.failed = True
        print(f"Unexpected error: {exc}", file=sys.stderr)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Preview a chat room")
    parser.add_argument("--homeserver", help="Homeserver or gateway URL")
    parser.add_argument("--room-id", required=True, help="Room to preview")
    parser.add_argument("--event-id", help="Event to preview")
    parser.add_argument("--user-id", help="Local user id, for room naming")
    parser.add_argument("--access-token", help="Access token")
    parser.add_argument(
        "--transport",
        choices=("http", "ws"),
        default="http",
        help="Transport to use (default: http)",
    )
    parser.add_argument(
        "--retries",
        type=int,
        help="Retries on network failure (default: from environment)",
    )
    parser.add_argument(
        "-v", "--verbose", action="store_true", help="Enable debug logging"
    )
    return parser


async def preview_room(args: argparse.Namespace) -> bool:
    """
    Run one preview fetch.

    Returns:
        True if the preview was fetched successfully
    """
    config = load_config()
    overrides = {}
    if args.homeserver:
        overrides["homeserver_url"] = args.homeserver
    if args.access_token:
        overrides["access_token"] = args.access_token
    if args.retries is not None:
        overrides["max_attempts"] = args.retries + 1
    config = replace(config, **overrides)

    if args.transport == "ws":
        transport = WebSocketTransport(config.homeserver_url)
        await transport.connect()
    else:
        transport = HttpTransport(config)

    try:
        session = Session(
            transport,
            my_user_id=args.user_id,
            retry_policy=RetryPolicy.from_config(config),
        )
        preview = RoomPreviewData(session, args.room_id, args.event_id)
        callback = _PrintingCallback(preview)
        await preview.fetch_preview_data(callback)
        return not callback.failed
    finally:
        if isinstance(transport, WebSocketTransport):
            await transport.disconnect()
        else:
            await transport.aclose()


def main(argv: Optional[List[str]] = None) -> None:
    """Main entry point for the preview demo."""
    args = build_parser().parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    try:
        ok = asyncio.run(preview_room(args))
    except KeyboardInterrupt:
        print("\nExiting...")
        sys.exit(0)
    except Exception as e:
        logger.error(f"Preview failed: {e}")
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)

    sys.exit(0 if ok else 1)


if __name__ == "__main__":
    main()
