"""
Python client session for the chat WebSocket.

Connects to ws/chat/ (or ws/chat/<chatroom_id>/), keeps the connection up
with bounded reconnects and routes {"event", "payload"} frames to
subscribed handlers.

Usage:
    from chat.client import ChatSession

    session = ChatSession("ws://localhost:8000/ws/chat/", access_token)
    unsubscribe = session.subscribe("message", on_message)

    await session.connect()
    await session.run()        # until close() or reconnects are exhausted

    unsubscribe()
    await session.close()

Subscriptions belong to the session: they survive reconnects and are
cleared by close(). Registering the same handler twice for an event is a
no-op, and unsubscribing twice is harmless.
"""

from __future__ import annotations

import asyncio
import json
import logging
from dataclasses import dataclass
from typing import Any, Callable
from urllib.parse import parse_qsl, urlencode, urlparse, urlunparse

import websockets
from websockets.exceptions import ConnectionClosed, WebSocketException

from chat.constants import REALTIME_CONFIG, RECONNECT_CONFIG

logger = logging.getLogger(__name__)

# Server close codes that a reconnect cannot fix
FINAL_CLOSE_CODES = frozenset(
    {
        REALTIME_CONFIG.CLOSE_UNAUTHENTICATED,
        REALTIME_CONFIG.CLOSE_FORBIDDEN,
        REALTIME_CONFIG.CLOSE_NOT_FOUND,
    }
)

Handler = Callable[[Any], Any]


@dataclass(frozen=True)
class ReconnectPolicy:
    """
    Bounded exponential backoff.

    Delays are in seconds: initial_delay, doubled per attempt, capped at
    max_delay. At most max_attempts connection attempts are made per
    (re)connect.
    """

    initial_delay: float = RECONNECT_CONFIG.INITIAL_DELAY_MS / 1000
    max_delay: float = RECONNECT_CONFIG.MAX_DELAY_MS / 1000
    max_attempts: int = RECONNECT_CONFIG.MAX_ATTEMPTS
    connect_timeout: float = RECONNECT_CONFIG.CONNECT_TIMEOUT_MS / 1000

    def delay(self, attempt: int) -> float:
        """Delay before the given retry (1-based)."""
        return min(self.initial_delay * (2 ** (attempt - 1)), self.max_delay)


class ChatSession:
    """
    One realtime connection plus its event subscriptions.

    Attributes:
        url: WebSocket URL; the token is added as ?token=
        reconnect: Backoff policy for connect and reconnect
        connection: Current websockets connection (None when disconnected)
    """

    def __init__(self, url: str, token: str, reconnect: ReconnectPolicy | None = None):
        self.url = _with_token(url, token)
        self.reconnect = reconnect or ReconnectPolicy()
        self.connection = None
        self._handlers: dict[str, list[Handler]] = {}
        self._closed = False

    # -------------------------------------------------------------------------
    # Subscriptions
    # -------------------------------------------------------------------------

    def subscribe(self, event: str, handler: Handler) -> Callable[[], None]:
        """
        Register a handler for an event.

        Returns:
            Function that removes this subscription
        """
        handlers = self._handlers.setdefault(event, [])
        if handler not in handlers:
            handlers.append(handler)

        def unsubscribe() -> None:
            registered = self._handlers.get(event)
            if registered and handler in registered:
                registered.remove(handler)
                if not registered:
                    del self._handlers[event]

        return unsubscribe

    def handlers(self, event: str) -> list[Handler]:
        return list(self._handlers.get(event, []))

    def dispatch(self, frame: str | bytes | dict) -> int:
        """
        Route a server frame to the handlers of its event.

        A failing handler is logged and does not stop the others.

        Returns:
            Number of handlers that ran without raising
        """
        if isinstance(frame, (str, bytes)):
            try:
                frame = json.loads(frame)
            except ValueError:
                logger.warning("Dropping non-JSON frame")
                return 0

        if not isinstance(frame, dict) or "event" not in frame:
            logger.warning("Dropping frame without event name")
            return 0

        event = frame["event"]
        payload = frame.get("payload")

        delivered = 0
        for handler in self.handlers(event):
            try:
                handler(payload)
            except Exception:
                logger.exception(f"Handler for {event} failed")
                continue
            delivered += 1
        return delivered

    # -------------------------------------------------------------------------
    # Connection lifecycle
    # -------------------------------------------------------------------------

    async def connect(self) -> None:
        """
        Open the connection, retrying with backoff.

        Raises:
            ConnectionError: All attempts failed
        """
        self._closed = False
        policy = self.reconnect
        last_error: Exception | None = None

        for attempt in range(1, policy.max_attempts + 1):
            try:
                self.connection = await asyncio.wait_for(
                    websockets.connect(self.url, open_timeout=policy.connect_timeout),
                    timeout=policy.connect_timeout,
                )
            except (OSError, asyncio.TimeoutError, WebSocketException) as e:
                last_error = e
                logger.warning(
                    f"Connect attempt {attempt}/{policy.max_attempts} failed: {e!r}"
                )
                if attempt < policy.max_attempts:
                    await asyncio.sleep(policy.delay(attempt))
                continue

            logger.info(f"Connected to chat realtime (attempt {attempt})")
            return

        raise ConnectionError(
            f"Could not connect after {policy.max_attempts} attempts"
        ) from last_error

    async def run(self) -> None:
        """
        Receive frames and dispatch them until close() is called.

        A dropped connection is re-established with the reconnect policy;
        ConnectionError propagates once it is exhausted. A close with 4001,
        4003 or 4004 (for example after being removed from the chatroom)
        ends the session instead.
        """
        while not self._closed:
            if self.connection is None:
                await self.connect()

            try:
                async for raw in self.connection:
                    self.dispatch(raw)
            except ConnectionClosed as e:
                code = e.rcvd.code if e.rcvd is not None else None
                if code in FINAL_CLOSE_CODES:
                    logger.warning(f"Chat realtime connection closed by server ({code})")
                    self.connection = None
                    self._closed = True
                    return
                logger.warning(f"Chat realtime connection dropped: {e!r}")

            self.connection = None

    async def close(self) -> None:
        """Close the connection and clear every subscription."""
        self._closed = True
        self._handlers.clear()

        connection, self.connection = self.connection, None
        if connection is not None:
            await connection.close()
            logger.info("Chat realtime session closed")


def _with_token(url: str, token: str) -> str:
    parts = urlparse(url)
    query = [(k, v) for k, v in parse_qsl(parts.query) if k != "token"]
    query.append(("token", token))
    return urlunparse(parts._replace(query=urlencode(query)))
