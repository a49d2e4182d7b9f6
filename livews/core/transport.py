"""
Websocket transport for the push channel.

``WebSocketTransport`` opens the connection in a background task and hands a
``WebSocketConnection`` to ``connect`` subscribers. The connection reads
messages in arrival order and reports ``close`` exactly once, whatever ended
the session.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from enum import StrEnum
from typing import Any, Dict, Mapping, Optional, Protocol, Union

from websockets.asyncio.client import ClientConnection, connect
from websockets.exceptions import ConnectionClosed, ConnectionClosedError, WebSocketException

from liveproto.constants import NORMAL_CLOSURE
from liveproto.errors import ErrorCode, ProtocolError, StatusCode

from .events import EventRegistry, Handler

logger = logging.getLogger(__name__)


class TransportError(ProtocolError):
    """Transport level error surfaced to higher layers."""

    pass


class TransportEvent(StrEnum):
    CONNECT = "connect"
    CONNECT_FAILED = "connect_failed"
    MESSAGE = "message"
    CLOSE = "close"


@dataclass
class TransportMessage:
    """An inbound websocket message, binary or text."""

    type: str
    binary_data: bytes = b""
    utf8_data: str = ""

    @property
    def is_binary(self) -> bool:
        return self.type == "binary"

    @classmethod
    def from_frame(cls, data: Union[str, bytes]) -> "TransportMessage":
        if isinstance(data, str):
            return cls(type="utf8", utf8_data=data)
        return cls(type="binary", binary_data=bytes(data))


class TransportConnection(Protocol):
    """Handle to one open duplex session."""

    def subscribe(self, kind: str, handler: Handler) -> None: ...

    async def send_bytes(self, data: bytes) -> None: ...

    async def close(self, code: int = NORMAL_CLOSURE) -> None: ...


class Transport(Protocol):
    def subscribe(self, kind: str, handler: Handler) -> None: ...

    def connect(
        self,
        url: str,
        *,
        origin: str,
        headers: Mapping[str, str],
        options: Optional[Mapping[str, Any]] = None,
    ) -> None: ...


class WebSocketConnection:
    def __init__(self, ws: ClientConnection) -> None:
        self._ws = ws
        self.events = EventRegistry()
        self._finished = False

    def subscribe(self, kind: str, handler: Handler) -> None:
        self.events.subscribe(kind, handler)

    async def send_bytes(self, data: bytes) -> None:
        try:
            await self._ws.send(data)
        except ConnectionClosed as exc:
            raise TransportError(StatusCode.SERVICE_UNAVAILABLE, ErrorCode.NOT_CONNECTED, f"Connection lost: {exc}") from exc

    async def close(self, code: int = NORMAL_CLOSURE) -> None:
        """Close, then report ``close`` without waiting for the reader loop."""
        await self._ws.close(code=code)
        await self._finish()

    async def run(self) -> None:
        try:
            async for data in self._ws:
                await self.events.emit(TransportEvent.MESSAGE, TransportMessage.from_frame(data))
        except ConnectionClosedError as exc:
            logger.warning("Connection closed abnormally: %s", exc)
        finally:
            await self._finish()

    async def _finish(self) -> None:
        if self._finished:
            return
        self._finished = True
        logger.debug("Connection closed (code=%s)", self._ws.close_code)
        await self.events.emit(TransportEvent.CLOSE)


class WebSocketTransport:
    """Opens websocket sessions and publishes ``connect`` / ``connect_failed``."""

    def __init__(self) -> None:
        self.events = EventRegistry()
        self._task: Optional[asyncio.Task] = None

    def subscribe(self, kind: str, handler: Handler) -> None:
        self.events.subscribe(kind, handler)

    def connect(
        self,
        url: str,
        *,
        origin: str,
        headers: Mapping[str, str],
        options: Optional[Mapping[str, Any]] = None,
    ) -> None:
        self._task = asyncio.create_task(
            self._run(url, origin, dict(headers), dict(options or {})), name="livews-transport"
        )

    async def _run(self, url: str, origin: str, headers: Dict[str, str], options: Dict[str, Any]) -> None:
        try:
            ws = await connect(url, origin=origin, additional_headers=headers, **options)
        except (OSError, asyncio.TimeoutError, WebSocketException) as exc:
            logger.warning("Connect to %s failed: %s", url.split("?", 1)[0], exc)
            error = TransportError(StatusCode.SERVICE_UNAVAILABLE, ErrorCode.NOT_CONNECTED, f"Connect failed: {exc}")
            await self.events.emit(TransportEvent.CONNECT_FAILED, error)
            return
        connection = WebSocketConnection(ws)
        await self.events.emit(TransportEvent.CONNECT, connection)
        await connection.run()


__all__ = [
    "Transport",
    "TransportConnection",
    "TransportError",
    "TransportEvent",
    "TransportMessage",
    "WebSocketConnection",
    "WebSocketTransport",
]
