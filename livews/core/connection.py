from __future__ import annotations

import asyncio
import logging
from enum import Enum
from typing import Any, Dict, Mapping, Optional, Union
from urllib.parse import urlencode

from liveproto.codec import Codec, ProtobufCodec
from liveproto.constants import NORMAL_CLOSURE
from liveproto.errors import ProtocolError, StatusCode
from liveproto.framing import FrameBuilder
from liveproto.messages import RoomParameters
from liveproto.validator import validate_room_params
from livews.config import CLIENT_CONFIG, DEFAULT_CONFIG

from .dispatcher import FrameDispatcher
from .events import ClientEvent, EventRegistry, Handler
from .heartbeat import HeartbeatScheduler
from .session import CookieJar
from .transport import Transport, TransportConnection, TransportError, TransportEvent, WebSocketTransport

logger = logging.getLogger(__name__)


class ConnectionState(Enum):
    DISCONNECTED = "disconnected"
    CONNECTING = "connecting"
    CONNECTED = "connected"
    CLOSING = "closing"


class PushConnection:
    """Push-channel client: connect, heartbeat, ack, room switch and graceful close."""

    def __init__(
        self,
        cookie_jar: Optional[CookieJar] = None,
        transport: Optional[Transport] = None,
        codec: Optional[Codec] = None,
        config: Optional[Dict[str, Any]] = None,
        heartbeat_interval_ms: Optional[int] = None,
    ) -> None:
        self.config = {**DEFAULT_CONFIG, **(config or CLIENT_CONFIG)}
        self.cookie_jar = cookie_jar or CookieJar.from_string(self.config.get("session_cookie", ""))
        self.transport: Transport = transport or WebSocketTransport()
        self.codec: Codec = codec or ProtobufCodec()
        self.builder = FrameBuilder(self.codec)
        self.events = EventRegistry()
        self.dispatcher = FrameDispatcher(self.codec, self.builder, self.events, self.send_bytes)
        interval = heartbeat_interval_ms or int(self.config["heartbeat_interval_ms"])
        self.heartbeat = HeartbeatScheduler(self.send_heartbeat, interval)

        self.state = ConnectionState.DISCONNECTED
        self.url: str = ""
        self.headers: Dict[str, str] = {}
        self.params: Optional[RoomParameters] = None
        self.connection: Optional[TransportConnection] = None
        self._close_waiter: Optional[asyncio.Future] = None

        self.transport.subscribe(TransportEvent.CONNECT, self._on_connect)
        self.transport.subscribe(TransportEvent.CONNECT_FAILED, self._on_connect_failed)

    @property
    def is_connected(self) -> bool:
        return self.state is ConnectionState.CONNECTED and self.connection is not None

    def on(self, event: Union[ClientEvent, str], handler: Handler) -> None:
        self.events.subscribe(event, handler)

    def connect(
        self,
        url: str,
        params: Union[RoomParameters, Mapping[str, Any]],
        headers: Optional[Mapping[str, str]] = None,
        options: Optional[Mapping[str, Any]] = None,
    ) -> None:
        """Start connecting; ``ClientEvent.CONNECT`` or ``ClientEvent.CLOSE`` reports the outcome."""
        if self.state is not ConnectionState.DISCONNECTED:
            raise ProtocolError(StatusCode.BAD_REQUEST, message=f"Cannot connect while {self.state.value}")

        room = params if isinstance(params, RoomParameters) else RoomParameters.from_dict(dict(params))
        query = room.to_query()
        validate_room_params(query)

        self.params = room
        self.url = f"{url}?{urlencode(query)}{self.config['params_append']}"
        self.headers = {"Cookie": self.cookie_jar.get_cookie_string(), **(headers or {})}
        self.state = ConnectionState.CONNECTING
        logger.info("Connecting to room %s", room.room_id)
        self.transport.connect(
            self.url,
            origin=f"https://{self.config['web_host']}",
            headers=self.headers,
            options=options,
        )

    async def send_bytes(self, data: bytes) -> bool:
        """Send through the active connection; False when there is none."""
        if self.connection is None:
            logger.debug("Dropping %d bytes: not connected", len(data))
            return False
        try:
            await self.connection.send_bytes(data)
        except TransportError as exc:
            logger.warning("Send failed: %s", exc.message)
            return False
        return True

    async def send_heartbeat(self) -> bool:
        if self.params is None:
            return False
        return await self.send_bytes(self.builder.build_heartbeat(self.params.room_id))

    async def switch_rooms(self, room_id: str) -> bool:
        """Ask the service to move this session to ``room_id``; the reply arrives as ``im_entered_room``."""
        logger.info("Switching to room %s", room_id)
        return await self.send_bytes(self.builder.build_enter_room(room_id))

    async def close(self) -> None:
        """Close gracefully; returns once the close event has fired."""
        if self.connection is None:
            return
        waiter = self._close_waiter
        if waiter is None:
            waiter = self._close_waiter = asyncio.get_running_loop().create_future()
            self.state = ConnectionState.CLOSING
            try:
                await self.connection.close(NORMAL_CLOSURE)
            except Exception as exc:
                logger.warning("Close request failed: %s", exc)
                if self._close_waiter is waiter:
                    self._close_waiter = None
                    if self.connection is not None:
                        self.state = ConnectionState.CONNECTED
                if not waiter.done():
                    waiter.set_exception(exc)
        await asyncio.shield(waiter)

    async def _on_connect(self, connection: TransportConnection) -> None:
        self.connection = connection
        self.state = ConnectionState.CONNECTED
        connection.subscribe(TransportEvent.MESSAGE, self.dispatcher.handle)
        connection.subscribe(TransportEvent.CLOSE, self._on_disconnect)
        await self.send_heartbeat()
        self.heartbeat.start()
        logger.info("Connected to room %s", self.params.room_id if self.params else "?")
        await self.events.emit(ClientEvent.CONNECT, connection)

    async def _on_connect_failed(self, error: TransportError) -> None:
        logger.warning("Connection failed: %s", error.message)
        await self._on_disconnect()

    async def _on_disconnect(self) -> None:
        self.heartbeat.cancel()
        self.connection = None
        self.state = ConnectionState.DISCONNECTED
        waiter, self._close_waiter = self._close_waiter, None
        logger.info("Push connection closed")
        await self.events.emit(ClientEvent.CLOSE)
        if waiter is not None and not waiter.done():
            waiter.set_result(None)


__all__ = ["ConnectionState", "PushConnection"]
