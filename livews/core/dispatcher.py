from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable

from liveproto.codec import Codec
from liveproto.errors import ErrorCode, ProtocolError, StatusCode
from liveproto.framing import FrameBuilder
from liveproto.messages import DecodedContainer

from .events import ClientEvent, EventRegistry
from .transport import TransportMessage

logger = logging.getLogger(__name__)

SendBytes = Callable[[bytes], Awaitable[bool]]


class FrameDispatcher:
    """Classifies inbound transport messages, acks fetch results and publishes events."""

    def __init__(self, codec: Codec, builder: FrameBuilder, events: EventRegistry, send: SendBytes) -> None:
        self.codec = codec
        self.builder = builder
        self.events = events
        self._send = send

    async def handle(self, message: TransportMessage) -> None:
        await self.events.emit(ClientEvent.WEBSOCKET_DATA, message)

        if not message.is_binary:
            logger.debug("Non-binary message (%d chars)", len(message.utf8_data))
            await self.events.emit(ClientEvent.UNKNOWN_RESPONSE, message)
            return

        try:
            container = await self.codec.deserialize_message(message.binary_data)
        except ProtocolError as exc:
            await self._decoding_failed(exc)
            return
        except Exception as exc:
            error = ProtocolError(StatusCode.INTERNAL_ERROR, ErrorCode.DECODE_FAILED, f"Decode failed: {exc}")
            error.__cause__ = exc
            await self._decoding_failed(error)
            return

        result = container.proto_message_fetch_result
        if result is not None:
            if result.needs_ack:
                await self.send_ack(container)
            await self.events.emit(ClientEvent.PROTO_MESSAGE_FETCH_RESULT, result)

        if container.is_enter_room_response:
            await self.events.emit(ClientEvent.IM_ENTERED_ROOM, container)

    async def send_ack(self, container: DecodedContainer) -> bool:
        try:
            frame = self.builder.build_ack(container)
        except ProtocolError as exc:
            logger.warning("Ack for log_id=%s not built: %s", container.log_id, exc)
            return False
        if frame is None:
            return False
        sent = await self._send(frame)
        logger.debug("Ack log_id=%s sent=%s", container.log_id, sent)
        return sent

    async def _decoding_failed(self, error: ProtocolError) -> None:
        logger.warning("Message decoding failed: %s", error.to_payload())
        await self.events.emit(ClientEvent.MESSAGE_DECODING_FAILED, error)


__all__ = ["FrameDispatcher", "SendBytes"]
