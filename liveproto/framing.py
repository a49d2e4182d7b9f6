"""
Outbound frame construction.

``FrameBuilder`` turns semantic requests (liveness, acknowledgement, room
switch) into encoded push frames ready for the transport.
"""

from __future__ import annotations

import logging
from typing import Optional

from .codec import Codec, ProtobufCodec
from .constants import ENCODING, PayloadEncoding, PayloadType
from .messages import DecodedContainer, EnterRoomRequest, PushFrame
from .validator import validate_frame

logger = logging.getLogger(__name__)


class FrameBuilder:
    def __init__(self, codec: Optional[Codec] = None) -> None:
        self.codec: Codec = codec or ProtobufCodec()

    def wrap(self, payload_type: PayloadType, payload: bytes, log_id: Optional[int] = None) -> bytes:
        """Wrap an encoded payload in a base push frame."""
        frame = PushFrame(
            log_id=log_id,
            payload_type=payload_type.value,
            payload_encoding=PayloadEncoding.PROTOBUF.value,
            payload=payload,
            headers={},
        )
        validate_frame(frame.to_schema_dict())
        return self.codec.encode_frame(frame)

    def build_heartbeat(self, room_id: str) -> bytes:
        return self.wrap(PayloadType.HEARTBEAT, self.codec.encode_heartbeat(room_id))

    def build_ack(self, container: DecodedContainer) -> Optional[bytes]:
        """
        Build the ack for a fetch result.

        Returns None when the frame has no log id (nothing to correlate) or no
        fetch result. The payload is the raw UTF-8 of ``internal_ext``.
        """
        result = container.proto_message_fetch_result
        if not container.log_id or result is None:
            logger.debug("Skipping ack for %s frame without log id", container.payload_type)
            return None
        return self.wrap(PayloadType.ACK, result.internal_ext.encode(ENCODING), log_id=container.log_id)

    def build_enter_room(self, room_id: str) -> bytes:
        request = EnterRoomRequest(room_id=room_id)
        return self.wrap(PayloadType.IM_ENTER_ROOM, self.codec.encode_enter_room(request))


__all__ = ["FrameBuilder"]
