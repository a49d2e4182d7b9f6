from __future__ import annotations

import asyncio
import gzip
import logging
import zlib
from typing import Protocol

from google.protobuf.message import DecodeError
from pydantic import ValidationError

from .constants import COMPRESS_HEADER, GZIP_MAGIC, PayloadType
from .errors import ErrorCode, ProtocolError, StatusCode
from .messages import DecodedContainer, EnterRoomRequest, FetchedMessage, FetchResult, PushFrame
from .schema import BaseProtoMessageProto, FetchResultProto, HeartbeatProto, ImEnterRoomProto, PushFrameProto

logger = logging.getLogger(__name__)


class Codec(Protocol):
    """Wire serialization of push frames and their typed payloads."""

    def encode_frame(self, frame: PushFrame) -> bytes: ...

    def decode_frame(self, data: bytes) -> PushFrame: ...

    def encode_heartbeat(self, room_id: str) -> bytes: ...

    def decode_heartbeat(self, data: bytes) -> str: ...

    def encode_enter_room(self, request: EnterRoomRequest) -> bytes: ...

    def decode_enter_room(self, data: bytes) -> EnterRoomRequest: ...

    async def deserialize_message(self, data: bytes) -> DecodedContainer: ...


class ProtobufCodec:
    """Protobuf implementation of :class:`Codec`."""

    def encode_frame(self, frame: PushFrame) -> bytes:
        try:
            proto = PushFrameProto(
                seqId=frame.seq_id or 0,
                logId=frame.log_id or 0,
                service=frame.service or 0,
                method=frame.method or 0,
                headers=frame.headers,
                payloadEncoding=frame.payload_encoding,
                payloadType=frame.payload_type,
                payload=frame.payload,
            )
            return proto.SerializeToString()
        except (TypeError, ValueError) as exc:
            raise ProtocolError(StatusCode.BAD_REQUEST, ErrorCode.ENCODE_FAILED, f"Encode failed: {exc}") from exc

    def decode_frame(self, data: bytes) -> PushFrame:
        proto = PushFrameProto()
        try:
            proto.ParseFromString(data)
        except DecodeError as exc:
            raise ProtocolError(StatusCode.BAD_REQUEST, ErrorCode.DECODE_FAILED, f"Decode failed: {exc}") from exc
        if not proto.payloadType:
            raise ProtocolError(StatusCode.BAD_REQUEST, ErrorCode.INVALID_FRAME, "Push frame has no payload type")
        return PushFrame(
            seq_id=proto.seqId or None,
            log_id=proto.logId or None,
            service=proto.service or None,
            method=proto.method or None,
            headers=dict(proto.headers),
            payload_encoding=proto.payloadEncoding,
            payload_type=proto.payloadType,
            payload=proto.payload,
        )

    def encode_heartbeat(self, room_id: str) -> bytes:
        try:
            return HeartbeatProto(roomId=int(room_id)).SerializeToString()
        except (TypeError, ValueError) as exc:
            raise ProtocolError(StatusCode.BAD_REQUEST, ErrorCode.INVALID_PARAMS, f"Invalid room id {room_id!r}") from exc

    def decode_heartbeat(self, data: bytes) -> str:
        proto = HeartbeatProto()
        try:
            proto.ParseFromString(data)
        except DecodeError as exc:
            raise ProtocolError(StatusCode.BAD_REQUEST, ErrorCode.DECODE_FAILED, f"Decode failed: {exc}") from exc
        return str(proto.roomId)

    def encode_enter_room(self, request: EnterRoomRequest) -> bytes:
        proto = ImEnterRoomProto(
            roomId=request.room_id,
            roomTag=request.room_tag,
            liveRegion=request.live_region,
            liveId=request.live_id,
            identity=request.identity,
            cursor=request.cursor,
            accountType=request.account_type,
            enterUniqueId=request.enter_unique_id,
            filterWelcomeMsg=request.filter_welcome_msg,
            isAnchorContinueKeepMsg=request.is_anchor_continue_keep_msg,
        )
        return proto.SerializeToString()

    def decode_enter_room(self, data: bytes) -> EnterRoomRequest:
        proto = ImEnterRoomProto()
        try:
            proto.ParseFromString(data)
        except DecodeError as exc:
            raise ProtocolError(StatusCode.BAD_REQUEST, ErrorCode.DECODE_FAILED, f"Decode failed: {exc}") from exc
        return EnterRoomRequest(
            room_id=proto.roomId,
            room_tag=proto.roomTag,
            live_region=proto.liveRegion,
            live_id=proto.liveId,
            identity=proto.identity,
            cursor=proto.cursor,
            account_type=proto.accountType,
            enter_unique_id=proto.enterUniqueId,
            filter_welcome_msg=proto.filterWelcomeMsg,
            is_anchor_continue_keep_msg=proto.isAnchorContinueKeepMsg,
        )

    def encode_fetch_result(self, result: FetchResult) -> bytes:
        proto = FetchResultProto(
            messages=[
                BaseProtoMessageProto(
                    method=item.method,
                    payload=item.payload,
                    msgId=item.msg_id,
                    msgType=item.msg_type,
                    offset=item.offset,
                    isHistory=item.is_history,
                )
                for item in result.messages
            ],
            cursor=result.cursor,
            fetchInterval=result.fetch_interval,
            now=result.now,
            internalExt=result.internal_ext,
            fetchType=result.fetch_type,
            routeParams=result.route_params,
            heartBeatDuration=result.heartbeat_duration,
            needsAck=result.needs_ack,
            pushServer=result.push_server,
            liveCursor=result.live_cursor,
            historyNoMore=result.history_no_more,
        )
        return proto.SerializeToString()

    def decode_fetch_result(self, data: bytes) -> FetchResult:
        proto = FetchResultProto()
        try:
            proto.ParseFromString(data)
        except DecodeError as exc:
            raise ProtocolError(StatusCode.BAD_REQUEST, ErrorCode.DECODE_FAILED, f"Fetch result decode failed: {exc}") from exc
        return FetchResult(
            messages=[
                FetchedMessage(
                    method=item.method,
                    payload=item.payload,
                    msg_id=item.msgId,
                    msg_type=item.msgType,
                    offset=item.offset,
                    is_history=item.isHistory,
                )
                for item in proto.messages
            ],
            cursor=proto.cursor,
            fetch_interval=proto.fetchInterval,
            now=proto.now,
            internal_ext=proto.internalExt,
            fetch_type=proto.fetchType,
            route_params=dict(proto.routeParams),
            heartbeat_duration=proto.heartBeatDuration,
            needs_ack=proto.needsAck,
            push_server=proto.pushServer,
            live_cursor=proto.liveCursor,
            history_no_more=proto.historyNoMore,
        )

    def decode_container(self, data: bytes) -> DecodedContainer:
        frame = self.decode_frame(data)
        try:
            container = DecodedContainer(**frame.model_dump())
        except ValidationError as exc:
            raise ProtocolError(StatusCode.UNPROCESSABLE, ErrorCode.INVALID_FRAME, f"Frame validation failed: {exc}") from exc
        if frame.payload_type == PayloadType.FETCH_RESULT.value:
            container.proto_message_fetch_result = self.decode_fetch_result(_inflate(frame))
        logger.debug("Decoded %s frame (log_id=%s, %d bytes)", container.payload_type, container.log_id, len(data))
        return container

    async def deserialize_message(self, data: bytes) -> DecodedContainer:
        """Decode a binary websocket message off the event loop."""
        return await asyncio.to_thread(self.decode_container, data)


def _inflate(frame: PushFrame) -> bytes:
    """Return the frame payload, gunzipped when the frame says (or looks) compressed."""
    compressed = frame.headers.get(COMPRESS_HEADER) == "gzip" or frame.payload[:2] == GZIP_MAGIC
    if not compressed:
        return frame.payload
    try:
        return gzip.decompress(frame.payload)
    except (OSError, EOFError, zlib.error) as exc:
        raise ProtocolError(StatusCode.BAD_REQUEST, ErrorCode.DECOMPRESS_FAILED, f"Payload inflate failed: {exc}") from exc


__all__ = ["Codec", "ProtobufCodec"]
