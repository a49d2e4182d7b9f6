"""
Push-frame protocol package: payload types, data model, protobuf wire codec,
outbound frame construction and structural validation.
"""

from .codec import Codec, ProtobufCodec
from .constants import (
    DEFAULT_HEARTBEAT_INTERVAL_MS,
    ENCODING,
    ENTER_ROOM_DEFAULTS,
    NORMAL_CLOSURE,
    PayloadEncoding,
    PayloadType,
)
from .errors import ErrorCode, ProtocolError, StatusCode
from .framing import FrameBuilder
from .messages import (
    DecodedContainer,
    EnterRoomRequest,
    FetchedMessage,
    FetchResult,
    PushFrame,
    RoomParameters,
)
from .validator import load_schema, validate_frame, validate_room_params

__all__ = [
    "Codec",
    "ProtobufCodec",
    "DEFAULT_HEARTBEAT_INTERVAL_MS",
    "ENCODING",
    "ENTER_ROOM_DEFAULTS",
    "NORMAL_CLOSURE",
    "PayloadEncoding",
    "PayloadType",
    "ErrorCode",
    "ProtocolError",
    "StatusCode",
    "FrameBuilder",
    "DecodedContainer",
    "EnterRoomRequest",
    "FetchedMessage",
    "FetchResult",
    "PushFrame",
    "RoomParameters",
    "load_schema",
    "validate_frame",
    "validate_room_params",
]
