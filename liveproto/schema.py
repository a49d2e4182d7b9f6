"""
Protobuf wire schema for the push-frame channel.

The descriptors are assembled at import time with ``descriptor_pb2`` so the
package does not depend on generated ``_pb2`` modules. Message classes are
exposed as module attributes (``PushFrameProto`` and friends).
"""

from __future__ import annotations

from typing import Iterable, Tuple

from google.protobuf import descriptor_pb2, descriptor_pool, message_factory

PACKAGE = "webcast.im"

_F = descriptor_pb2.FieldDescriptorProto

STRING = _F.TYPE_STRING
BYTES = _F.TYPE_BYTES
BOOL = _F.TYPE_BOOL
INT32 = _F.TYPE_INT32
INT64 = _F.TYPE_INT64
UINT64 = _F.TYPE_UINT64

# (name, number, type)
FieldSpec = Tuple[str, int, int]


def _add_message(
    file_proto: descriptor_pb2.FileDescriptorProto, name: str, fields: Iterable[FieldSpec]
) -> descriptor_pb2.DescriptorProto:
    message = file_proto.message_type.add(name=name)
    for field_name, number, field_type in fields:
        message.field.add(name=field_name, number=number, type=field_type, label=_F.LABEL_OPTIONAL)
    return message


def _add_string_map(message: descriptor_pb2.DescriptorProto, field_name: str, number: int) -> None:
    entry_name = f"{field_name[0].upper()}{field_name[1:]}Entry"
    entry = message.nested_type.add(name=entry_name)
    entry.options.map_entry = True
    entry.field.add(name="key", number=1, type=STRING, label=_F.LABEL_OPTIONAL)
    entry.field.add(name="value", number=2, type=STRING, label=_F.LABEL_OPTIONAL)
    message.field.add(
        name=field_name,
        number=number,
        type=_F.TYPE_MESSAGE,
        label=_F.LABEL_REPEATED,
        type_name=f".{PACKAGE}.{message.name}.{entry_name}",
    )


def _build_file() -> descriptor_pb2.FileDescriptorProto:
    file_proto = descriptor_pb2.FileDescriptorProto(name="liveproto/webcast.proto", package=PACKAGE, syntax="proto3")

    push_frame = _add_message(
        file_proto,
        "PushFrame",
        [
            ("seqId", 1, UINT64),
            ("logId", 2, UINT64),
            ("service", 3, UINT64),
            ("method", 4, UINT64),
        ],
    )
    _add_string_map(push_frame, "headers", 5)
    for field_name, number, field_type in (("payloadEncoding", 6, STRING), ("payloadType", 7, STRING), ("payload", 8, BYTES)):
        push_frame.field.add(name=field_name, number=number, type=field_type, label=_F.LABEL_OPTIONAL)

    _add_message(file_proto, "HeartbeatMessage", [("roomId", 1, UINT64)])

    _add_message(
        file_proto,
        "ImEnterRoomMessage",
        [
            ("roomId", 1, STRING),
            ("roomTag", 2, STRING),
            ("liveRegion", 3, STRING),
            ("liveId", 4, STRING),
            ("identity", 5, STRING),
            ("cursor", 6, STRING),
            ("accountType", 7, STRING),
            ("enterUniqueId", 8, STRING),
            ("filterWelcomeMsg", 9, STRING),
            ("isAnchorContinueKeepMsg", 10, BOOL),
        ],
    )

    _add_message(
        file_proto,
        "BaseProtoMessage",
        [
            ("method", 1, STRING),
            ("payload", 2, BYTES),
            ("msgId", 3, INT64),
            ("msgType", 4, INT32),
            ("offset", 5, INT64),
            ("isHistory", 6, BOOL),
        ],
    )

    fetch_result = file_proto.message_type.add(name="ProtoMessageFetchResult")
    fetch_result.field.add(
        name="messages",
        number=1,
        type=_F.TYPE_MESSAGE,
        label=_F.LABEL_REPEATED,
        type_name=f".{PACKAGE}.BaseProtoMessage",
    )
    for field_name, number, field_type in (
        ("cursor", 2, STRING),
        ("fetchInterval", 3, INT64),
        ("now", 4, INT64),
        ("internalExt", 5, STRING),
        ("fetchType", 6, INT32),
    ):
        fetch_result.field.add(name=field_name, number=number, type=field_type, label=_F.LABEL_OPTIONAL)
    _add_string_map(fetch_result, "routeParams", 7)
    for field_name, number, field_type in (
        ("heartBeatDuration", 8, INT64),
        ("needsAck", 9, BOOL),
        ("pushServer", 10, STRING),
        ("liveCursor", 11, STRING),
        ("historyNoMore", 12, BOOL),
    ):
        fetch_result.field.add(name=field_name, number=number, type=field_type, label=_F.LABEL_OPTIONAL)

    return file_proto


POOL = descriptor_pool.DescriptorPool()
POOL.AddSerializedFile(_build_file().SerializeToString())


def message_class(name: str):
    """Return the generated message class for ``webcast.im.<name>``."""
    return message_factory.GetMessageClass(POOL.FindMessageTypeByName(f"{PACKAGE}.{name}"))


PushFrameProto = message_class("PushFrame")
HeartbeatProto = message_class("HeartbeatMessage")
ImEnterRoomProto = message_class("ImEnterRoomMessage")
BaseProtoMessageProto = message_class("BaseProtoMessage")
FetchResultProto = message_class("ProtoMessageFetchResult")

__all__ = [
    "PACKAGE",
    "POOL",
    "message_class",
    "PushFrameProto",
    "HeartbeatProto",
    "ImEnterRoomProto",
    "BaseProtoMessageProto",
    "FetchResultProto",
]
