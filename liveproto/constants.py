"""Protocol-wide constants for the push-frame channel."""

from enum import StrEnum

ENCODING = "utf-8"
NORMAL_CLOSURE = 1000
DEFAULT_HEARTBEAT_INTERVAL_MS = 10_000
GZIP_MAGIC = b"\x1f\x8b"
COMPRESS_HEADER = "compress_type"


class PayloadType(StrEnum):
    """Discriminator carried in every push frame."""

    HEARTBEAT = "hb"
    ACK = "ack"
    FETCH_RESULT = "msg"
    IM_ENTER_ROOM = "im_enter_room"
    IM_ENTER_ROOM_RESP = "im_enter_room_resp"


class PayloadEncoding(StrEnum):
    PROTOBUF = "pb"


# Room-enter fields that are identical for every audience connection
ENTER_ROOM_DEFAULTS = {
    "room_tag": "",
    "live_region": "",
    "live_id": "12",
    "identity": "audience",
    "cursor": "",
    "account_type": "0",
    "enter_unique_id": "",
    "filter_welcome_msg": "0",
    "is_anchor_continue_keep_msg": False,
}

__all__ = [
    "ENCODING",
    "NORMAL_CLOSURE",
    "DEFAULT_HEARTBEAT_INTERVAL_MS",
    "GZIP_MAGIC",
    "COMPRESS_HEADER",
    "PayloadType",
    "PayloadEncoding",
    "ENTER_ROOM_DEFAULTS",
]
