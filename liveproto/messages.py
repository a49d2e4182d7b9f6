from __future__ import annotations

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from .constants import ENTER_ROOM_DEFAULTS, PayloadEncoding, PayloadType
from .errors import ErrorCode, ProtocolError, StatusCode


class PushFrame(BaseModel):
    """Outer envelope of every message on the push channel."""

    seq_id: Optional[int] = Field(default=None, description="Server sequence number, absent on client frames")
    log_id: Optional[int] = Field(default=None, description="Correlation key for acks")
    payload_type: str = Field(..., description="hb / ack / msg / im_enter_room / im_enter_room_resp / ...")
    payload_encoding: str = Field(default=PayloadEncoding.PROTOBUF.value)
    payload: bytes = b""
    headers: Dict[str, str] = Field(default_factory=dict)
    service: Optional[int] = None
    method: Optional[int] = None

    def to_schema_dict(self) -> Dict[str, Any]:
        """Structural view used by JSON-schema validation (payload reduced to its size)."""
        data = self.model_dump(exclude={"payload"}, exclude_none=True)
        data["payload_size"] = len(self.payload)
        return data


class FetchedMessage(BaseModel):
    """One typed message inside a fetch result; its payload stays opaque."""

    method: str = ""
    payload: bytes = b""
    msg_id: int = 0
    msg_type: int = 0
    offset: int = 0
    is_history: bool = False


class FetchResult(BaseModel):
    messages: List[FetchedMessage] = Field(default_factory=list)
    cursor: str = ""
    fetch_interval: int = 0
    now: int = 0
    internal_ext: str = ""
    fetch_type: int = 0
    route_params: Dict[str, str] = Field(default_factory=dict)
    heartbeat_duration: int = 0
    needs_ack: bool = False
    push_server: str = ""
    live_cursor: str = ""
    history_no_more: bool = False


class DecodedContainer(PushFrame):
    """A decoded inbound frame, with its fetch result when the payload carried one."""

    proto_message_fetch_result: Optional[FetchResult] = None

    @property
    def is_enter_room_response(self) -> bool:
        return self.payload_type == PayloadType.IM_ENTER_ROOM_RESP.value


class RoomParameters(BaseModel):
    """Query parameters of the push endpoint; ``room_id`` also feeds heartbeats."""

    model_config = ConfigDict(extra="allow")

    room_id: str

    @field_validator("room_id", mode="before")
    @classmethod
    def _coerce_room_id(cls, value: Any) -> str:
        return str(value)

    def to_query(self) -> Dict[str, str]:
        return {key: str(value) for key, value in self.model_dump().items()}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "RoomParameters":
        try:
            return cls(**data)
        except ValidationError as exc:
            raise ProtocolError(StatusCode.BAD_REQUEST, ErrorCode.INVALID_PARAMS, f"Room parameters invalid: {exc}") from exc


class EnterRoomRequest(BaseModel):
    room_id: str
    room_tag: str = ENTER_ROOM_DEFAULTS["room_tag"]
    live_region: str = ENTER_ROOM_DEFAULTS["live_region"]
    live_id: str = ENTER_ROOM_DEFAULTS["live_id"]
    identity: str = ENTER_ROOM_DEFAULTS["identity"]
    cursor: str = ENTER_ROOM_DEFAULTS["cursor"]
    account_type: str = ENTER_ROOM_DEFAULTS["account_type"]
    enter_unique_id: str = ENTER_ROOM_DEFAULTS["enter_unique_id"]
    filter_welcome_msg: str = ENTER_ROOM_DEFAULTS["filter_welcome_msg"]
    is_anchor_continue_keep_msg: bool = ENTER_ROOM_DEFAULTS["is_anchor_continue_keep_msg"]


__all__ = [
    "PushFrame",
    "FetchedMessage",
    "FetchResult",
    "DecodedContainer",
    "RoomParameters",
    "EnterRoomRequest",
]
