from __future__ import annotations

from enum import IntEnum
from typing import Any, Dict, Optional


class StatusCode(IntEnum):
    """HTTP-like classification of a protocol fault."""

    BAD_REQUEST = 400
    UNPROCESSABLE = 422
    INTERNAL_ERROR = 500
    SERVICE_UNAVAILABLE = 503


class ErrorCode(IntEnum):
    """What went wrong with a frame, a parameter or the connection."""

    DECODE_FAILED = 1001
    ENCODE_FAILED = 1002
    INVALID_FRAME = 1003
    INVALID_PARAMS = 1004
    DECOMPRESS_FAILED = 1005
    NOT_CONNECTED = 1006


class ProtocolError(Exception):
    """A push-protocol fault; delivered to subscribers as an event rather than raised past the client."""

    def __init__(self, status: StatusCode, code: Optional[ErrorCode] = None, message: str = "") -> None:
        self.status = status
        self.code = code
        self.message = message
        label = code.name if code is not None else status.name
        super().__init__(f"[{label}] {message} (status={int(status)})")

    def to_payload(self) -> Dict[str, Any]:
        """Flat view for logs and event subscribers."""
        return {
            "status": int(self.status),
            "error_code": self.code.name if self.code is not None else None,
            "error_message": self.message,
        }


__all__ = ["StatusCode", "ErrorCode", "ProtocolError"]
