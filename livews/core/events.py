from __future__ import annotations

import inspect
import logging
from collections.abc import Awaitable, Callable
from enum import StrEnum
from typing import Any, Dict, List, Union

logger = logging.getLogger(__name__)

Handler = Callable[..., Union[None, Awaitable[None]]]


class ClientEvent(StrEnum):
    """Observable outputs of a push connection."""

    CONNECT = "connect"
    CLOSE = "close"
    WEBSOCKET_DATA = "websocket_data"
    UNKNOWN_RESPONSE = "unknown_response"
    MESSAGE_DECODING_FAILED = "message_decoding_failed"
    PROTO_MESSAGE_FETCH_RESULT = "proto_message_fetch_result"
    IM_ENTERED_ROOM = "im_entered_room"


class EventRegistry:
    """Callback registry keyed by event kind; handlers may be sync or async."""

    def __init__(self) -> None:
        self._handlers: Dict[str, List[Handler]] = {}

    def subscribe(self, kind: str, handler: Handler) -> None:
        self._handlers.setdefault(str(kind), []).append(handler)

    def once(self, kind: str, handler: Handler) -> None:
        def _wrapper(*args: Any) -> Union[None, Awaitable[None]]:
            self.unsubscribe(kind, _wrapper)
            return handler(*args)

        self.subscribe(kind, _wrapper)

    def unsubscribe(self, kind: str, handler: Handler) -> None:
        handlers = self._handlers.get(str(kind), [])
        if handler in handlers:
            handlers.remove(handler)

    def handler_count(self, kind: str) -> int:
        return len(self._handlers.get(str(kind), []))

    async def emit(self, kind: str, *args: Any) -> None:
        """Run every handler for ``kind`` in registration order; failures are logged, not raised."""
        for handler in list(self._handlers.get(str(kind), [])):
            try:
                result = handler(*args)
                if inspect.isawaitable(result):
                    await result
            except Exception as exc:
                logger.exception("Handler error for %s: %s", kind, exc)


__all__ = ["ClientEvent", "EventRegistry", "Handler"]
