from .connection import ConnectionState, PushConnection
from .dispatcher import FrameDispatcher
from .events import ClientEvent, EventRegistry
from .heartbeat import HeartbeatScheduler
from .session import CookieJar
from .transport import (
    Transport,
    TransportConnection,
    TransportError,
    TransportEvent,
    TransportMessage,
    WebSocketConnection,
    WebSocketTransport,
)

__all__ = [
    "ConnectionState",
    "PushConnection",
    "FrameDispatcher",
    "ClientEvent",
    "EventRegistry",
    "HeartbeatScheduler",
    "CookieJar",
    "Transport",
    "TransportConnection",
    "TransportError",
    "TransportEvent",
    "TransportMessage",
    "WebSocketConnection",
    "WebSocketTransport",
]
