from __future__ import annotations

from typing import Any, Dict, List, Mapping, Optional

import pytest

from liveproto.codec import ProtobufCodec
from liveproto.constants import NORMAL_CLOSURE
from livews.core.events import EventRegistry, Handler
from livews.core.transport import TransportEvent, TransportMessage


class FakeConnection:
    """In-memory transport connection recording outbound bytes."""

    def __init__(self, auto_close: bool = True) -> None:
        self.events = EventRegistry()
        self.sent: List[bytes] = []
        self.close_codes: List[int] = []
        self.auto_close = auto_close

    def subscribe(self, kind: str, handler: Handler) -> None:
        self.events.subscribe(kind, handler)

    async def send_bytes(self, data: bytes) -> None:
        self.sent.append(data)

    async def close(self, code: int = NORMAL_CLOSURE) -> None:
        self.close_codes.append(code)
        if self.auto_close:
            await self.drop()

    async def deliver(self, data) -> None:
        await self.events.emit(TransportEvent.MESSAGE, TransportMessage.from_frame(data))

    async def drop(self) -> None:
        await self.events.emit(TransportEvent.CLOSE)


class FakeTransport:
    def __init__(self, connection: Optional[FakeConnection] = None) -> None:
        self.events = EventRegistry()
        self.connection = connection or FakeConnection()
        self.calls: List[Dict[str, Any]] = []

    def subscribe(self, kind: str, handler: Handler) -> None:
        self.events.subscribe(kind, handler)

    def connect(
        self,
        url: str,
        *,
        origin: str,
        headers: Mapping[str, str],
        options: Optional[Mapping[str, Any]] = None,
    ) -> None:
        self.calls.append({"url": url, "origin": origin, "headers": dict(headers), "options": options})

    async def accept(self) -> FakeConnection:
        await self.events.emit(TransportEvent.CONNECT, self.connection)
        return self.connection

    async def fail(self, error: Exception) -> None:
        await self.events.emit(TransportEvent.CONNECT_FAILED, error)


@pytest.fixture
def codec() -> ProtobufCodec:
    return ProtobufCodec()


@pytest.fixture
def transport() -> FakeTransport:
    return FakeTransport()


@pytest.fixture
def lazy_transport() -> FakeTransport:
    """Transport whose connection only reports close when the test drops it."""
    return FakeTransport(FakeConnection(auto_close=False))
