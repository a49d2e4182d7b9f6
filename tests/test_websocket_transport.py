from __future__ import annotations

import asyncio
import contextlib

import pytest
from websockets.asyncio.server import serve
from websockets.exceptions import ConnectionClosed

from liveproto import FetchResult, PushFrame
from livews.core import ClientEvent, ConnectionState, CookieJar, PushConnection

CONFIG = {"web_host": "live.example.com", "params_append": "&version_code=180800"}


@pytest.mark.asyncio
async def test_session_over_local_websocket(codec):
    inbound = []
    handshake = {}
    fetch_frame = codec.encode_frame(
        PushFrame(
            log_id=555,
            payload_type="msg",
            payload=codec.encode_fetch_result(FetchResult(needs_ack=True, internal_ext="ext")),
        )
    )

    async def handler(ws):
        handshake["path"] = ws.request.path
        handshake["origin"] = ws.request.headers.get("Origin")
        handshake["cookie"] = ws.request.headers.get("Cookie")
        inbound.append(await ws.recv())
        await ws.send(fetch_frame)
        await ws.send("plain text")
        inbound.append(await ws.recv())
        await ws.wait_closed()

    async with serve(handler, "127.0.0.1", 0) as server:
        port = server.sockets[0].getsockname()[1]
        client = PushConnection(cookie_jar=CookieJar({"sessionid": "s1"}), config=dict(CONFIG))
        unknown = asyncio.Event()
        closed = asyncio.Event()
        results = []
        client.on(ClientEvent.UNKNOWN_RESPONSE, lambda message: unknown.set())
        client.on(ClientEvent.PROTO_MESSAGE_FETCH_RESULT, results.append)
        client.on(ClientEvent.CLOSE, closed.set)

        client.connect(f"ws://127.0.0.1:{port}/ws", {"room_id": "123"})
        await asyncio.wait_for(unknown.wait(), timeout=5)
        for _ in range(100):
            if len(inbound) == 2:
                break
            await asyncio.sleep(0.01)

        await asyncio.wait_for(client.close(), timeout=5)

    assert handshake["path"] == "/ws?room_id=123&version_code=180800"
    assert handshake["origin"] == "https://live.example.com"
    assert handshake["cookie"] == "sessionid=s1"

    heartbeat = codec.decode_frame(inbound[0])
    assert heartbeat.payload_type == "hb"
    assert codec.decode_heartbeat(heartbeat.payload) == "123"

    ack = codec.decode_frame(inbound[1])
    assert (ack.payload_type, ack.log_id, ack.payload) == ("ack", 555, b"ext")

    assert results[0].internal_ext == "ext"
    assert closed.is_set()
    assert client.state is ConnectionState.DISCONNECTED


@pytest.mark.asyncio
async def test_unreachable_endpoint_reports_close():
    client = PushConnection(config=dict(CONFIG))
    closed = asyncio.Event()
    client.on(ClientEvent.CLOSE, closed.set)

    # nothing listens on the discard port
    client.connect("ws://127.0.0.1:9/ws", {"room_id": "1"}, options={"open_timeout": 2})
    await asyncio.wait_for(closed.wait(), timeout=5)

    assert client.state is ConnectionState.DISCONNECTED
    assert client.connection is None


@pytest.mark.asyncio
@pytest.mark.parametrize("event", [ClientEvent.CONNECT, ClientEvent.PROTO_MESSAGE_FETCH_RESULT])
async def test_close_from_inside_a_handler(codec, event):
    fetch_frame = codec.encode_frame(
        PushFrame(
            log_id=9,
            payload_type="msg",
            payload=codec.encode_fetch_result(FetchResult(needs_ack=True, internal_ext="ext")),
        )
    )

    async def handler(ws):
        with contextlib.suppress(ConnectionClosed):
            await ws.recv()
            await ws.send(fetch_frame)
        await ws.wait_closed()

    async with serve(handler, "127.0.0.1", 0) as server:
        port = server.sockets[0].getsockname()[1]
        client = PushConnection(config=dict(CONFIG))
        done = asyncio.Event()
        closed = []

        async def _close_now(*args):
            await client.close()
            done.set()

        client.on(event, _close_now)
        client.on(ClientEvent.CLOSE, lambda: closed.append(True))
        client.connect(f"ws://127.0.0.1:{port}/ws", {"room_id": "123"})

        await asyncio.wait_for(done.wait(), timeout=5)

    assert closed == [True]
    assert client.state is ConnectionState.DISCONNECTED
    assert not client.heartbeat.running
