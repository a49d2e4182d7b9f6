from __future__ import annotations

import gzip

import pytest

from liveproto import ErrorCode, FetchedMessage, FetchResult, PayloadType, ProtocolError, PushFrame


def _fetch_frame(codec, *, log_id=7, compress=False) -> bytes:
    payload = codec.encode_fetch_result(
        FetchResult(
            messages=[FetchedMessage(method="WebcastChatMessage", payload=b"\x01\x02", msg_id=42)],
            internal_ext="ext-1",
            needs_ack=True,
            cursor="c-1",
            route_params={"im_push_server": "1"},
        )
    )
    headers = {}
    if compress:
        payload = gzip.compress(payload)
        headers = {"compress_type": "gzip"}
    return codec.encode_frame(PushFrame(log_id=log_id, payload_type=PayloadType.FETCH_RESULT.value, payload=payload, headers=headers))


def test_frame_fields_survive_the_wire(codec):
    data = codec.encode_frame(
        PushFrame(log_id=99, payload_type="hb", payload=b"abc", headers={"k": "v"}, service=5, method=9)
    )
    frame = codec.decode_frame(data)

    assert frame.log_id == 99
    assert frame.payload_type == "hb"
    assert frame.payload_encoding == "pb"
    assert frame.payload == b"abc"
    assert frame.headers == {"k": "v"}
    assert (frame.service, frame.method) == (5, 9)


def test_zero_log_id_means_absent(codec):
    frame = codec.decode_frame(codec.encode_frame(PushFrame(payload_type="ack")))
    assert frame.log_id is None
    assert frame.service is None


def test_heartbeat_carries_room_id(codec):
    assert codec.decode_heartbeat(codec.encode_heartbeat("123")) == "123"


def test_heartbeat_rejects_non_numeric_room(codec):
    with pytest.raises(ProtocolError) as info:
        codec.encode_heartbeat("room-abc")
    assert info.value.code is ErrorCode.INVALID_PARAMS


@pytest.mark.parametrize("compress", [False, True])
def test_fetch_result_container(codec, compress):
    container = codec.decode_container(_fetch_frame(codec, compress=compress))

    result = container.proto_message_fetch_result
    assert container.log_id == 7
    assert result is not None
    assert result.needs_ack is True
    assert result.internal_ext == "ext-1"
    assert result.route_params == {"im_push_server": "1"}
    assert result.messages[0].method == "WebcastChatMessage"
    assert result.messages[0].msg_id == 42


def test_gzip_detected_without_header(codec):
    payload = gzip.compress(codec.encode_fetch_result(FetchResult(internal_ext="x")))
    data = codec.encode_frame(PushFrame(payload_type="msg", payload=payload))
    assert codec.decode_container(data).proto_message_fetch_result.internal_ext == "x"


def test_broken_gzip_payload(codec):
    data = codec.encode_frame(PushFrame(payload_type="msg", payload=b"garbage", headers={"compress_type": "gzip"}))
    with pytest.raises(ProtocolError) as info:
        codec.decode_container(data)
    assert info.value.code is ErrorCode.DECOMPRESS_FAILED


def test_other_payload_types_keep_raw_payload(codec):
    data = codec.encode_frame(PushFrame(log_id=3, payload_type="im_enter_room_resp", payload=b"\x08\x01"))
    container = codec.decode_container(data)

    assert container.proto_message_fetch_result is None
    assert container.is_enter_room_response
    assert container.payload == b"\x08\x01"


def test_malformed_bytes_raise_protocol_error(codec):
    with pytest.raises(ProtocolError):
        codec.decode_container(b"\xff\xff\xff\xff")


@pytest.mark.asyncio
async def test_deserialize_message_runs_off_loop(codec):
    container = await codec.deserialize_message(_fetch_frame(codec, log_id=11))
    assert container.log_id == 11


def test_decode_error_payload(codec):
    with pytest.raises(ProtocolError) as info:
        codec.decode_frame(codec.encode_frame(PushFrame(payload_type="")))

    assert info.value.to_payload() == {
        "status": 400,
        "error_code": "INVALID_FRAME",
        "error_message": "Push frame has no payload type",
    }
