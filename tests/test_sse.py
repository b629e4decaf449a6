from __future__ import annotations

import pytest

from qr_relay.broadcast import Broadcaster
from qr_relay.json_utils import load_json_str, narrow_json_to_str
from qr_relay.sse import KEEPALIVE_FRAME, event_stream, format_event


def _data_field(frame: bytes) -> str:
    lines = frame.decode("utf-8").split("\n")
    data_lines = [line for line in lines if line.startswith("data: ")]
    assert len(data_lines) == 1
    return narrow_json_to_str(load_json_str(data_lines[0][len("data: ") :]))


def test_format_event_frames_named_event() -> None:
    frame = format_event("HELLO")

    assert frame == b'event: new_qr_data\ndata: "HELLO"\n\n'


def test_format_event_keeps_line_breaks_inside_payload() -> None:
    payload = "line one\r\nline two\nthree"

    frame = format_event(payload)

    assert frame.count(b"\n\n") == 1
    assert frame.endswith(b"\n\n")
    assert _data_field(frame) == payload


def test_format_event_non_ascii_round_trips() -> None:
    payload = "WIFI:S:Café 東京;P:pässwörd;;"
    assert _data_field(format_event(payload)) == payload


@pytest.mark.asyncio
async def test_stream_registers_on_start_and_delivers() -> None:
    broadcaster = Broadcaster()
    broadcaster.publish("before connect")
    stream = event_stream(broadcaster, keepalive_seconds=5.0)

    first = await anext(stream)
    assert first == b"retry: 1000\n\n"
    assert broadcaster.session_count == 1

    broadcaster.publish("HELLO")
    assert await anext(stream) == format_event("HELLO")

    await stream.aclose()
    assert broadcaster.session_count == 0


@pytest.mark.asyncio
async def test_stream_sends_keepalive_when_idle() -> None:
    broadcaster = Broadcaster()
    stream = event_stream(broadcaster, keepalive_seconds=0.01)

    await anext(stream)

    assert await anext(stream) == KEEPALIVE_FRAME
    await stream.aclose()


@pytest.mark.asyncio
async def test_stream_ends_when_broadcaster_closes() -> None:
    broadcaster = Broadcaster()
    stream = event_stream(broadcaster, keepalive_seconds=5.0)
    await anext(stream)

    broadcaster.close()

    with pytest.raises(StopAsyncIteration):
        await anext(stream)
    assert broadcaster.session_count == 0
