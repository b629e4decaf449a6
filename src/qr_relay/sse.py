from __future__ import annotations

from collections.abc import AsyncGenerator

from .broadcast import Broadcaster
from .json_utils import dump_json_str

NEW_QR_DATA_EVENT = "new_qr_data"

# Browser reconnect delay after a dropped stream, in milliseconds.
RECONNECT_MS = 1000

KEEPALIVE_FRAME = b": keepalive\n\n"


def format_event(payload: str, event: str = NEW_QR_DATA_EVENT) -> bytes:
    """Frame one server-sent event.

    The payload is JSON-encoded so CR and LF inside it cannot be taken for
    SSE line breaks; ``JSON.parse(event.data)`` restores it exactly.
    """
    return f"event: {event}\ndata: {dump_json_str(payload)}\n\n".encode()


async def event_stream(
    broadcaster: Broadcaster, *, keepalive_seconds: float
) -> AsyncGenerator[bytes, None]:
    """Stream payloads published after this stream starts.

    The session is registered when the first frame is produced and
    deregistered when the generator finishes, is closed or is cancelled by a
    client disconnect.
    """
    session = broadcaster.open_session()
    try:
        yield f"retry: {RECONNECT_MS}\n\n".encode()
        while True:
            try:
                payload = await session.next_payload(timeout=keepalive_seconds)
            except TimeoutError:
                yield KEEPALIVE_FRAME
                continue
            if payload is None:
                return
            yield format_event(payload)
    finally:
        broadcaster.deregister(session)


__all__ = ["KEEPALIVE_FRAME", "NEW_QR_DATA_EVENT", "RECONNECT_MS", "event_stream", "format_event"]
