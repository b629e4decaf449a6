from __future__ import annotations

from typing import Protocol

from fastapi import APIRouter
from fastapi.responses import StreamingResponse

from ...broadcast import Broadcaster
from ...settings import RelaySettings
from ...sse import event_stream


class EventsContainerProtocol(Protocol):
    settings: RelaySettings

    def require_broadcaster(self) -> Broadcaster: ...


def build_router(container: EventsContainerProtocol) -> APIRouter:
    """Build router with GET /events, the push connection (push variant)."""
    router = APIRouter()
    broadcaster = container.require_broadcaster()
    keepalive = container.settings["sse_keepalive_seconds"]

    def _events() -> StreamingResponse:
        headers = {"Cache-Control": "no-cache", "X-Accel-Buffering": "no"}
        return StreamingResponse(
            event_stream(broadcaster, keepalive_seconds=keepalive),
            media_type="text/event-stream",
            headers=headers,
        )

    router.add_api_route(
        "/events",
        _events,
        methods=["GET"],
        response_model=None,
        summary="Push connection",
        description="Server-sent events; each new_qr_data event carries one JSON-encoded payload.",
    )
    return router


__all__ = ["EventsContainerProtocol", "build_router"]
