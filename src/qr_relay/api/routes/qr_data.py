from __future__ import annotations

from typing import Protocol

from fastapi import APIRouter
from starlette.responses import Response

from ...json_utils import JSONValue, dump_json_str
from ...persistence import PayloadStore
from ...query import load_qr_data

# Polled from pages on other origins.
_HEADERS: dict[str, str] = {
    "Access-Control-Allow-Origin": "*",
    "Cache-Control": "no-store",
}

_QR_DATA_RESPONSES: dict[int | str, dict[str, JSONValue]] = {
    200: {
        "description": "Latest payload and the last five updates",
        "content": {
            "application/json": {
                "example": {
                    "current_qr": "WORLD",
                    "last_updated": "2026-01-01T12:00:01.000000Z",
                    "update_log": [
                        {"data": "WORLD", "timestamp": "2026-01-01T12:00:01.000000Z"},
                        {"data": "HELLO", "timestamp": "2026-01-01T12:00:00.000000Z"},
                    ],
                },
            },
        },
    },
    500: {"description": "Datastore error"},
}


class QrDataContainerProtocol(Protocol):
    def require_store(self) -> PayloadStore: ...


def build_router(container: QrDataContainerProtocol) -> APIRouter:
    """Build router with GET /qr_data (poll variant)."""
    router = APIRouter()
    store = container.require_store()

    async def _qr_data() -> Response:
        body = await load_qr_data(store)
        return Response(
            content=dump_json_str(body),
            media_type="application/json",
            headers=_HEADERS,
        )

    router.add_api_route(
        "/qr_data",
        _qr_data,
        methods=["GET"],
        response_model=None,
        summary="Latest QR payload",
        responses=_QR_DATA_RESPONSES,
    )
    return router


__all__ = ["QrDataContainerProtocol", "build_router"]
