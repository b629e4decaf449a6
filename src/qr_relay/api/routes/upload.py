from __future__ import annotations

from typing import Protocol

from fastapi import APIRouter, Request
from starlette.responses import PlainTextResponse

from ...ingest import Ingestor
from ...types import Variant
from ...validators import decode_upload

_ACCEPTED_BODY: dict[Variant, str] = {
    "poll": "Data received and stored",
    "push": "Data received",
}
_DUPLICATE_BODY = "Duplicate ignored"


class UploadContainerProtocol(Protocol):
    ingestor: Ingestor

    @property
    def variant(self) -> Variant: ...


def build_router(container: UploadContainerProtocol) -> APIRouter:
    """Build router with POST /upload_qr."""
    router = APIRouter()

    async def _upload_qr(request: Request) -> PlainTextResponse:
        body = await request.body()
        payload = decode_upload(body)
        result = await container.ingestor.ingest(payload)
        text = _ACCEPTED_BODY[container.variant] if result["accepted"] else _DUPLICATE_BODY
        return PlainTextResponse(text, status_code=200)

    router.add_api_route(
        "/upload_qr",
        _upload_qr,
        methods=["POST"],
        response_model=None,
        summary="Upload a QR payload",
        description=(
            'Accepts {"data": "<payload>"}. Stores the payload (poll) or forwards '
            "it to connected viewers (push)."
        ),
    )
    return router


__all__ = ["UploadContainerProtocol", "build_router"]
