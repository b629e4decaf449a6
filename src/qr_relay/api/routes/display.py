from __future__ import annotations

from typing import Protocol

from fastapi import APIRouter
from starlette.responses import HTMLResponse

from ...display import render_page
from ...types import Variant


class DisplayContainerProtocol(Protocol):
    @property
    def variant(self) -> Variant: ...


def build_router(container: DisplayContainerProtocol) -> APIRouter:
    """Build router serving the viewer page at GET /."""
    router = APIRouter()
    page = render_page(container.variant)

    def _index() -> HTMLResponse:
        return HTMLResponse(page)

    router.add_api_route("/", _index, methods=["GET"], response_model=None, include_in_schema=False)
    return router


__all__ = ["DisplayContainerProtocol", "build_router"]
