from __future__ import annotations

from typing import Protocol

from fastapi import APIRouter, status
from starlette.responses import Response

from ...broadcast import Broadcaster
from ...health import (
    HealthResponse,
    ReadyResponse,
    healthz,
    readyz_broadcaster,
    readyz_store,
)
from ...persistence import PayloadStore


class HealthContainerProtocol(Protocol):
    store: PayloadStore | None
    broadcaster: Broadcaster | None


def build_router(container: HealthContainerProtocol) -> APIRouter:
    """Build health router with /healthz and /readyz endpoints."""
    router = APIRouter()

    def _healthz() -> HealthResponse:
        return healthz()

    async def _readyz(resp: Response) -> ReadyResponse:
        # Returns 503 with a reason when the variant's dependency is unhealthy.
        if container.store is not None:
            result = await readyz_store(container.store)
        elif container.broadcaster is not None:
            result = readyz_broadcaster(container.broadcaster)
        else:
            result = {"status": "degraded", "reason": "not-configured"}
        if result["status"] == "degraded":
            resp.status_code = status.HTTP_503_SERVICE_UNAVAILABLE
        return result

    router.add_api_route("/healthz", _healthz, methods=["GET"], tags=["health"])
    router.add_api_route("/readyz", _readyz, methods=["GET"], tags=["health"])
    return router


__all__ = ["HealthContainerProtocol", "build_router"]
