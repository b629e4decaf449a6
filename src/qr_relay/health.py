"""Health check utilities for qr-relay.

Liveness never touches dependencies. Readiness pings the payload store in
the poll variant and reports the broadcaster state in the push variant.
"""

from __future__ import annotations

import asyncio
from typing import Literal

from typing_extensions import TypedDict

from .broadcast import Broadcaster
from .logging import get_logger
from .persistence import PayloadStore, StoreError

_log = get_logger(__name__)


class HealthResponse(TypedDict):
    """Response for liveness probe (/healthz)."""

    status: Literal["ok"]


class ReadyResponse(TypedDict):
    """Response for readiness probe (/readyz).

    When ready: {"status": "ready", "reason": None}
    When degraded: {"status": "degraded", "reason": "description of issue"}
    """

    status: Literal["ready", "degraded"]
    reason: str | None


def healthz() -> HealthResponse:
    return {"status": "ok"}


async def readyz_store(store: PayloadStore) -> ReadyResponse:
    try:
        await asyncio.to_thread(store.ping)
    except StoreError as exc:
        _log.warning("readiness check failed", extra={"error_message": str(exc)})
        return {"status": "degraded", "reason": "store-unavailable"}
    return {"status": "ready", "reason": None}


def readyz_broadcaster(broadcaster: Broadcaster) -> ReadyResponse:
    if broadcaster.closed:
        return {"status": "degraded", "reason": "broadcaster-closed"}
    return {"status": "ready", "reason": None}


__all__ = [
    "HealthResponse",
    "ReadyResponse",
    "healthz",
    "readyz_broadcaster",
    "readyz_store",
]
