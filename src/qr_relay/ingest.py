"""Upload side effects for both delivery variants.

The poll variant appends to the payload store; the push variant hands the
payload to the broadcaster. Either way the caller gets its answer only after
the side effect has been applied.
"""

from __future__ import annotations

import asyncio
from typing import Protocol

from .broadcast import Broadcaster
from .errors import InternalError, RelayErrorCode
from .logging import get_logger
from .persistence import PayloadStore, StoreError
from .types import DuplicatePolicy, IngestResult

_log = get_logger(__name__)


class Ingestor(Protocol):
    async def ingest(self, payload: str) -> IngestResult: ...


class StoreIngestor:
    """Appends each upload to the store (poll variant)."""

    def __init__(self, store: PayloadStore, policy: DuplicatePolicy = "accept") -> None:
        self._store = store
        self._policy = policy
        # check-then-insert must not interleave under skip_consecutive
        self._lock = asyncio.Lock()

    async def ingest(self, payload: str) -> IngestResult:
        if self._policy == "accept":
            await self._insert(payload)
            return IngestResult(accepted=True, delivered=0)
        async with self._lock:
            if await self._latest() == payload:
                _log.info(
                    "duplicate payload skipped",
                    extra={"variant": "poll", "payload_len": len(payload)},
                )
                return IngestResult(accepted=False, delivered=0)
            await self._insert(payload)
        return IngestResult(accepted=True, delivered=0)

    async def _latest(self) -> str | None:
        try:
            records = await asyncio.to_thread(self._store.recent, 1)
        except StoreError as exc:
            raise InternalError(str(exc), RelayErrorCode.STORE_ERROR) from exc
        return records[0]["payload"] if records else None

    async def _insert(self, payload: str) -> None:
        try:
            await asyncio.to_thread(self._store.insert, payload)
        except StoreError as exc:
            raise InternalError(str(exc), RelayErrorCode.STORE_ERROR) from exc
        _log.info("payload stored", extra={"variant": "poll", "payload_len": len(payload)})


class BroadcastIngestor:
    """Publishes each upload to connected sessions (push variant)."""

    def __init__(self, broadcaster: Broadcaster, policy: DuplicatePolicy = "accept") -> None:
        self._broadcaster = broadcaster
        self._policy = policy

    async def ingest(self, payload: str) -> IngestResult:
        if self._policy == "skip_consecutive" and self._broadcaster.last_payload == payload:
            _log.info(
                "duplicate payload skipped",
                extra={"variant": "push", "payload_len": len(payload)},
            )
            return IngestResult(accepted=False, delivered=0)
        try:
            delivered = self._broadcaster.publish(payload)
        except Exception as exc:
            raise InternalError(
                f"publish failed: {type(exc).__name__}", RelayErrorCode.BROADCAST_ERROR
            ) from exc
        _log.info(
            "payload broadcast",
            extra={"variant": "push", "payload_len": len(payload), "delivered": delivered},
        )
        return IngestResult(accepted=True, delivered=delivered)


__all__ = ["BroadcastIngestor", "Ingestor", "StoreIngestor"]
