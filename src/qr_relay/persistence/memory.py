"""In-process payload store.

Used when no DATABASE_URL is configured and by the test suite. Records live
only as long as the process.
"""

from __future__ import annotations

import threading
from collections.abc import Callable, Sequence
from datetime import UTC, datetime

from ..types import PayloadRecord
from .store import StoreError


def _utc_now() -> datetime:
    return datetime.now(UTC)


def format_timestamp(moment: datetime) -> str:
    """Render a timestamp the way the postgres store does (microseconds, Z)."""
    return moment.astimezone(UTC).strftime("%Y-%m-%dT%H:%M:%S.%fZ")


class InMemoryPayloadStore:
    """PayloadStore holding records in a list guarded by a lock."""

    def __init__(self, clock: Callable[[], datetime] = _utc_now) -> None:
        self._clock = clock
        self._lock = threading.Lock()
        self._records: list[PayloadRecord] = []
        self._last: datetime | None = None
        self._closed = False

    def insert(self, payload: str) -> None:
        if payload == "":
            raise StoreError("payload must be non-empty")
        with self._lock:
            if self._closed:
                raise StoreError("store is closed")
            now = self._clock()
            # recorded_at never goes backwards even if the wall clock does
            if self._last is not None and now < self._last:
                now = self._last
            self._last = now
            self._records.append(PayloadRecord(payload=payload, recorded_at=format_timestamp(now)))

    def recent(self, limit: int) -> Sequence[PayloadRecord]:
        with self._lock:
            if self._closed:
                raise StoreError("store is closed")
            if limit <= 0:
                return []
            return list(reversed(self._records[-limit:]))

    def ping(self) -> None:
        with self._lock:
            if self._closed:
                raise StoreError("store is closed")

    def close(self) -> None:
        with self._lock:
            self._closed = True

    def __len__(self) -> int:
        with self._lock:
            return len(self._records)


__all__ = ["InMemoryPayloadStore", "format_timestamp"]
