"""Store protocol for the append-only payload log."""

from __future__ import annotations

from collections.abc import Sequence
from typing import Protocol

from ..types import PayloadRecord


class StoreError(RuntimeError):
    """Raised by a store when the datastore rejects or fails an operation."""


class PayloadStore(Protocol):
    """Append-only log of payload records."""

    def insert(self, payload: str) -> None:
        """Append a record; the store assigns ``recorded_at``. Raises StoreError."""
        ...

    def recent(self, limit: int) -> Sequence[PayloadRecord]:
        """Up to ``limit`` records, newest first, from one consistent read."""
        ...

    def ping(self) -> None:
        """Raise StoreError when the datastore cannot be reached."""
        ...

    def close(self) -> None:
        """Release the datastore handle."""
        ...


__all__ = ["PayloadStore", "StoreError"]
