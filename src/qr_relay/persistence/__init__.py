"""Payload store implementations behind a Protocol-typed psycopg interface."""

from __future__ import annotations

from .memory import InMemoryPayloadStore
from .postgres import PostgresPayloadStore, ensure_schema
from .protocols import ConnectionProtocol, CursorProtocol
from .store import PayloadStore, StoreError

__all__ = [
    "ConnectionProtocol",
    "CursorProtocol",
    "InMemoryPayloadStore",
    "PayloadStore",
    "PostgresPayloadStore",
    "StoreError",
    "ensure_schema",
]
