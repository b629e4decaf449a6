"""Database protocol definitions for psycopg with strict typing."""

from __future__ import annotations

from collections.abc import Sequence
from typing import Protocol

Params = tuple[str | int | bool | None, ...]
Row = tuple[str | int | bool | None, ...]


class CursorProtocol(Protocol):
    """Protocol for psycopg cursor."""

    def execute(self, query: str, params: Params = ()) -> None:
        """Execute a query with parameters."""
        ...

    def fetchone(self) -> Row | None:
        """Fetch one row or None if no more rows."""
        ...

    def fetchall(self) -> Sequence[Row]:
        """Fetch all remaining rows."""
        ...


class ConnectionProtocol(Protocol):
    """Protocol for psycopg connection."""

    def cursor(self) -> CursorProtocol:
        """Create a new cursor."""
        ...

    def commit(self) -> None:
        """Commit the current transaction."""
        ...

    def rollback(self) -> None:
        """Rollback the current transaction."""
        ...

    def close(self) -> None:
        """Close the connection."""
        ...


__all__ = ["ConnectionProtocol", "CursorProtocol", "Params", "Row"]
