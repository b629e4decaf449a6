"""PostgreSQL implementation of the payload store."""

from __future__ import annotations

from collections.abc import Sequence

from ..logging import get_logger
from ..types import PayloadRecord
from .protocols import ConnectionProtocol, Row
from .store import StoreError

_log = get_logger(__name__)

_SCHEMA_STATEMENTS: tuple[str, ...] = (
    """
    CREATE TABLE IF NOT EXISTS qr_codes (
        id BIGSERIAL PRIMARY KEY,
        data TEXT NOT NULL CHECK (data <> ''),
        timestamp TIMESTAMPTZ NOT NULL DEFAULT now()
    )
    """,
    """
    CREATE INDEX IF NOT EXISTS qr_codes_timestamp_idx
    ON qr_codes (timestamp DESC, id DESC)
    """,
)


def _psycopg_error() -> type[Exception]:
    """Load psycopg.Error without importing psycopg at module level."""
    psycopg = __import__("psycopg")
    error_cls: type[Exception] = psycopg.Error
    return error_cls


def ensure_schema(conn: ConnectionProtocol) -> None:
    """Create the qr_codes table and its ordering index if missing."""
    cursor = conn.cursor()
    for statement in _SCHEMA_STATEMENTS:
        cursor.execute(statement)
    conn.commit()


class PostgresPayloadStore:
    """PayloadStore backed by the ``qr_codes`` table."""

    def __init__(self, conn: ConnectionProtocol) -> None:
        self._conn = conn

    def insert(self, payload: str) -> None:
        """Insert one record. Raises StoreError on any database failure."""
        error_cls = _psycopg_error()
        try:
            cursor = self._conn.cursor()
            cursor.execute("INSERT INTO qr_codes (data) VALUES (%s)", (payload,))
            self._conn.commit()
        except error_cls as exc:
            self._rollback_quietly()
            raise StoreError("insert into qr_codes failed") from exc

    def recent(self, limit: int) -> Sequence[PayloadRecord]:
        """Newest ``limit`` records in a single ordered query."""
        error_cls = _psycopg_error()
        try:
            cursor = self._conn.cursor()
            cursor.execute(
                """
                SELECT data,
                       to_char(timestamp AT TIME ZONE 'UTC',
                               'YYYY-MM-DD"T"HH24:MI:SS.US"Z"')
                FROM qr_codes
                ORDER BY timestamp DESC, id DESC
                LIMIT %s
                """,
                (limit,),
            )
            rows = cursor.fetchall()
        except error_cls as exc:
            raise StoreError("select from qr_codes failed") from exc
        return [_row_to_record(row) for row in rows]

    def ping(self) -> None:
        error_cls = _psycopg_error()
        try:
            cursor = self._conn.cursor()
            cursor.execute("SELECT 1")
            cursor.fetchone()
        except error_cls as exc:
            raise StoreError("database unreachable") from exc

    def close(self) -> None:
        self._conn.close()

    def _rollback_quietly(self) -> None:
        # Autocommit connections have nothing to roll back; a dead connection
        # cannot roll back either. The original failure is what gets raised.
        error_cls = _psycopg_error()
        try:
            self._conn.rollback()
        except error_cls:
            _log.warning("rollback after failed insert also failed")


def _row_to_record(row: Row) -> PayloadRecord:
    """Convert a (data, timestamp) row to a PayloadRecord."""
    data = row[0]
    timestamp = row[1]
    if not isinstance(data, str):
        raise TypeError(f"Expected str for data, got {type(data).__name__}")
    if not isinstance(timestamp, str):
        raise TypeError(f"Expected str for timestamp, got {type(timestamp).__name__}")
    return PayloadRecord(payload=data, recorded_at=timestamp)


__all__ = ["PostgresPayloadStore", "ensure_schema"]
