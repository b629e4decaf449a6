"""Shared fixtures and fakes for qr-relay tests."""

from __future__ import annotations

from collections.abc import Generator, Sequence

import pytest

from qr_relay import _test_hooks
from qr_relay.broadcast import Broadcaster
from qr_relay.container import RelayContainer
from qr_relay.persistence import InMemoryPayloadStore, StoreError
from qr_relay.persistence.protocols import CursorProtocol, Params, Row
from qr_relay.settings import RelaySettings
from qr_relay.types import DuplicatePolicy, PayloadRecord, Variant


def make_settings(
    variant: Variant = "poll",
    *,
    duplicate_policy: DuplicatePolicy = "accept",
    database_url: str | None = None,
    session_queue_size: int = 100,
    sse_keepalive_seconds: float = 15.0,
) -> RelaySettings:
    return RelaySettings(
        variant=variant,
        database_url=database_url,
        host="127.0.0.1",
        port=3000,
        duplicate_policy=duplicate_policy,
        session_queue_size=session_queue_size,
        sse_keepalive_seconds=sse_keepalive_seconds,
        log_level="INFO",
        log_format="text",
    )


# =============================================================================
# Fakes
# =============================================================================


class FailingStore:
    """Store whose every operation fails like an unreachable database."""

    def insert(self, payload: str) -> None:
        raise StoreError("connection refused")

    def recent(self, limit: int) -> Sequence[PayloadRecord]:
        raise StoreError("connection refused")

    def ping(self) -> None:
        raise StoreError("connection refused")

    def close(self) -> None:
        return None


class RecordingCursor:
    """Cursor that records statements and replays canned rows."""

    def __init__(self, conn: RecordingConnection) -> None:
        self._conn = conn
        self._rows: list[Row] = []

    def execute(self, query: str, params: Params = ()) -> None:
        if self._conn.fail_with is not None:
            raise self._conn.fail_with
        self._conn.executed.append((" ".join(query.split()), params))
        self._rows = list(self._conn.rows)

    def fetchone(self) -> Row | None:
        return self._rows[0] if self._rows else None

    def fetchall(self) -> Sequence[Row]:
        return self._rows


class RecordingConnection:
    def __init__(self, rows: Sequence[Row] = ()) -> None:
        self.rows: list[Row] = list(rows)
        self.executed: list[tuple[str, Params]] = []
        self.commits = 0
        self.rollbacks = 0
        self.closed = False
        self.fail_with: Exception | None = None

    def cursor(self) -> CursorProtocol:
        return RecordingCursor(self)

    def commit(self) -> None:
        self.commits += 1

    def rollback(self) -> None:
        self.rollbacks += 1

    def close(self) -> None:
        self.closed = True


# =============================================================================
# Fixtures
# =============================================================================


@pytest.fixture(autouse=True)
def _restore_hooks() -> Generator[None, None, None]:
    """Restore all hooks after each test."""
    original_env = _test_hooks.get_env
    original_conn = _test_hooks.connection_factory
    original_serve = _test_hooks.serve
    yield
    _test_hooks.get_env = original_env
    _test_hooks.connection_factory = original_conn
    _test_hooks.serve = original_serve


@pytest.fixture
def memory_store() -> InMemoryPayloadStore:
    return InMemoryPayloadStore()


@pytest.fixture
def poll_container(memory_store: InMemoryPayloadStore) -> RelayContainer:
    return RelayContainer(make_settings("poll"), store=memory_store)


@pytest.fixture
def broadcaster() -> Broadcaster:
    return Broadcaster(queue_size=10)


@pytest.fixture
def push_container(broadcaster: Broadcaster) -> RelayContainer:
    return RelayContainer(make_settings("push"), broadcaster=broadcaster)
