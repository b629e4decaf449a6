"""Application context for qr-relay.

Holds the settings and the process-wide resources of the selected variant
(payload store for poll, broadcaster for push). Route builders receive the
container explicitly; nothing is kept in module globals.
"""

from __future__ import annotations

from . import _test_hooks
from .broadcast import Broadcaster
from .ingest import BroadcastIngestor, Ingestor, StoreIngestor
from .logging import get_logger
from .persistence import (
    InMemoryPayloadStore,
    PayloadStore,
    PostgresPayloadStore,
    ensure_schema,
)
from .settings import RelaySettings
from .types import Variant

_log = get_logger(__name__)


class RelayContainer:
    """Container holding the relay's shared dependencies.

    Attributes:
        settings: Configuration loaded from the environment.
        store: Payload store (poll variant only).
        broadcaster: Session fan-out (push variant only).
        ingestor: Side effect applied for each accepted upload.
    """

    settings: RelaySettings
    store: PayloadStore | None
    broadcaster: Broadcaster | None
    ingestor: Ingestor

    def __init__(
        self,
        settings: RelaySettings,
        *,
        store: PayloadStore | None = None,
        broadcaster: Broadcaster | None = None,
    ) -> None:
        self.settings = settings
        self.store = store
        self.broadcaster = broadcaster
        policy = settings["duplicate_policy"]
        if settings["variant"] == "poll":
            if store is None:
                raise ValueError("poll variant requires a payload store")
            self.ingestor = StoreIngestor(store, policy)
        else:
            if broadcaster is None:
                raise ValueError("push variant requires a broadcaster")
            self.ingestor = BroadcastIngestor(broadcaster, policy)

    @classmethod
    def from_settings(cls, settings: RelaySettings) -> RelayContainer:
        """Build the resources for the configured variant.

        For poll with DATABASE_URL set, connects through the connection hook
        and creates the schema (safe to repeat); without it the in-memory
        store is used.
        """
        if settings["variant"] == "push":
            return cls(settings, broadcaster=Broadcaster(settings["session_queue_size"]))

        database_url = settings["database_url"]
        store: PayloadStore
        if database_url is None:
            _log.warning("DATABASE_URL not set, payloads are kept in memory only")
            store = InMemoryPayloadStore()
        else:
            conn = _test_hooks.connection_factory(database_url)
            ensure_schema(conn)
            store = PostgresPayloadStore(conn)
        return cls(settings, store=store)

    @property
    def variant(self) -> Variant:
        return self.settings["variant"]

    def require_store(self) -> PayloadStore:
        if self.store is None:
            raise RuntimeError("payload store is only available in the poll variant")
        return self.store

    def require_broadcaster(self) -> Broadcaster:
        if self.broadcaster is None:
            raise RuntimeError("broadcaster is only available in the push variant")
        return self.broadcaster

    def close(self) -> None:
        """Close all resources held by the container."""
        if self.broadcaster is not None:
            self.broadcaster.close()
        if self.store is not None:
            self.store.close()


__all__ = ["RelayContainer"]
