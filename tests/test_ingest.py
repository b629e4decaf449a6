from __future__ import annotations

import pytest

from qr_relay.broadcast import Broadcaster
from qr_relay.errors import InternalError, RelayErrorCode
from qr_relay.ingest import BroadcastIngestor, StoreIngestor
from qr_relay.persistence import InMemoryPayloadStore

from .conftest import FailingStore


class _ExplodingBroadcaster(Broadcaster):
    def publish(self, payload: str) -> int:
        raise RuntimeError("fan-out broke")


@pytest.mark.asyncio
async def test_store_ingestor_appends_every_upload() -> None:
    store = InMemoryPayloadStore()
    ingestor = StoreIngestor(store)

    await ingestor.ingest("same")
    result = await ingestor.ingest("same")

    assert result == {"accepted": True, "delivered": 0}
    assert [r["payload"] for r in store.recent(5)] == ["same", "same"]


@pytest.mark.asyncio
async def test_store_ingestor_skips_consecutive_duplicate() -> None:
    store = InMemoryPayloadStore()
    ingestor = StoreIngestor(store, "skip_consecutive")

    await ingestor.ingest("A")
    skipped = await ingestor.ingest("A")
    await ingestor.ingest("B")
    await ingestor.ingest("A")

    assert skipped["accepted"] is False
    assert [r["payload"] for r in store.recent(5)] == ["A", "B", "A"]


@pytest.mark.asyncio
async def test_store_ingestor_maps_store_failure() -> None:
    ingestor = StoreIngestor(FailingStore())

    with pytest.raises(InternalError) as exc_info:
        await ingestor.ingest("HELLO")

    assert exc_info.value.code is RelayErrorCode.STORE_ERROR
    assert exc_info.value.http_status == 500


@pytest.mark.asyncio
async def test_store_ingestor_skip_policy_maps_read_failure() -> None:
    ingestor = StoreIngestor(FailingStore(), "skip_consecutive")

    with pytest.raises(InternalError) as exc_info:
        await ingestor.ingest("HELLO")

    assert exc_info.value.code is RelayErrorCode.STORE_ERROR


@pytest.mark.asyncio
async def test_broadcast_ingestor_reports_delivery_count() -> None:
    broadcaster = Broadcaster()
    broadcaster.open_session()
    broadcaster.open_session()
    ingestor = BroadcastIngestor(broadcaster)

    result = await ingestor.ingest("X")

    assert result == {"accepted": True, "delivered": 2}


@pytest.mark.asyncio
async def test_broadcast_ingestor_skips_consecutive_duplicate() -> None:
    broadcaster = Broadcaster()
    session = broadcaster.open_session()
    ingestor = BroadcastIngestor(broadcaster, "skip_consecutive")

    await ingestor.ingest("X")
    skipped = await ingestor.ingest("X")

    assert skipped == {"accepted": False, "delivered": 0}
    assert session.queue.qsize() == 1


@pytest.mark.asyncio
async def test_broadcast_ingestor_maps_publish_failure() -> None:
    ingestor = BroadcastIngestor(_ExplodingBroadcaster())

    with pytest.raises(InternalError) as exc_info:
        await ingestor.ingest("X")

    assert exc_info.value.code is RelayErrorCode.BROADCAST_ERROR
