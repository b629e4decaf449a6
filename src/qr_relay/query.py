from __future__ import annotations

import asyncio
from collections.abc import Sequence

from .errors import InternalError, RelayErrorCode
from .logging import get_logger
from .persistence import PayloadStore, StoreError
from .types import (
    NO_DATA_YET,
    NOT_AVAILABLE,
    UPDATE_LOG_LIMIT,
    LogEntry,
    PayloadRecord,
    QrDataResponse,
)

_log = get_logger(__name__)


def build_qr_data(records: Sequence[PayloadRecord]) -> QrDataResponse:
    """Assemble the /qr_data body from records ordered newest first.

    The current payload is the head of the same list that forms the log, so
    both always come from one read.
    """
    log: list[LogEntry] = [
        LogEntry(data=r["payload"], timestamp=r["recorded_at"])
        for r in records[:UPDATE_LOG_LIMIT]
    ]
    if not log:
        return QrDataResponse(current_qr=NO_DATA_YET, last_updated=NOT_AVAILABLE, update_log=[])
    head = log[0]
    return QrDataResponse(
        current_qr=head["data"], last_updated=head["timestamp"], update_log=log
    )


async def load_qr_data(store: PayloadStore) -> QrDataResponse:
    """Read the latest records and build the response. Raises InternalError."""
    try:
        records = await asyncio.to_thread(store.recent, UPDATE_LOG_LIMIT)
    except StoreError as exc:
        raise InternalError(str(exc), RelayErrorCode.STORE_ERROR) from exc
    _log.debug("qr data read", extra={"records": len(records)})
    return build_qr_data(records)


__all__ = ["build_qr_data", "load_qr_data"]
