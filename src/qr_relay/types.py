from __future__ import annotations

from typing import Literal, TypedDict

Variant = Literal["poll", "push"]
DuplicatePolicy = Literal["accept", "skip_consecutive"]

# Sentinels returned by /qr_data while the store is empty.
NO_DATA_YET: str = "Waiting for QR code..."
NOT_AVAILABLE: str = "N/A"

# Number of records returned in update_log (current record included).
UPDATE_LOG_LIMIT: int = 5


class PayloadRecord(TypedDict, total=True):
    payload: str
    recorded_at: str  # ISO-8601 UTC, assigned by the store


class LogEntry(TypedDict, total=True):
    data: str
    timestamp: str


class QrDataResponse(TypedDict, total=True):
    current_qr: str
    last_updated: str
    update_log: list[LogEntry]


class IngestResult(TypedDict, total=True):
    accepted: bool
    delivered: int  # sessions offered the payload (push), 0 for poll


__all__ = [
    "NOT_AVAILABLE",
    "NO_DATA_YET",
    "UPDATE_LOG_LIMIT",
    "DuplicatePolicy",
    "IngestResult",
    "LogEntry",
    "PayloadRecord",
    "QrDataResponse",
    "Variant",
]
