from __future__ import annotations

from typing import TypedDict

from . import _test_hooks
from .logging import LogFormat, LogLevel
from .types import DuplicatePolicy, Variant

_DEFAULT_HOST = "0.0.0.0"
_DEFAULT_PORT = 3000
_DEFAULT_QUEUE_SIZE = 100
_DEFAULT_KEEPALIVE_SECONDS = 15.0


class RelaySettings(TypedDict, total=True):
    variant: Variant
    database_url: str | None  # None selects the in-process memory store
    host: str
    port: int
    duplicate_policy: DuplicatePolicy
    session_queue_size: int
    sse_keepalive_seconds: float
    log_level: LogLevel
    log_format: LogFormat


def _get_str(key: str) -> str | None:
    val = _test_hooks.get_env(key)
    if val is None:
        return None
    trimmed = val.strip()
    return trimmed if trimmed != "" else None


def _get_int(key: str, default: int, *, minimum: int) -> int:
    raw = _get_str(key)
    if raw is None:
        return default
    value = int(raw)
    if value < minimum:
        raise ValueError(f"{key} must be >= {minimum}, got {value}")
    return value


def _get_float(key: str, default: float) -> float:
    raw = _get_str(key)
    if raw is None:
        return default
    value = float(raw)
    if value <= 0:
        raise ValueError(f"{key} must be positive, got {value}")
    return value


def _parse_variant(raw: str | None) -> Variant:
    if raw is None:
        return "poll"
    lowered = raw.lower()
    if lowered == "poll":
        return "poll"
    if lowered == "push":
        return "push"
    raise ValueError(f"RELAY_VARIANT must be 'poll' or 'push', got {raw!r}")


def _parse_duplicate_policy(raw: str | None) -> DuplicatePolicy:
    if raw is None:
        return "accept"
    lowered = raw.lower()
    if lowered == "accept":
        return "accept"
    if lowered == "skip_consecutive":
        return "skip_consecutive"
    raise ValueError(
        f"RELAY_DUPLICATE_POLICY must be 'accept' or 'skip_consecutive', got {raw!r}"
    )


def _parse_log_level(raw: str | None) -> LogLevel:
    if raw is None:
        return "INFO"
    upper = raw.upper()
    if upper == "DEBUG":
        return "DEBUG"
    if upper == "INFO":
        return "INFO"
    if upper == "WARNING":
        return "WARNING"
    if upper == "ERROR":
        return "ERROR"
    if upper == "CRITICAL":
        return "CRITICAL"
    raise ValueError(f"Invalid LOG_LEVEL: {raw!r}")


def _parse_log_format(raw: str | None) -> LogFormat:
    if raw is None:
        return "json"
    lowered = raw.lower()
    if lowered == "json":
        return "json"
    if lowered == "text":
        return "text"
    raise ValueError(f"LOG_FORMAT must be 'json' or 'text', got {raw!r}")


def load_settings_from_env() -> RelaySettings:
    """Load and validate relay settings from environment variables."""
    port = _get_int("PORT", _DEFAULT_PORT, minimum=1)
    if port > 65535:
        raise ValueError(f"PORT must be <= 65535, got {port}")
    host = _get_str("HOST")
    return {
        "variant": _parse_variant(_get_str("RELAY_VARIANT")),
        "database_url": _get_str("DATABASE_URL"),
        "host": host if host is not None else _DEFAULT_HOST,
        "port": port,
        "duplicate_policy": _parse_duplicate_policy(_get_str("RELAY_DUPLICATE_POLICY")),
        "session_queue_size": _get_int(
            "RELAY_SESSION_QUEUE_SIZE", _DEFAULT_QUEUE_SIZE, minimum=1
        ),
        "sse_keepalive_seconds": _get_float(
            "RELAY_SSE_KEEPALIVE_SECONDS", _DEFAULT_KEEPALIVE_SECONDS
        ),
        "log_level": _parse_log_level(_get_str("LOG_LEVEL")),
        "log_format": _parse_log_format(_get_str("LOG_FORMAT")),
    }


__all__ = ["RelaySettings", "load_settings_from_env"]
