from __future__ import annotations

import logging
import os
import socket
import sys
import time
from typing import Literal, Protocol

from .json_utils import JSONValue, dump_json_str
from .request_context import request_id_var

LogFormat = Literal["json", "text"]
LogLevel = Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]

# Structured fields picked up from ``extra=`` on every record when present.
RELAY_LOG_FIELDS: tuple[str, ...] = (
    "variant",
    "payload_len",
    "session_id",
    "sessions",
    "delivered",
    "dropped",
    "records",
    "error_code",
    "error_message",
    "error_type",
    "path",
    "method",
)


class _LogRecordMapping(Protocol):
    def __contains__(self, key: str) -> bool: ...

    def __getitem__(self, key: str) -> object: ...


class _MissingValue:
    __slots__ = ()


_MISSING = _MissingValue()


def _get_json_record_value(record: logging.LogRecord, field_name: str) -> JSONValue | _MissingValue:
    record_mapping: _LogRecordMapping = record.__dict__
    if field_name not in record_mapping:
        return _MISSING
    raw_value = record_mapping[field_name]
    if isinstance(raw_value, (str, int, float, bool)) or raw_value is None:
        return raw_value
    return _MISSING


class JsonFormatter(logging.Formatter):
    """One JSON object per line.

    Every record carries timestamp (UTC), level, logger, message and the
    static fields; request_id is attached when a request is in flight and the
    relay fields are copied from the record when present.
    """

    def __init__(self, *, static_fields: dict[str, str]) -> None:
        super().__init__()
        self._static = static_fields

    def format(self, record: logging.LogRecord) -> str:
        payload: dict[str, JSONValue] = {
            "timestamp": time.strftime("%Y-%m-%dT%H:%M:%SZ", time.gmtime(record.created)),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        for key in self._static:
            payload[key] = self._static[key]

        rid = request_id_var.get()
        if rid != "":
            payload["request_id"] = rid

        for field_name in RELAY_LOG_FIELDS:
            field_value = _get_json_record_value(record, field_name)
            if isinstance(field_value, _MissingValue):
                continue
            payload[field_name] = field_value

        if record.exc_info is not None:
            payload["exc_info"] = self.formatException(record.exc_info)

        return dump_json_str(payload)


class TextFormatter(logging.Formatter):
    """Format: [timestamp] [LEVEL] [logger] key=value... message"""

    def format(self, record: logging.LogRecord) -> str:
        timestamp = self.formatTime(record, "%Y-%m-%d %H:%M:%S")
        parts: list[str] = [f"[{timestamp}]", f"[{record.levelname}]", f"[{record.name}]"]

        rid = request_id_var.get()
        if rid != "":
            parts.append(f"request_id={rid}")
        for field_name in RELAY_LOG_FIELDS:
            field_value = _get_json_record_value(record, field_name)
            if isinstance(field_value, _MissingValue):
                continue
            parts.append(f"{field_name}={field_value}")

        parts.append(record.getMessage())
        line = " ".join(parts)
        if record.exc_info is not None:
            line = line + "\n" + self.formatException(record.exc_info)
        return line


def _compute_instance_id() -> str:
    host = socket.gethostname().split(".")[0]
    return f"{host}-{os.getpid()}"


def _level_to_int(level: LogLevel) -> int:
    level_map: dict[LogLevel, int] = {
        "DEBUG": logging.DEBUG,
        "INFO": logging.INFO,
        "WARNING": logging.WARNING,
        "ERROR": logging.ERROR,
        "CRITICAL": logging.CRITICAL,
    }
    return level_map[level]


def setup_logging(
    *,
    level: LogLevel,
    format_mode: LogFormat,
    service_name: str,
    instance_id: str | None,
) -> logging.Logger:
    """Configure the root logger for the service.

    Existing root handlers are cleared so repeated calls (one per app built
    in tests) do not duplicate output.

    Args:
        level: Root log level.
        format_mode: "json" for production, "text" for local development.
        service_name: Written into every JSON record as ``service``.
        instance_id: Written as ``instance_id``; hostname-pid when None.

    Returns:
        The configured root logger.
    """
    root = logging.getLogger()
    root.handlers.clear()
    root.setLevel(_level_to_int(level))

    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(logging.DEBUG)
    if format_mode == "json":
        static_fields: dict[str, str] = {
            "service": service_name,
            "instance_id": instance_id if instance_id is not None else _compute_instance_id(),
        }
        handler.setFormatter(JsonFormatter(static_fields=static_fields))
    else:
        handler.setFormatter(TextFormatter())
    root.addHandler(handler)

    # uvicorn's access log duplicates what the request-id middleware gives us
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("psycopg").setLevel(logging.WARNING)

    return root


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)


__all__ = [
    "RELAY_LOG_FIELDS",
    "JsonFormatter",
    "LogFormat",
    "LogLevel",
    "TextFormatter",
    "get_logger",
    "setup_logging",
]
