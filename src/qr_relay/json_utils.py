from __future__ import annotations

from collections.abc import Mapping, Sequence
from json import JSONDecodeError
from typing import Protocol

JSONValue = dict[str, "JSONValue"] | list["JSONValue"] | str | int | float | bool | None

# Accepts TypedDicts via Mapping; only ever serialized, never mutated.
_JSONInputValue = str | int | float | bool | None | Mapping[str, object] | Sequence[object]


class InvalidJsonError(ValueError):
    """Raised when a request body is not well-formed JSON."""


class JSONTypeError(TypeError):
    """Raised when a JSON value has an unexpected type during narrowing."""


class _JsonLoads(Protocol):
    def __call__(self, s: str) -> JSONValue: ...


class _JsonDumps(Protocol):
    def __call__(
        self,
        obj: _JSONInputValue,
        *,
        separators: tuple[str, str] | None = ...,
        ensure_ascii: bool = ...,
    ) -> str: ...


def dump_json_str(value: _JSONInputValue, *, compact: bool = True) -> str:
    """Serialize a JSON-compatible value.

    Non-ASCII characters are written as-is so payloads stay byte-identical
    once the response is UTF-8 encoded.
    """
    module = __import__("json")
    dumps: _JsonDumps = module.dumps
    separators = (",", ":") if compact else None
    return dumps(value, separators=separators, ensure_ascii=False)


def load_json_str(raw: str) -> JSONValue:
    module = __import__("json")
    loads: _JsonLoads = module.loads
    try:
        value = loads(raw)
    except (JSONDecodeError, RecursionError) as exc:
        # deeply nested input exhausts the decoder stack
        raise InvalidJsonError("Invalid JSON payload") from exc
    if isinstance(value, (dict, list, str, int, float, bool)) or value is None:
        return value
    raise InvalidJsonError("Invalid JSON payload")


def load_json_bytes(raw: bytes) -> JSONValue:
    try:
        text = raw.decode("utf-8")
    except UnicodeDecodeError as exc:
        raise InvalidJsonError("Request body is not valid UTF-8") from exc
    return load_json_str(text)


def narrow_json_to_dict(value: JSONValue) -> dict[str, JSONValue]:
    """Narrow JSONValue to dict.

    Raises JSONTypeError if value is not a dict.
    """
    if not isinstance(value, dict):
        raise JSONTypeError(f"Expected JSON object, got {type(value).__name__}")
    return value


def narrow_json_to_str(value: JSONValue) -> str:
    if not isinstance(value, str):
        raise JSONTypeError(f"Expected JSON string, got {type(value).__name__}")
    return value


__all__ = [
    "InvalidJsonError",
    "JSONTypeError",
    "JSONValue",
    "dump_json_str",
    "load_json_bytes",
    "load_json_str",
    "narrow_json_to_dict",
    "narrow_json_to_str",
]
