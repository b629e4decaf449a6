from __future__ import annotations

from .errors import MalformedRequestError, ValidationError
from .json_utils import (
    InvalidJsonError,
    JSONTypeError,
    load_json_bytes,
    narrow_json_to_dict,
    narrow_json_to_str,
)


def decode_upload(body: bytes) -> str:
    """Extract the ``data`` payload from an upload body.

    Raises:
        MalformedRequestError: body is not UTF-8 JSON, or not a JSON object.
        ValidationError: ``data`` is missing, null, not a string, empty, or
            contains NUL characters.

    The payload is returned exactly as sent; it is never trimmed.
    """
    try:
        parsed = narrow_json_to_dict(load_json_bytes(body))
    except InvalidJsonError as exc:
        raise MalformedRequestError() from exc
    except JSONTypeError as exc:
        raise MalformedRequestError("Request body must be a JSON object") from exc

    data = parsed.get("data")
    if data is None:
        raise ValidationError()
    try:
        payload = narrow_json_to_str(data)
    except JSONTypeError as exc:
        raise ValidationError("Field 'data' must be a string") from exc
    if payload == "":
        raise ValidationError()
    # PostgreSQL TEXT cannot hold NUL; reject it for every store alike.
    if "\x00" in payload:
        raise ValidationError("Field 'data' must not contain NUL characters")
    return payload


__all__ = ["decode_upload"]
