from __future__ import annotations

import uuid
from contextvars import ContextVar
from typing import Protocol

# Request ID for the request being served; read by the log formatter and
# the exception handlers.
request_id_var: ContextVar[str] = ContextVar("request_id", default="")

REQUEST_ID_HEADER = "x-request-id"


class _Scope(Protocol):
    def get(
        self, key: str, default: str | list[tuple[bytes, bytes]] | None = None
    ) -> str | list[tuple[bytes, bytes]] | None: ...


class _HeadersMutable(Protocol):
    def __setitem__(self, key: str, value: str) -> None: ...


class _RequestAdapter(Protocol):
    @property
    def scope(self) -> _Scope: ...


class _ResponseAdapter(Protocol):
    @property
    def headers(self) -> _HeadersMutable: ...


class _CallNext(Protocol):
    async def __call__(self, request: _RequestAdapter) -> _ResponseAdapter: ...


class _CallNextMiddleware(Protocol):
    async def __call__(
        self, request: _RequestAdapter, call_next: _CallNext
    ) -> _ResponseAdapter: ...


class _MiddlewareDecorator(Protocol):
    def __call__(self, func: _CallNextMiddleware) -> _CallNextMiddleware: ...


class _FastAPIAppProto(Protocol):
    def middleware(self, name: str) -> _MiddlewareDecorator: ...


def install_request_id_middleware(app: _FastAPIAppProto) -> None:
    """Bind a request ID for each HTTP request and echo it back in X-Request-ID.

    An incoming X-Request-ID header is reused, otherwise a UUID4 is generated.
    """
    decorator = app.middleware("http")

    @decorator
    async def _middleware(request: _RequestAdapter, call_next: _CallNext) -> _ResponseAdapter:
        rid = decode_request_id(request.scope)
        token = request_id_var.set(rid)
        try:
            response = await call_next(request)
            response.headers[REQUEST_ID_HEADER] = rid
            return response
        finally:
            request_id_var.reset(token)


def decode_request_id(scope: _Scope) -> str:
    """Extract the request ID from ASGI scope headers or generate a new one."""
    headers_raw = scope.get("headers")
    if not isinstance(headers_raw, list):
        return str(uuid.uuid4())

    for name_bytes, value_bytes in headers_raw:
        if name_bytes.decode("latin1").lower() == REQUEST_ID_HEADER:
            value = value_bytes.decode("latin1").strip()
            if value:
                return value

    return str(uuid.uuid4())


__all__ = [
    "REQUEST_ID_HEADER",
    "decode_request_id",
    "install_request_id_middleware",
    "request_id_var",
]
