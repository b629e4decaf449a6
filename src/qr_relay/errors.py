from __future__ import annotations

from enum import Enum
from typing import Protocol

from starlette.requests import Request
from starlette.responses import JSONResponse, Response

from .logging import get_logger
from .request_context import REQUEST_ID_HEADER, decode_request_id, request_id_var


class RelayErrorCode(str, Enum):
    """Error codes returned in the ``code`` field of error responses.

    Client errors (4xx) first, then server errors (5xx).
    """

    INVALID_INPUT = "INVALID_INPUT"  # 400 - data field missing, empty or not a string
    INVALID_JSON = "INVALID_JSON"  # 400 - body is not a JSON object

    INTERNAL_ERROR = "INTERNAL_ERROR"  # 500 - unexpected server error
    STORE_ERROR = "STORE_ERROR"  # 500 - datastore insert/read failed
    BROADCAST_ERROR = "BROADCAST_ERROR"  # 500 - fan-out to sessions failed


_ERROR_CODE_STATUS: dict[RelayErrorCode, int] = {
    RelayErrorCode.INVALID_INPUT: 400,
    RelayErrorCode.INVALID_JSON: 400,
    RelayErrorCode.INTERNAL_ERROR: 500,
    RelayErrorCode.STORE_ERROR: 500,
    RelayErrorCode.BROADCAST_ERROR: 500,
}

# Messages sent to callers for server errors; details stay in the logs.
_PUBLIC_MESSAGE: dict[RelayErrorCode, str] = {
    RelayErrorCode.INTERNAL_ERROR: "Internal server error",
    RelayErrorCode.STORE_ERROR: "Error accessing data store",
    RelayErrorCode.BROADCAST_ERROR: "Error broadcasting data",
}


class AppError(Exception):
    """Application error with a machine-readable code and an HTTP status.

    Attributes:
        code: Error code enum value
        message: Human-readable message (logged; returned only for 4xx)
        http_status: HTTP status code to return
    """

    def __init__(self, code: RelayErrorCode, message: str, http_status: int | None = None) -> None:
        super().__init__(message)
        self.code = code
        self.message = message
        self.http_status = http_status if http_status is not None else _ERROR_CODE_STATUS[code]


class ValidationError(AppError):
    """The ``data`` field is missing, empty or not a string."""

    def __init__(self, message: str = "No data provided") -> None:
        super().__init__(RelayErrorCode.INVALID_INPUT, message)


class MalformedRequestError(AppError):
    """The request body could not be parsed as a JSON object."""

    def __init__(self, message: str = "Invalid JSON format") -> None:
        super().__init__(RelayErrorCode.INVALID_JSON, message)


class InternalError(AppError):
    """A datastore or broadcast side effect failed."""

    def __init__(
        self, message: str, code: RelayErrorCode = RelayErrorCode.INTERNAL_ERROR
    ) -> None:
        super().__init__(code, message, http_status=500)


def public_message(exc: AppError) -> str:
    if exc.http_status < 500:
        return exc.message
    return _PUBLIC_MESSAGE.get(exc.code, _PUBLIC_MESSAGE[RelayErrorCode.INTERNAL_ERROR])


def error_body(code: str, message: str, request_id: str) -> dict[str, str]:
    """Standard error payload: ``{"code", "message", "request_id"}``."""
    return {"code": code, "message": message, "request_id": request_id}


class _AddExceptionHandler(Protocol):
    def add_exception_handler(
        self,
        exc_class_or_status_code: int | type[Exception],
        handler: _ExceptionHandler,
    ) -> None: ...


class _ExceptionHandler(Protocol):
    async def __call__(self, request: Request, exc: Exception) -> Response: ...


def install_exception_handlers(app: _AddExceptionHandler, *, logger_name: str = "qr-relay") -> None:
    """Map AppError and unhandled exceptions to JSON error responses.

    Client errors (4xx) are logged at INFO without traceback; server errors
    and unhandled exceptions at ERROR with the traceback attached.
    """
    logger = get_logger(logger_name)

    async def _app_error_handler(request: Request, exc: Exception) -> Response:
        if not isinstance(exc, AppError):
            return await _unhandled_handler(request, exc)
        rid = request_id_var.get()
        extra: dict[str, str] = {
            "error_code": exc.code.value,
            "error_message": exc.message,
            "path": request.url.path,
            "method": request.method,
        }
        if exc.http_status < 500:
            logger.info("user_error", extra=extra)
        else:
            logger.error("system_error", extra=extra, exc_info=exc)
        return JSONResponse(
            content=error_body(exc.code.value, public_message(exc), rid),
            status_code=exc.http_status,
        )

    async def _unhandled_handler(request: Request, exc: Exception) -> Response:
        # Runs outside the request-id middleware, which has already reset the var.
        rid = request_id_var.get() or decode_request_id(request.scope)
        logger.error(
            "unhandled_exception",
            extra={
                "error_type": type(exc).__name__,
                "error_message": str(exc),
                "path": request.url.path,
                "method": request.method,
            },
            exc_info=exc,
        )
        code = RelayErrorCode.INTERNAL_ERROR
        return JSONResponse(
            content=error_body(code.value, _PUBLIC_MESSAGE[code], rid),
            status_code=500,
            headers={REQUEST_ID_HEADER: rid},
        )

    app.add_exception_handler(AppError, _app_error_handler)
    app.add_exception_handler(Exception, _unhandled_handler)


__all__ = [
    "AppError",
    "InternalError",
    "MalformedRequestError",
    "RelayErrorCode",
    "ValidationError",
    "error_body",
    "install_exception_handlers",
    "public_message",
]
