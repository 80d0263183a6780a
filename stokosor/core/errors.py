"""Error kinds raised by the inventory core and their HTTP translations.

The core never returns error codes: bad input raises
``InventoryValidationError`` before the store is touched, store failures raise
``StoreOperationError`` carrying the driver message, and lookups that miss
simply return ``None``. The handlers at the bottom turn those exceptions into
the JSON envelope used by every API response.
"""

from __future__ import annotations

from typing import Any

from fastapi import Request
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse
from starlette import status
from starlette.exceptions import HTTPException as StarletteHTTPException


class StokosorError(Exception):
    """Base class for every error raised on purpose by the core."""


class InventoryValidationError(StokosorError, ValueError):
    """Input rejected before any store call (empty name, unknown enum, ...)."""


class SnapshotFormatError(InventoryValidationError):
    """A backup document is missing its version or one of its collections."""


class StoreOperationError(StokosorError):
    """A read or write against the database failed."""


class MigrationError(StokosorError, RuntimeError):
    """The on-disk schema could not be brought up to date."""


class ErrorEnvelope(JSONResponse):
    def __init__(
        self,
        *,
        status_code: int,
        code: str,
        message: str,
        details: Any | None = None,
        headers: dict[str, str] | None = None,
    ) -> None:
        payload: dict[str, Any] = {"code": code, "message": message}
        if details is not None:
            payload["details"] = details
        super().__init__(payload, status_code=status_code, headers=headers)


async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    detail = exc.detail
    message = detail if isinstance(detail, str) else "Error"
    details = detail if isinstance(detail, dict) else None
    return ErrorEnvelope(status_code=exc.status_code, code="http_error", message=message, details=details)


async def validation_exception_handler(request: Request, exc):  # type: ignore[override]
    from fastapi.exceptions import RequestValidationError

    if isinstance(exc, RequestValidationError):
        return ErrorEnvelope(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            code="validation_error",
            message="Validation failed",
            details={"errors": jsonable_encoder(exc.errors())},
        )
    raise exc


async def inventory_error_handler(request: Request, exc: StokosorError):
    if isinstance(exc, SnapshotFormatError):
        return ErrorEnvelope(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            code="snapshot_invalid",
            message=str(exc),
        )
    if isinstance(exc, InventoryValidationError):
        return ErrorEnvelope(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            code="validation_error",
            message=str(exc),
        )
    if isinstance(exc, StoreOperationError):
        return ErrorEnvelope(
            status_code=status.HTTP_409_CONFLICT,
            code="store_error",
            message=str(exc),
        )
    return ErrorEnvelope(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        code="internal_error",
        message=str(exc) or exc.__class__.__name__,
    )
