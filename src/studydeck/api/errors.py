"""
studydeck.api.errors

HTTP rendering of the domain error taxonomy.

Responsibilities:
- Map each `StudyDeckError` subtype to a status code and a safe JSON body.
- Render `Unauthorized` and `NotFound` identically.
"""

from __future__ import annotations

from typing import Any

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from starlette.status import (
    HTTP_401_UNAUTHORIZED,
    HTTP_403_FORBIDDEN,
    HTTP_404_NOT_FOUND,
    HTTP_500_INTERNAL_SERVER_ERROR,
    HTTP_502_BAD_GATEWAY,
)

from studydeck.errors import (
    FeatureNotEntitled,
    GenerationFailure,
    NotFound,
    QuotaExceeded,
    StudyDeckError,
    Unauthenticated,
    Unauthorized,
    ValidationError,
)
from studydeck.observability.logging import get_logger

log = get_logger(__name__)


def _render(exc: StudyDeckError) -> tuple[int, dict[str, Any]]:
    body: dict[str, Any] = {"detail": exc.public_message}
    if isinstance(exc, Unauthenticated):
        return HTTP_401_UNAUTHORIZED, body
    if isinstance(exc, (Unauthorized, NotFound)):
        # Same status and body for both; the distinction exists only in logs.
        return HTTP_404_NOT_FOUND, body
    if isinstance(exc, ValidationError):
        return 422, {**body, "field": exc.field}
    if isinstance(exc, QuotaExceeded):
        return HTTP_403_FORBIDDEN, {**body, "limit": exc.limit, "requires_upgrade": True}
    if isinstance(exc, FeatureNotEntitled):
        return HTTP_403_FORBIDDEN, {**body, "requires_upgrade": True}
    if isinstance(exc, GenerationFailure):
        return HTTP_502_BAD_GATEWAY, body
    return HTTP_500_INTERNAL_SERVER_ERROR, body


async def _handle(request: Request, exc: StudyDeckError) -> JSONResponse:
    status, body = _render(exc)
    log.info("request_failed", error_type=type(exc).__name__, status=status, error=str(exc))
    headers = {"WWW-Authenticate": "Bearer"} if status == HTTP_401_UNAUTHORIZED else None
    return JSONResponse(status_code=status, content=body, headers=headers)


def register_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(StudyDeckError, _handle)  # type: ignore[arg-type]
