"""
studydeck.auth.deps

FastAPI dependency functions for authentication.

Responsibilities:
- Convert a bearer token into a typed `Principal`.
"""

from __future__ import annotations

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from studydeck.auth.jwt import JwtConfig, JwtValidationError, decode_and_validate
from studydeck.auth.models import Principal
from studydeck.errors import Unauthenticated
from studydeck.observability.logging import get_logger
from studydeck.settings import Settings, get_settings

log = get_logger(__name__)

_bearer = HTTPBearer(auto_error=False)


def get_principal(
    creds: HTTPAuthorizationCredentials | None = Depends(_bearer),
    settings: Settings = Depends(get_settings),
) -> Principal:
    if creds is None or not creds.credentials:
        raise Unauthenticated("missing bearer token")

    try:
        payload = decode_and_validate(cfg=JwtConfig.from_settings(settings), token=creds.credentials)
    except JwtValidationError as e:
        log.info("token_rejected", error=str(e))
        raise Unauthenticated(f"invalid token: {e}") from e

    subject = str(payload.get("sub", "")).strip()
    if not subject:
        raise Unauthenticated("invalid token subject")

    # Only the subject is identity; the remaining claims are kept as session attributes.
    return Principal(subject=subject, claims=payload)


# --- Module Notes -----------------------------------------------------------
# `Unauthenticated` is rendered as 401 by the handlers in `studydeck.api.errors`.
