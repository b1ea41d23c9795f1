"""
studydeck.auth.models

Auth domain models.

Responsibilities:
- Define the authenticated identity type (`Principal`) injected into endpoints.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any


@dataclass(frozen=True, slots=True)
class Principal:
    """
    Authenticated caller identity.

    `subject` is the only value ownership is keyed on. `claims` holds the verified
    session claims the token was issued with; they are read by the fallback
    entitlement source and nothing else.
    """

    subject: str
    claims: Mapping[str, Any] = field(default_factory=dict, compare=False, hash=False)

    @property
    def is_authenticated(self) -> bool:
        return bool(self.subject.strip())


# --- Module Notes -----------------------------------------------------------
# Keep this model minimal; it is used across API, services, and entitlement sources.
