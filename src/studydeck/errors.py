"""
studydeck.errors

Domain error taxonomy.

Responsibilities:
- Define one exception type per failure kind surfaced by the core.
- Carry a `public_message` that is safe to render to the caller.

Note:
- `Unauthorized` and `NotFound` deliberately share a public message; only logs
  tell them apart.
"""

from __future__ import annotations

from dataclasses import dataclass

RESOURCE_DENIED_MESSAGE = "Resource not found"


class StudyDeckError(Exception):
    public_message: str = "Request failed"


class Unauthenticated(StudyDeckError):
    public_message = "Authentication required"


@dataclass(eq=False)
class Unauthorized(StudyDeckError):
    """
    Principal is authenticated, but the resource belongs to someone else.
    """

    resource: str
    resource_id: int

    public_message = RESOURCE_DENIED_MESSAGE

    def __str__(self) -> str:
        return f"{self.resource} {self.resource_id} is owned by another principal"


@dataclass(eq=False)
class NotFound(StudyDeckError):
    resource: str
    resource_id: int

    public_message = RESOURCE_DENIED_MESSAGE

    def __str__(self) -> str:
        return f"{self.resource} {self.resource_id} does not exist"


@dataclass(eq=False)
class ValidationError(StudyDeckError):
    field: str
    message: str

    @property
    def public_message(self) -> str:  # type: ignore[override]
        return self.message

    def __str__(self) -> str:
        return f"{self.field}: {self.message}"


@dataclass(eq=False)
class QuotaExceeded(StudyDeckError):
    limit: int
    plan: str = "free"

    @property
    def public_message(self) -> str:  # type: ignore[override]
        return f"You've reached the {self.limit} deck limit. Upgrade to Pro for unlimited decks."

    def __str__(self) -> str:
        return f"deck limit {self.limit} reached on plan {self.plan}"


@dataclass(eq=False)
class FeatureNotEntitled(StudyDeckError):
    capability: str

    @property
    def public_message(self) -> str:  # type: ignore[override]
        return "This is a Pro feature. Upgrade to use it."

    def __str__(self) -> str:
        return f"capability {self.capability} not granted"


class UpstreamUnavailable(StudyDeckError):
    """
    Entitlement provider could not answer. Always recovered inside the resolver.
    """


class GenerationFailure(StudyDeckError):
    public_message = "Failed to generate flashcards"


# --- Module Notes -----------------------------------------------------------
# HTTP status mapping for these types lives in `studydeck.api.errors`.
