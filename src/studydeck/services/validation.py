"""
studydeck.services.validation

Field-level validation for deck/card input.

Responsibilities:
- Enforce length/required-ness bounds before any store interaction.
- Translate pydantic errors into the domain `ValidationError(field, message)`.

Generated card content goes through the same models as manually entered cards.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import Annotated, Any, TypeVar

from pydantic import BaseModel, ConfigDict, Field
from pydantic import ValidationError as PydanticValidationError

from studydeck.db.models import CARD_SIDE_MAX, DESCRIPTION_MAX, TITLE_MAX
from studydeck.errors import ValidationError

Title = Annotated[str, Field(min_length=1, max_length=TITLE_MAX)]
Description = Annotated[str, Field(max_length=DESCRIPTION_MAX)]
CardSide = Annotated[str, Field(min_length=1, max_length=CARD_SIDE_MAX)]

_LABELS = {
    "title": "Title",
    "description": "Description",
    "front": "Front",
    "back": "Back",
}


class _Strict(BaseModel):
    model_config = ConfigDict(extra="forbid", strict=True)


class DeckDraft(_Strict):
    title: Title
    description: Description | None = None


class DeckPatch(_Strict):
    title: Title | None = None
    description: Description | None = None


class CardDraft(_Strict):
    front: CardSide
    back: CardSide


class CardPatch(_Strict):
    front: CardSide | None = None
    back: CardSide | None = None


M = TypeVar("M", bound=BaseModel)


def validate(model: type[M], data: Mapping[str, Any], *, prefix: str = "") -> M:
    try:
        return model.model_validate(dict(data))
    except PydanticValidationError as e:
        raise _to_domain(e, prefix=prefix) from e


def validate_patch(model: type[M], data: Mapping[str, Any]) -> dict[str, Any]:
    """
    Validate a partial update and return only the fields that were supplied.
    """

    patch = validate(model, data)
    values = patch.model_dump(exclude_unset=True)
    if not values:
        raise ValidationError(field="patch", message="Nothing to update")
    for name, value in values.items():
        # Explicit nulls are only meaningful for the optional description.
        if value is None and name != "description":
            raise ValidationError(field=name, message=f"{_LABELS.get(name, name)} is required")
    return values


def validate_card_batch(records: Sequence[Mapping[str, Any]]) -> list[CardDraft]:
    if not records:
        raise ValidationError(field="records", message="At least one card is required")
    return [validate(CardDraft, r, prefix=f"records[{i}].") for i, r in enumerate(records)]


def _to_domain(e: PydanticValidationError, *, prefix: str) -> ValidationError:
    err = e.errors()[0]
    name = ".".join(str(p) for p in err.get("loc", ())) or "input"
    label = _LABELS.get(name, name)
    kind = err.get("type", "")
    ctx = err.get("ctx") or {}

    if kind in ("missing", "string_too_short"):
        message = f"{label} is required"
    elif kind == "string_too_long":
        message = f"{label} must be at most {ctx.get('max_length')} characters"
    elif kind == "extra_forbidden":
        message = f"Unknown field: {name}"
    else:
        message = f"{label}: {err.get('msg', 'invalid value')}"
    return ValidationError(field=f"{prefix}{name}", message=message)


# --- Module Notes -----------------------------------------------------------
# Bounds come from the column sizes in `studydeck.db.models` so schema and validation
# cannot drift apart.
