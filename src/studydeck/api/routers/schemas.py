"""
studydeck.api.routers.schemas

Request/response models shared by the deck and card routers.

Request bodies carry plain strings; bounds are enforced by the service layer so
API and direct callers get the same validation errors.
"""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict


class DeckCreateRequest(BaseModel):
    title: str
    description: str | None = None


class DeckPatchRequest(BaseModel):
    title: str | None = None
    description: str | None = None


class CardCreateRequest(BaseModel):
    front: str
    back: str


class CardPatchRequest(BaseModel):
    front: str | None = None
    back: str | None = None


class DeckResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    title: str
    description: str | None
    created_at: datetime
    updated_at: datetime


class DeckListItem(DeckResponse):
    card_count: int


class CardResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    deck_id: int
    front: str
    back: str
    created_at: datetime
    updated_at: datetime


class GenerateResponse(BaseModel):
    count: int
    cards: list[CardResponse]
