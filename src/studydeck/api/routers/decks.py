"""
studydeck.api.routers.decks

Deck endpoints for the authenticated principal.

Responsibilities:
- Deck CRUD (creation goes through the quota guard).
- Card listing/creation under a deck.
- AI generation for a deck.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, Response
from starlette.status import HTTP_201_CREATED, HTTP_204_NO_CONTENT

from studydeck.api.deps import generation_service, ownership_store, quota_guard
from studydeck.api.routers.schemas import (
    CardCreateRequest,
    CardResponse,
    DeckCreateRequest,
    DeckListItem,
    DeckPatchRequest,
    DeckResponse,
    GenerateResponse,
)
from studydeck.auth.deps import get_principal
from studydeck.auth.models import Principal
from studydeck.services.generation_service import CardGenerationService
from studydeck.services.ownership_store import OwnershipStore
from studydeck.services.quota_guard import QuotaGuard

router = APIRouter(prefix="/v1/decks", tags=["decks"])


@router.get("", response_model=list[DeckListItem])
async def list_decks(
    principal: Principal = Depends(get_principal),
    store: OwnershipStore = Depends(ownership_store),
) -> list[DeckListItem]:
    summaries = await store.list_decks(principal)
    return [
        DeckListItem(
            **DeckResponse.model_validate(s.deck).model_dump(), card_count=s.card_count
        )
        for s in summaries
    ]


@router.post("", response_model=DeckResponse, status_code=HTTP_201_CREATED)
async def create_deck(
    body: DeckCreateRequest,
    principal: Principal = Depends(get_principal),
    guard: QuotaGuard = Depends(quota_guard),
) -> DeckResponse:
    deck = await guard.guarded_create_deck(principal, body.title, body.description)
    return DeckResponse.model_validate(deck)


@router.get("/{deck_id}", response_model=DeckResponse)
async def get_deck(
    deck_id: int,
    principal: Principal = Depends(get_principal),
    store: OwnershipStore = Depends(ownership_store),
) -> DeckResponse:
    return DeckResponse.model_validate(await store.get_deck(deck_id, principal))


@router.patch("/{deck_id}", response_model=DeckResponse)
async def update_deck(
    deck_id: int,
    body: DeckPatchRequest,
    principal: Principal = Depends(get_principal),
    store: OwnershipStore = Depends(ownership_store),
) -> DeckResponse:
    deck = await store.update_deck(deck_id, principal, body.model_dump(exclude_unset=True))
    return DeckResponse.model_validate(deck)


@router.delete("/{deck_id}", status_code=HTTP_204_NO_CONTENT)
async def delete_deck(
    deck_id: int,
    principal: Principal = Depends(get_principal),
    store: OwnershipStore = Depends(ownership_store),
) -> Response:
    await store.delete_deck(deck_id, principal)
    return Response(status_code=HTTP_204_NO_CONTENT)


@router.get("/{deck_id}/cards", response_model=list[CardResponse])
async def list_cards(
    deck_id: int,
    principal: Principal = Depends(get_principal),
    store: OwnershipStore = Depends(ownership_store),
) -> list[CardResponse]:
    cards = await store.list_cards_by_deck(deck_id, principal)
    return [CardResponse.model_validate(c) for c in cards]


@router.post("/{deck_id}/cards", response_model=CardResponse, status_code=HTTP_201_CREATED)
async def create_card(
    deck_id: int,
    body: CardCreateRequest,
    principal: Principal = Depends(get_principal),
    store: OwnershipStore = Depends(ownership_store),
) -> CardResponse:
    card = await store.create_card(deck_id, principal, body.front, body.back)
    return CardResponse.model_validate(card)


@router.post("/{deck_id}/generate", response_model=GenerateResponse)
async def generate_cards(
    deck_id: int,
    principal: Principal = Depends(get_principal),
    svc: CardGenerationService = Depends(generation_service),
) -> GenerateResponse:
    cards = await svc.generate_for_deck(deck_id, principal)
    return GenerateResponse(
        count=len(cards), cards=[CardResponse.model_validate(c) for c in cards]
    )


# --- Module Notes -----------------------------------------------------------
# Ownership errors from the store render as one 404 (see `studydeck.api.errors`).
