"""
studydeck.services.ownership_store

Ownership-checked CRUD for decks and cards.

Responsibilities:
- Take the resource id and the requesting principal together on every call, so
  no caller can skip the ownership predicate.
- Validate field bounds before touching the store.
- Own the transaction boundary: each mutation is fully committed or rolled back.
- Log "missing" and "owned by someone else" distinctly while raising errors that
  render identically to the caller.
"""

from __future__ import annotations

from collections.abc import AsyncIterator, Mapping, Sequence
from contextlib import asynccontextmanager
from dataclasses import dataclass
from typing import Any

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from studydeck.auth.models import Principal
from studydeck.db.models import Card, Deck
from studydeck.db.repositories.cards import CardRepo
from studydeck.db.repositories.decks import DeckRepo
from studydeck.errors import NotFound, Unauthenticated, Unauthorized
from studydeck.observability.logging import get_logger
from studydeck.services.validation import (
    CardDraft,
    CardPatch,
    DeckDraft,
    DeckPatch,
    validate,
    validate_patch,
)

log = get_logger(__name__)


@dataclass(frozen=True, slots=True)
class DeckSummary:
    deck: Deck
    card_count: int


class OwnershipStore:
    def __init__(self, *, session: AsyncSession) -> None:
        self._session = session
        self._decks = DeckRepo(session)
        self._cards = CardRepo(session)

    # -- decks ---------------------------------------------------------------

    async def get_deck(self, deck_id: int, principal: Principal) -> Deck:
        owner = _owner(principal)
        deck = await self._decks.get_owned(deck_id=deck_id, owner_id=owner)
        if deck is None:
            raise await self._deck_denied(deck_id, owner)
        return deck

    async def list_decks(self, principal: Principal) -> list[DeckSummary]:
        rows = await self._decks.list_owned_with_counts(_owner(principal))
        return [DeckSummary(deck=deck, card_count=count) for deck, count in rows]

    async def count_decks(self, principal: Principal) -> int:
        return await self._decks.count_owned(_owner(principal))

    async def create_deck(
        self, principal: Principal, title: str, description: str | None = None
    ) -> Deck:
        owner = _owner(principal)
        draft = validate(DeckDraft, {"title": title, "description": description})
        async with self._transaction():
            deck = await self._decks.create(
                owner_id=owner, title=draft.title, description=draft.description
            )
        log.info("deck_created", subject=owner, deck_id=deck.id)
        return deck

    async def create_deck_within_limit(
        self,
        principal: Principal,
        title: str,
        description: str | None = None,
        *,
        limit: int,
    ) -> Deck | None:
        """
        Create a deck only if the owner holds fewer than `limit` decks at insert time.

        Returns None when the ceiling is reached. Slot conflicts from a concurrent
        creation are retried against fresh state.
        """

        owner = _owner(principal)
        draft = validate(DeckDraft, {"title": title, "description": description})

        for _ in range(limit):
            used = await self._decks.used_quota_slots(owner)
            free = [s for s in range(1, limit + 1) if s not in used]
            if not free:
                await self._session.rollback()
                return None
            try:
                deck = await self._decks.create_within_quota(
                    owner_id=owner,
                    title=draft.title,
                    description=draft.description,
                    slot=free[0],
                    limit=limit,
                )
            except IntegrityError:
                await self._session.rollback()
                log.info("deck_quota_slot_conflict", subject=owner, slot=free[0])
                continue
            if deck is None:
                await self._session.rollback()
                return None
            await self._session.commit()
            log.info("deck_created", subject=owner, deck_id=deck.id, quota_slot=free[0])
            return deck
        return None

    async def update_deck(
        self, deck_id: int, principal: Principal, patch: Mapping[str, Any]
    ) -> Deck:
        owner = _owner(principal)
        values = validate_patch(DeckPatch, patch)
        async with self._transaction():
            deck = await self._decks.update_owned(deck_id=deck_id, owner_id=owner, values=values)
            if deck is None:
                raise await self._deck_denied(deck_id, owner)
        log.info("deck_updated", subject=owner, deck_id=deck_id, fields=sorted(values))
        return deck

    async def delete_deck(self, deck_id: int, principal: Principal) -> None:
        owner = _owner(principal)
        async with self._transaction():
            if not await self._decks.delete_owned(deck_id=deck_id, owner_id=owner):
                raise await self._deck_denied(deck_id, owner)
        log.info("deck_deleted", subject=owner, deck_id=deck_id)

    # -- cards ---------------------------------------------------------------

    async def get_card(self, card_id: int, principal: Principal) -> Card:
        owner = _owner(principal)
        card = await self._cards.get_owned(card_id=card_id, owner_id=owner)
        if card is None:
            raise await self._card_denied(card_id, owner)
        return card

    async def list_cards_by_deck(self, deck_id: int, principal: Principal) -> list[Card]:
        await self.get_deck(deck_id, principal)
        return await self._cards.list_for_deck(deck_id)

    async def count_cards(self, deck_id: int, principal: Principal) -> int:
        await self.get_deck(deck_id, principal)
        return await self._cards.count_for_deck(deck_id)

    async def create_card(self, deck_id: int, principal: Principal, front: str, back: str) -> Card:
        draft = validate(CardDraft, {"front": front, "back": back})
        (card,) = await self.create_cards(deck_id, principal, [draft])
        return card

    async def create_cards(
        self, deck_id: int, principal: Principal, drafts: Sequence[CardDraft]
    ) -> list[Card]:
        """
        Insert pre-validated cards under one owned deck in a single transaction.

        The deck is checked (and locked where the backend supports it) once; every
        row reuses that verified id.
        """

        owner = _owner(principal)
        async with self._transaction():
            deck = await self._decks.get_owned(deck_id=deck_id, owner_id=owner, for_update=True)
            if deck is None:
                raise await self._deck_denied(deck_id, owner)
            cards = await self._cards.add_many(
                deck_id=deck.id, sides=[(d.front, d.back) for d in drafts]
            )
        log.info("cards_created", subject=owner, deck_id=deck_id, count=len(cards))
        return cards

    async def update_card(
        self, card_id: int, principal: Principal, patch: Mapping[str, Any]
    ) -> Card:
        owner = _owner(principal)
        values = validate_patch(CardPatch, patch)
        async with self._transaction():
            card = await self._cards.update_owned(card_id=card_id, owner_id=owner, values=values)
            if card is None:
                raise await self._card_denied(card_id, owner)
        log.info("card_updated", subject=owner, card_id=card_id, fields=sorted(values))
        return card

    async def delete_card(self, card_id: int, principal: Principal) -> None:
        owner = _owner(principal)
        async with self._transaction():
            deck_id = await self._cards.delete_owned(card_id=card_id, owner_id=owner)
            if deck_id is None:
                raise await self._card_denied(card_id, owner)
        log.info("card_deleted", subject=owner, card_id=card_id, deck_id=deck_id)

    # -- helpers -------------------------------------------------------------

    @asynccontextmanager
    async def _transaction(self) -> AsyncIterator[None]:
        try:
            yield
        except Exception:
            await self._session.rollback()
            raise
        await self._session.commit()

    async def _deck_denied(self, deck_id: int, owner: str) -> NotFound | Unauthorized:
        actual = await self._decks.owner_of(deck_id)
        if actual is None:
            log.info("deck_not_found", subject=owner, deck_id=deck_id)
            return NotFound(resource="deck", resource_id=deck_id)
        log.warning("deck_owner_mismatch", subject=owner, deck_id=deck_id)
        return Unauthorized(resource="deck", resource_id=deck_id)

    async def _card_denied(self, card_id: int, owner: str) -> NotFound | Unauthorized:
        actual = await self._cards.owner_of(card_id)
        if actual is None:
            log.info("card_not_found", subject=owner, card_id=card_id)
            return NotFound(resource="card", resource_id=card_id)
        log.warning("card_owner_mismatch", subject=owner, card_id=card_id)
        return Unauthorized(resource="card", resource_id=card_id)


def _owner(principal: Principal | None) -> str:
    if principal is None or not principal.is_authenticated:
        raise Unauthenticated("principal required")
    return principal.subject


# --- Module Notes -----------------------------------------------------------
# The owner probe in `_deck_denied` / `_card_denied` runs only after the scoped
# statement matched nothing; it feeds logs and error types, never a write decision.
