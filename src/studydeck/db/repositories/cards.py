"""
studydeck.db.repositories.cards

Repository for `Card` entities.

Responsibilities:
- Card reads and writes scoped to the owner of the parent deck.
- Multi-row insert of cards under one already-verified deck.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any

from sqlalchemy import delete, desc, func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from studydeck.db.models import Card, Deck, utcnow


def _owned_deck_ids(owner_id: str):
    return select(Deck.id).where(Deck.owner_id == owner_id)


class CardRepo:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def get_owned(self, *, card_id: int, owner_id: str) -> Card | None:
        stmt = (
            select(Card)
            .join(Deck, Deck.id == Card.deck_id)
            .where(Card.id == card_id, Deck.owner_id == owner_id)
        )
        return (await self._session.execute(stmt)).scalar_one_or_none()

    async def owner_of(self, card_id: int) -> str | None:
        stmt = select(Deck.owner_id).join(Card, Card.deck_id == Deck.id).where(Card.id == card_id)
        return (await self._session.execute(stmt)).scalar_one_or_none()

    async def list_for_deck(self, deck_id: int) -> list[Card]:
        # Caller has already verified the deck is owned by the requester.
        stmt = (
            select(Card)
            .where(Card.deck_id == deck_id)
            .order_by(desc(Card.created_at), desc(Card.id))
        )
        return list((await self._session.execute(stmt)).scalars().all())

    async def count_for_deck(self, deck_id: int) -> int:
        stmt = select(func.count()).select_from(Card).where(Card.deck_id == deck_id)
        return int((await self._session.execute(stmt)).scalar_one())

    async def add_many(self, *, deck_id: int, sides: Sequence[tuple[str, str]]) -> list[Card]:
        now = utcnow()
        cards = [
            Card(deck_id=deck_id, front=front, back=back, created_at=now, updated_at=now)
            for front, back in sides
        ]
        self._session.add_all(cards)
        await self._session.flush()
        return cards

    async def update_owned(
        self, *, card_id: int, owner_id: str, values: dict[str, Any]
    ) -> Card | None:
        stmt = (
            update(Card)
            .where(Card.id == card_id, Card.deck_id.in_(_owned_deck_ids(owner_id)))
            .values(**values, updated_at=utcnow())
            .returning(Card)
        )
        return (await self._session.execute(stmt)).scalar_one_or_none()

    async def delete_owned(self, *, card_id: int, owner_id: str) -> int | None:
        # Returns the parent deck id of the deleted card, or None when nothing matched.
        stmt = (
            delete(Card)
            .where(Card.id == card_id, Card.deck_id.in_(_owned_deck_ids(owner_id)))
            .returning(Card.deck_id)
        )
        return (await self._session.execute(stmt)).scalar_one_or_none()


# --- Module Notes -----------------------------------------------------------
# Ownership is transitive (card -> deck -> owner_id); the deck subquery sits inside the
# same UPDATE/DELETE statement so there is no window between check and write.
