"""
studydeck.db.repositories.decks

Repository for `Deck` entities.

Responsibilities:
- Owner-scoped reads (single deck, listing with card counts).
- Conditional writes keyed on `id AND owner_id` in a single statement.
- Quota-bounded insert evaluated by the database at insert time.
"""

from __future__ import annotations

from typing import Any

from sqlalchemy import DateTime, Integer, String, delete, desc, func, insert, literal, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from studydeck.db.models import Card, Deck, utcnow


class DeckRepo:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def get_owned(
        self, *, deck_id: int, owner_id: str, for_update: bool = False
    ) -> Deck | None:
        stmt = select(Deck).where(Deck.id == deck_id, Deck.owner_id == owner_id)
        if for_update:
            # Holds the parent row while children are inserted against it.
            stmt = stmt.with_for_update()
        return (await self._session.execute(stmt)).scalar_one_or_none()

    async def owner_of(self, deck_id: int) -> str | None:
        # Diagnostics only: tells "missing" from "someone else's" after a scoped miss.
        stmt = select(Deck.owner_id).where(Deck.id == deck_id)
        return (await self._session.execute(stmt)).scalar_one_or_none()

    async def list_owned_with_counts(self, owner_id: str) -> list[tuple[Deck, int]]:
        stmt = (
            select(Deck, func.count(Card.id))
            .outerjoin(Card, Card.deck_id == Deck.id)
            .where(Deck.owner_id == owner_id)
            .group_by(Deck.id)
            .order_by(desc(Deck.updated_at), desc(Deck.id))
        )
        rows = (await self._session.execute(stmt)).all()
        return [(deck, int(count)) for deck, count in rows]

    async def count_owned(self, owner_id: str) -> int:
        stmt = select(func.count()).select_from(Deck).where(Deck.owner_id == owner_id)
        return int((await self._session.execute(stmt)).scalar_one())

    async def used_quota_slots(self, owner_id: str) -> set[int]:
        stmt = select(Deck.quota_slot).where(
            Deck.owner_id == owner_id, Deck.quota_slot.is_not(None)
        )
        return {int(s) for s in (await self._session.execute(stmt)).scalars().all()}

    async def create(self, *, owner_id: str, title: str, description: str | None) -> Deck:
        now = utcnow()
        deck = Deck(
            owner_id=owner_id,
            title=title,
            description=description,
            quota_slot=None,
            created_at=now,
            updated_at=now,
        )
        self._session.add(deck)
        await self._session.flush()
        return deck

    async def create_within_quota(
        self,
        *,
        owner_id: str,
        title: str,
        description: str | None,
        slot: int,
        limit: int,
    ) -> Deck | None:
        """
        INSERT ... SELECT ... WHERE (owned count) < limit, claiming `slot`.

        Returns None when the count condition fails. A concurrent insert that claimed
        the same slot first surfaces as `IntegrityError` from the unique constraint.
        """

        now = utcnow()
        owned = (
            select(func.count())
            .select_from(Deck)
            .where(Deck.owner_id == owner_id)
            .correlate(None)
            .scalar_subquery()
        )
        row = select(
            literal(owner_id, String()),
            literal(title, String()),
            literal(description, String()),
            literal(slot, Integer()),
            literal(now, DateTime()),
            literal(now, DateTime()),
        ).where(owned < limit)
        stmt = (
            insert(Deck)
            .from_select(
                ["owner_id", "title", "description", "quota_slot", "created_at", "updated_at"],
                row,
            )
            .returning(Deck.id)
        )
        new_id = (await self._session.execute(stmt)).scalar_one_or_none()
        if new_id is None:
            return None
        return await self._session.get(Deck, new_id)

    async def update_owned(
        self, *, deck_id: int, owner_id: str, values: dict[str, Any]
    ) -> Deck | None:
        stmt = (
            update(Deck)
            .where(Deck.id == deck_id, Deck.owner_id == owner_id)
            .values(**values, updated_at=utcnow())
            .returning(Deck)
        )
        return (await self._session.execute(stmt)).scalar_one_or_none()

    async def delete_owned(self, *, deck_id: int, owner_id: str) -> bool:
        owned = select(Deck.id).where(Deck.id == deck_id, Deck.owner_id == owner_id)
        # Children first, under the same owner predicate, so no engine-level cascade is assumed.
        await self._session.execute(delete(Card).where(Card.deck_id.in_(owned)))
        stmt = (
            delete(Deck)
            .where(Deck.id == deck_id, Deck.owner_id == owner_id)
            .returning(Deck.id)
        )
        return (await self._session.execute(stmt)).scalar_one_or_none() is not None


# --- Module Notes -----------------------------------------------------------
# `create_within_quota` and the unique (owner_id, quota_slot) constraint together make
# the free-tier ceiling a property of the write itself, not of an earlier read.
