"""
studydeck.db.models

Persistence schema for decks and cards.

Responsibilities:
- Define `Deck` (owned by exactly one principal) and `Card` (owned through its deck).
- Declare the constraints the store relies on for atomic quota enforcement.
"""

from __future__ import annotations

from datetime import UTC, datetime

from sqlalchemy import ForeignKey, Index, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from studydeck.db.base import Base

TITLE_MAX = 100
DESCRIPTION_MAX = 500
CARD_SIDE_MAX = 500


def utcnow() -> datetime:
    # Naive UTC timestamps, consistent across SQLite and Postgres.
    return datetime.now(UTC).replace(tzinfo=None)


class Deck(Base):
    __tablename__ = "decks"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    owner_id: Mapped[str] = mapped_column(String(256), nullable=False, index=True)

    title: Mapped[str] = mapped_column(String(TITLE_MAX), nullable=False)
    description: Mapped[str | None] = mapped_column(String(DESCRIPTION_MAX), nullable=True)

    # Free-tier decks occupy one of slots 1..limit; pro-created decks leave it NULL.
    quota_slot: Mapped[int | None] = mapped_column(nullable=True)

    created_at: Mapped[datetime] = mapped_column(nullable=False, default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(nullable=False, default=utcnow)

    cards: Mapped[list[Card]] = relationship(
        back_populates="deck", cascade="all, delete-orphan", passive_deletes=True
    )

    __table_args__ = (
        UniqueConstraint("owner_id", "quota_slot", name="uq_decks_owner_quota_slot"),
        Index("ix_decks_owner_updated", "owner_id", "updated_at"),
    )


class Card(Base):
    __tablename__ = "cards"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    deck_id: Mapped[int] = mapped_column(
        ForeignKey("decks.id", ondelete="CASCADE"), nullable=False, index=True
    )

    front: Mapped[str] = mapped_column(String(CARD_SIDE_MAX), nullable=False)
    back: Mapped[str] = mapped_column(String(CARD_SIDE_MAX), nullable=False)

    created_at: Mapped[datetime] = mapped_column(nullable=False, default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(nullable=False, default=utcnow)

    deck: Mapped[Deck] = relationship(back_populates="cards")

    __table_args__ = (Index("ix_cards_deck_created", "deck_id", "created_at"),)


# --- Module Notes -----------------------------------------------------------
# Card rows carry no owner column; every card query joins through `decks.owner_id`.
