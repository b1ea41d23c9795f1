"""create decks and cards

Revision ID: 0001
Revises:
Create Date: 2026-10-18
"""

from __future__ import annotations

import sqlalchemy as sa
from alembic import op

revision = "0001"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "decks",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("owner_id", sa.String(length=256), nullable=False),
        sa.Column("title", sa.String(length=100), nullable=False),
        sa.Column("description", sa.String(length=500), nullable=True),
        sa.Column("quota_slot", sa.Integer(), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
        sa.UniqueConstraint("owner_id", "quota_slot", name="uq_decks_owner_quota_slot"),
    )
    op.create_index("ix_decks_owner_id", "decks", ["owner_id"])
    op.create_index("ix_decks_owner_updated", "decks", ["owner_id", "updated_at"])

    op.create_table(
        "cards",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column(
            "deck_id",
            sa.Integer(),
            sa.ForeignKey("decks.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("front", sa.String(length=500), nullable=False),
        sa.Column("back", sa.String(length=500), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
    )
    op.create_index("ix_cards_deck_id", "cards", ["deck_id"])
    op.create_index("ix_cards_deck_created", "cards", ["deck_id", "created_at"])


def downgrade() -> None:
    op.drop_index("ix_cards_deck_created", table_name="cards")
    op.drop_index("ix_cards_deck_id", table_name="cards")
    op.drop_table("cards")
    op.drop_index("ix_decks_owner_updated", table_name="decks")
    op.drop_index("ix_decks_owner_id", table_name="decks")
    op.drop_table("decks")
