"""
tests.test_migrations

Alembic migrations produce the schema the ORM models declare.
"""

from __future__ import annotations

from pathlib import Path

import pytest
import sqlalchemy as sa
from alembic import command
from alembic.autogenerate import compare_metadata
from alembic.config import Config
from alembic.migration import MigrationContext
from sqlalchemy.exc import IntegrityError

from studydeck.db import models  # noqa: F401  # register models on Base.metadata
from studydeck.db.base import Base

ROOT = Path(__file__).resolve().parents[1]


@pytest.fixture
def alembic_cfg(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> tuple[Config, str]:
    db = tmp_path / "migrated.db"
    monkeypatch.setenv("STUDYDECK_DATABASE_URL", f"sqlite+aiosqlite:///{db}")
    return Config(str(ROOT / "alembic.ini")), f"sqlite:///{db}"


def test_upgrade_head_matches_models(alembic_cfg: tuple[Config, str]) -> None:
    cfg, sync_url = alembic_cfg

    command.upgrade(cfg, "head")

    engine = sa.create_engine(sync_url)
    try:
        with engine.connect() as conn:
            diff = compare_metadata(MigrationContext.configure(conn), Base.metadata)
            uniques = sa.inspect(conn).get_unique_constraints("decks")
            fks = sa.inspect(conn).get_foreign_keys("cards")
    finally:
        engine.dispose()

    assert diff == []
    assert {"name": "uq_decks_owner_quota_slot", "column_names": ["owner_id", "quota_slot"]} in [
        {"name": u["name"], "column_names": u["column_names"]} for u in uniques
    ]
    assert [(fk["referred_table"], fk["options"].get("ondelete")) for fk in fks] == [
        ("decks", "CASCADE")
    ]


def test_quota_slot_constraint_is_enforced_on_migrated_schema(
    alembic_cfg: tuple[Config, str],
) -> None:
    cfg, sync_url = alembic_cfg
    command.upgrade(cfg, "head")

    engine = sa.create_engine(sync_url)
    row = {
        "owner_id": "user_alice",
        "title": "Deck",
        "quota_slot": 1,
        "created_at": "2026-01-01 00:00:00",
        "updated_at": "2026-01-01 00:00:00",
    }
    insert = sa.text(
        "INSERT INTO decks (owner_id, title, quota_slot, created_at, updated_at) "
        "VALUES (:owner_id, :title, :quota_slot, :created_at, :updated_at)"
    )
    try:
        with engine.begin() as conn:
            conn.execute(insert, row)
        with pytest.raises(IntegrityError):
            with engine.begin() as conn:
                conn.execute(insert, row)
    finally:
        engine.dispose()


def test_downgrade_removes_tables(alembic_cfg: tuple[Config, str]) -> None:
    cfg, sync_url = alembic_cfg
    command.upgrade(cfg, "head")

    command.downgrade(cfg, "base")

    engine = sa.create_engine(sync_url)
    try:
        with engine.connect() as conn:
            tables = set(sa.inspect(conn).get_table_names())
    finally:
        engine.dispose()
    assert "decks" not in tables
    assert "cards" not in tables
