"""
tests.test_bulk_ingest

All-or-nothing ingestion of generated card batches.
"""

from __future__ import annotations

import pytest
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from studydeck.auth.models import Principal
from studydeck.db.models import Card
from studydeck.db.repositories.cards import CardRepo
from studydeck.errors import NotFound, Unauthorized, ValidationError
from studydeck.services.bulk_ingest import BulkIngestTransaction
from studydeck.services.ownership_store import OwnershipStore
from tests.fakes import card_records


async def _card_count(session: AsyncSession) -> int:
    return int((await session.execute(select(func.count()).select_from(Card))).scalar_one())


@pytest.mark.asyncio
async def test_valid_batch_commits_every_card(session: AsyncSession, alice: Principal) -> None:
    store = OwnershipStore(session=session)
    deck = await store.create_deck(alice, "Biology", "Cell structure")
    deck_id = deck.id

    cards = await BulkIngestTransaction(store=store).ingest(deck_id, alice, card_records(20))

    assert len(cards) == 20
    assert {c.deck_id for c in cards} == {deck_id}
    assert len({c.created_at for c in cards}) == 1
    assert all(c.created_at == c.updated_at for c in cards)
    assert await store.count_cards(deck_id, alice) == 20


@pytest.mark.asyncio
async def test_one_invalid_record_rejects_the_whole_batch(
    session: AsyncSession, alice: Principal
) -> None:
    store = OwnershipStore(session=session)
    deck = await store.create_deck(alice, "Biology")
    records = card_records(20)
    records[14]["front"] = "x" * 501

    with pytest.raises(ValidationError) as exc:
        await BulkIngestTransaction(store=store).ingest(deck.id, alice, records)

    assert exc.value.field == "records[14].front"
    assert await _card_count(session) == 0


@pytest.mark.asyncio
@pytest.mark.parametrize(
    ("record", "field"),
    [
        ({"front": "q"}, "records[0].back"),
        ({"front": "", "back": "a"}, "records[0].front"),
        ({"front": "q", "back": 7}, "records[0].back"),
    ],
)
async def test_malformed_records_name_the_offending_field(
    session: AsyncSession, alice: Principal, record: dict, field: str
) -> None:
    store = OwnershipStore(session=session)
    deck = await store.create_deck(alice, "Deck")

    with pytest.raises(ValidationError) as exc:
        await BulkIngestTransaction(store=store).ingest(deck.id, alice, [record])

    assert exc.value.field == field


@pytest.mark.asyncio
async def test_empty_batch_is_rejected(session: AsyncSession, alice: Principal) -> None:
    store = OwnershipStore(session=session)
    deck = await store.create_deck(alice, "Deck")

    with pytest.raises(ValidationError) as exc:
        await BulkIngestTransaction(store=store).ingest(deck.id, alice, [])

    assert exc.value.field == "records"


@pytest.mark.asyncio
async def test_ingest_into_someone_elses_deck_writes_nothing(
    session: AsyncSession, alice: Principal, bob: Principal
) -> None:
    store = OwnershipStore(session=session)
    deck = await store.create_deck(alice, "Deck")

    with pytest.raises(Unauthorized):
        await BulkIngestTransaction(store=store).ingest(deck.id, bob, card_records(3))

    assert await _card_count(session) == 0


@pytest.mark.asyncio
async def test_ingest_into_missing_deck(session: AsyncSession, alice: Principal) -> None:
    store = OwnershipStore(session=session)

    with pytest.raises(NotFound):
        await BulkIngestTransaction(store=store).ingest(404, alice, card_records(3))


@pytest.mark.asyncio
async def test_failure_after_flush_rolls_back_every_row(
    session_factory: async_sessionmaker[AsyncSession],
    alice: Principal,
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    async with session_factory() as s:
        deck_id = (await OwnershipStore(session=s).create_deck(alice, "Deck")).id

    real = CardRepo.add_many

    async def add_many_then_fail(self: CardRepo, **kwargs):
        await real(self, **kwargs)
        raise RuntimeError("connection lost mid-batch")

    monkeypatch.setattr(CardRepo, "add_many", add_many_then_fail)

    async with session_factory() as s:
        with pytest.raises(RuntimeError):
            await BulkIngestTransaction(store=OwnershipStore(session=s)).ingest(
                deck_id, alice, card_records(20)
            )

    async with session_factory() as s:
        assert await _card_count(s) == 0


@pytest.mark.asyncio
async def test_abandoned_session_discards_uncommitted_cards(
    session_factory: async_sessionmaker[AsyncSession], alice: Principal
) -> None:
    async with session_factory() as s:
        deck_id = (await OwnershipStore(session=s).create_deck(alice, "Deck")).id

    async with session_factory() as s:
        await CardRepo(s).add_many(deck_id=deck_id, sides=[("q", "a")] * 5)
        # Closed without commit, as when the request task is cancelled.

    async with session_factory() as s:
        assert await _card_count(s) == 0
