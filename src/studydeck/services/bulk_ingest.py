"""
studydeck.services.bulk_ingest

All-or-nothing insertion of externally generated cards.

Responsibilities:
- Treat incoming records as untrusted: validate every record before any write.
- Commit every card under one verified-owned deck, or none at all.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import Any

from studydeck.auth.models import Principal
from studydeck.db.models import Card
from studydeck.errors import Unauthenticated
from studydeck.observability.logging import get_logger
from studydeck.services.ownership_store import OwnershipStore
from studydeck.services.validation import validate_card_batch

log = get_logger(__name__)


class BulkIngestTransaction:
    def __init__(self, *, store: OwnershipStore) -> None:
        self._store = store

    async def ingest(
        self,
        deck_id: int,
        principal: Principal,
        records: Sequence[Mapping[str, Any]],
    ) -> list[Card]:
        if not principal.is_authenticated:
            raise Unauthenticated("principal required")

        # A single bad record rejects the batch before the store is touched.
        drafts = validate_card_batch(records)
        cards = await self._store.create_cards(deck_id, principal, drafts)
        log.info(
            "bulk_ingest_committed", subject=principal.subject, deck_id=deck_id, count=len(cards)
        )
        return cards
