"""
studydeck.services.generation_service

AI flashcard generation for an owned deck.

Responsibilities:
- Gate the flow behind the `bulk-generation` capability.
- Use the deck's title and description as the generator's topic and context.
- Hand generated records to `BulkIngestTransaction`; a failed generation writes nothing.
"""

from __future__ import annotations

from studydeck.auth.models import Principal
from studydeck.db.models import Card
from studydeck.entitlements.models import Capability
from studydeck.entitlements.resolver import EntitlementResolver
from studydeck.errors import FeatureNotEntitled, GenerationFailure, Unauthenticated, ValidationError
from studydeck.generation.client import ContentGenerator
from studydeck.observability.logging import get_logger
from studydeck.services.bulk_ingest import BulkIngestTransaction
from studydeck.services.ownership_store import OwnershipStore

log = get_logger(__name__)


class CardGenerationService:
    def __init__(
        self,
        *,
        resolver: EntitlementResolver,
        store: OwnershipStore,
        generator: ContentGenerator,
        card_count: int = 20,
    ) -> None:
        self._resolver = resolver
        self._store = store
        self._ingest = BulkIngestTransaction(store=store)
        self._generator = generator
        self._card_count = card_count

    async def generate_for_deck(self, deck_id: int, principal: Principal) -> list[Card]:
        if not principal.is_authenticated:
            raise Unauthenticated("principal required")

        decision = await self._resolver.resolve(principal, Capability.bulk_generation)
        if not decision.granted:
            raise FeatureNotEntitled(capability=Capability.bulk_generation.value)

        deck = await self._store.get_deck(deck_id, principal)
        if not (deck.description or "").strip():
            raise ValidationError(
                field="description",
                message="Please add a description to your deck first. "
                "The AI uses it to generate relevant flashcards.",
            )

        try:
            records = await self._generator.generate(
                topic=deck.title, context=deck.description or "", count=self._card_count
            )
        except GenerationFailure as e:
            log.warning(
                "generation_failed", subject=principal.subject, deck_id=deck_id, error=str(e)
            )
            raise

        try:
            return await self._ingest.ingest(deck_id, principal, records)
        except ValidationError as e:
            # Out-of-bounds generated text is unusable output, not a user input error.
            log.warning(
                "generation_rejected", subject=principal.subject, deck_id=deck_id, field=e.field
            )
            raise GenerationFailure(f"generated card rejected: {e}") from e


# --- Module Notes -----------------------------------------------------------
# Generated text is validated with the same bounds as user-entered cards.
