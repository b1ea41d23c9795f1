"""
studydeck.services.quota_guard

Deck-count ceiling per entitlement tier.

Responsibilities:
- Decide whether the principal is bounded (free) or unbounded (pro).
- Delegate creation to the store, with the ceiling evaluated at insert time.
"""

from __future__ import annotations

from studydeck.auth.models import Principal
from studydeck.db.models import Deck
from studydeck.entitlements.models import Capability, Plan
from studydeck.entitlements.resolver import EntitlementResolver
from studydeck.errors import QuotaExceeded, Unauthenticated
from studydeck.observability.logging import get_logger
from studydeck.services.ownership_store import OwnershipStore

log = get_logger(__name__)


class QuotaGuard:
    def __init__(
        self,
        *,
        resolver: EntitlementResolver,
        store: OwnershipStore,
        free_limit: int = 3,
    ) -> None:
        self._resolver = resolver
        self._store = store
        self._free_limit = free_limit

    async def guarded_create_deck(
        self, principal: Principal, title: str, description: str | None = None
    ) -> Deck:
        if not principal.is_authenticated:
            raise Unauthenticated("principal required")

        decision = await self._resolver.resolve(principal, Capability.unlimited_collections)
        if decision.granted:
            return await self._store.create_deck(principal, title, description)

        # No count is read here; the store evaluates it inside the insert itself.
        deck = await self._store.create_deck_within_limit(
            principal, title, description, limit=self._free_limit
        )
        if deck is None:
            log.info("deck_quota_exceeded", subject=principal.subject, limit=self._free_limit)
            raise QuotaExceeded(limit=self._free_limit, plan=Plan.free.value)
        return deck


# --- Module Notes -----------------------------------------------------------
# `unlimited-collections` maps to {pro}, so this agrees with `resolve_plan`.
