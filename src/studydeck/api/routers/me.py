"""
studydeck.api.routers.me

Principal-scoped entitlement view.

Responsibilities:
- Report the resolved plan and each capability decision with its provenance.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from studydeck.api.deps import entitlement_resolver, ownership_store, settings_dep
from studydeck.auth.deps import get_principal
from studydeck.auth.models import Principal
from studydeck.entitlements.models import Capability
from studydeck.entitlements.resolver import EntitlementResolver
from studydeck.services.ownership_store import OwnershipStore
from studydeck.settings import Settings

router = APIRouter(prefix="/v1/me", tags=["me"])


class CapabilityView(BaseModel):
    capability: str
    granted: bool
    source: str
    detail: str


class PlanResponse(BaseModel):
    plan: str
    deck_count: int
    deck_limit: int | None
    capabilities: list[CapabilityView]


@router.get("/plan", response_model=PlanResponse)
async def get_plan(
    principal: Principal = Depends(get_principal),
    resolver: EntitlementResolver = Depends(entitlement_resolver),
    store: OwnershipStore = Depends(ownership_store),
    settings: Settings = Depends(settings_dep),
) -> PlanResponse:
    plan = await resolver.resolve_plan(principal)
    views: list[CapabilityView] = []
    for capability in Capability:
        d = await resolver.resolve(principal, capability)
        views.append(
            CapabilityView(
                capability=capability.value,
                granted=d.granted,
                source=d.source.value,
                detail=d.detail,
            )
        )
    unlimited = next(v.granted for v in views if v.capability == Capability.unlimited_collections)
    return PlanResponse(
        plan=plan.value,
        deck_count=await store.count_decks(principal),
        deck_limit=None if unlimited else settings.free_deck_limit,
        capabilities=views,
    )
