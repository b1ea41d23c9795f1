"""
studydeck.api.deps

FastAPI dependency wiring for the API layer.

Responsibilities:
- Provide dependency functions for settings and DB sessions.
- Build per-request services from app.state infrastructure.
"""

from __future__ import annotations

from collections.abc import AsyncIterator

from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from studydeck.entitlements.claims import SessionClaimsSource
from studydeck.entitlements.provider import (
    EntitlementProvider,
    HttpEntitlementProvider,
    UnconfiguredEntitlementProvider,
)
from studydeck.entitlements.resolver import EntitlementResolver
from studydeck.generation.client import (
    ContentGenerator,
    HttpContentGenerator,
    UnconfiguredContentGenerator,
)
from studydeck.services.generation_service import CardGenerationService
from studydeck.services.ownership_store import OwnershipStore
from studydeck.services.quota_guard import QuotaGuard
from studydeck.settings import Settings, get_settings


def settings_dep() -> Settings:
    return get_settings()


def sessionmaker_from_app(request: Request) -> async_sessionmaker[AsyncSession]:
    # The sessionmaker is created on app startup in `studydeck.api.app.create_app`.
    return request.app.state.sessionmaker  # type: ignore[attr-defined]


async def db_session(
    session_factory: async_sessionmaker[AsyncSession] = Depends(sessionmaker_from_app),
) -> AsyncIterator[AsyncSession]:
    # Closing the session discards anything left uncommitted by an abandoned request.
    async with session_factory() as session:
        yield session


def entitlement_provider(request: Request) -> EntitlementProvider:
    http = getattr(request.app.state, "entitlement_http", None)
    if http is None:
        return UnconfiguredEntitlementProvider()
    return HttpEntitlementProvider(http=http)


def content_generator(request: Request) -> ContentGenerator:
    http = getattr(request.app.state, "generator_http", None)
    if http is None:
        return UnconfiguredContentGenerator()
    return HttpContentGenerator(http=http)


def entitlement_resolver(
    provider: EntitlementProvider = Depends(entitlement_provider),
    settings: Settings = Depends(settings_dep),
) -> EntitlementResolver:
    return EntitlementResolver(
        provider=provider,
        claims=SessionClaimsSource(),
        override=settings.entitlement_override,
    )


def ownership_store(session: AsyncSession = Depends(db_session)) -> OwnershipStore:
    return OwnershipStore(session=session)


def quota_guard(
    resolver: EntitlementResolver = Depends(entitlement_resolver),
    store: OwnershipStore = Depends(ownership_store),
    settings: Settings = Depends(settings_dep),
) -> QuotaGuard:
    return QuotaGuard(resolver=resolver, store=store, free_limit=settings.free_deck_limit)


def generation_service(
    resolver: EntitlementResolver = Depends(entitlement_resolver),
    store: OwnershipStore = Depends(ownership_store),
    generator: ContentGenerator = Depends(content_generator),
    settings: Settings = Depends(settings_dep),
) -> CardGenerationService:
    return CardGenerationService(
        resolver=resolver,
        store=store,
        generator=generator,
        card_count=settings.generation_card_count,
    )


# --- Module Notes -----------------------------------------------------------
# FastAPI caches dependencies per request, so `quota_guard` and `generation_service`
# share the request's single session/store.
