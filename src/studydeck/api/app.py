"""
studydeck.api.app

FastAPI app factory for the study deck service.

Responsibilities:
- Build the FastAPI application and register routers/middleware/error handlers.
- Initialize and dispose shared infrastructure (DB engine, collaborator HTTP clients).
- Provide a single composition root where cross-cutting concerns live.
"""

from __future__ import annotations

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

import httpx
from fastapi import FastAPI

from studydeck import __version__
from studydeck.api.deps import settings_dep
from studydeck.api.errors import register_error_handlers
from studydeck.api.routers.cards import router as cards_router
from studydeck.api.routers.decks import router as decks_router
from studydeck.api.routers.dev_auth import router as dev_auth_router
from studydeck.api.routers.health import router as health_router
from studydeck.api.routers.me import router as me_router
from studydeck.db.init_db import init_db
from studydeck.db.session import create_engine, create_sessionmaker
from studydeck.observability.logging import configure_logging, get_logger
from studydeck.observability.middleware import RequestContextMiddleware
from studydeck.settings import Settings, get_settings

log = get_logger(__name__)


def create_app(*, settings: Settings) -> FastAPI:
    configure_logging(service_name=settings.service_name, level=settings.log_level)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        log.info("startup", env=settings.env)
        # Engine, sessionmaker and collaborator clients live on app.state;
        # routers reach them through `studydeck.api.deps`.
        engine = create_engine(settings)
        app.state.engine = engine
        app.state.sessionmaker = create_sessionmaker(engine)
        app.state.entitlement_http = _client(
            settings.entitlement_provider_url, settings.entitlement_provider_timeout_s
        )
        app.state.generator_http = _client(
            settings.content_generator_url, settings.content_generator_timeout_s
        )
        if settings.env in ("dev", "test"):
            await init_db(engine)
        try:
            yield
        finally:
            for name in ("entitlement_http", "generator_http"):
                client = getattr(app.state, name, None)
                if client is not None:
                    await client.aclose()
            await engine.dispose()
            log.info("shutdown")

    app = FastAPI(
        title="StudyDeck",
        version=__version__,
        docs_url="/docs",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )
    app.state.settings = settings
    # Every dependency sees the settings this app was built with, not the env cache.
    app.dependency_overrides[get_settings] = lambda: settings
    app.dependency_overrides[settings_dep] = lambda: settings

    app.add_middleware(RequestContextMiddleware)
    register_error_handlers(app)
    app.include_router(health_router, tags=["health"])
    app.include_router(dev_auth_router)
    app.include_router(me_router)
    app.include_router(decks_router)
    app.include_router(cards_router)

    return app


def _client(base_url: str | None, timeout_s: float) -> httpx.AsyncClient | None:
    # An unset URL means the collaborator is not configured; deps pick a stand-in.
    if not base_url:
        return None
    return httpx.AsyncClient(base_url=base_url.rstrip("/"), timeout=timeout_s)


# --- Module Notes -----------------------------------------------------------
# App composition stays here; ownership, quota and entitlement logic live in services.
