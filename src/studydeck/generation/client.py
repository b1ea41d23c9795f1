"""
studydeck.generation.client

HTTP client boundary for the external flashcard generator.

Responsibilities:
- Send `{topic, context, count}` and parse `{"cards": [{front, back}, ...]}`.
- Convert every transport, status or shape failure into `GenerationFailure`.

The parsed cards are still untrusted: length bounds are enforced at ingestion.
"""

from __future__ import annotations

from typing import Protocol

import httpx
from pydantic import BaseModel

from studydeck.errors import GenerationFailure


class ContentGenerator(Protocol):
    async def generate(self, *, topic: str, context: str, count: int) -> list[dict[str, str]]: ...


class _GeneratedCard(BaseModel):
    front: str
    back: str


class _GenerateResponse(BaseModel):
    cards: list[_GeneratedCard]


class HttpContentGenerator:
    def __init__(self, *, http: httpx.AsyncClient) -> None:
        self._http = http

    async def generate(self, *, topic: str, context: str, count: int) -> list[dict[str, str]]:
        try:
            r = await self._http.post(
                "/v1/generate",
                json={"topic": topic, "context": context, "count": count},
            )
            r.raise_for_status()
            body = _GenerateResponse.model_validate(r.json())
        except (httpx.HTTPError, ValueError) as e:
            raise GenerationFailure(f"content generator failed: {e}") from e

        if not body.cards:
            raise GenerationFailure("content generator returned no cards")
        return [c.model_dump() for c in body.cards]


class UnconfiguredContentGenerator:
    async def generate(self, *, topic: str, context: str, count: int) -> list[dict[str, str]]:
        raise GenerationFailure("content generator not configured")


# --- Module Notes -----------------------------------------------------------
# base_url and timeout are set on the shared httpx client in `studydeck.api.app`.
