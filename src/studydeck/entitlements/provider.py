"""
studydeck.entitlements.provider

Primary entitlement provider (external billing service) boundary.

Responsibilities:
- Define the read-only provider contract (`has_capability` / `has_plan`).
- Provide an httpx adapter that converts every transport or protocol failure
  into `UpstreamUnavailable`.
- Provide a stand-in for deployments without billing configured.
"""

from __future__ import annotations

from typing import Protocol
from urllib.parse import quote

import httpx
from pydantic import BaseModel

from studydeck.auth.models import Principal
from studydeck.entitlements.models import Capability, Plan
from studydeck.errors import UpstreamUnavailable


class EntitlementProvider(Protocol):
    async def has_capability(self, principal: Principal, capability: Capability) -> bool: ...

    async def has_plan(self, principal: Principal, plan: Plan) -> bool: ...


class _GrantResponse(BaseModel):
    granted: bool


class HttpEntitlementProvider:
    """
    Queries the billing service over HTTP.

    Only an explicit `{"granted": true|false}` answer counts as a response; anything
    else means the provider is unavailable for this request.
    """

    def __init__(self, *, http: httpx.AsyncClient) -> None:
        self._http = http

    async def has_capability(self, principal: Principal, capability: Capability) -> bool:
        return await self._query(f"{_principal_path(principal)}/capabilities/{capability.value}")

    async def has_plan(self, principal: Principal, plan: Plan) -> bool:
        return await self._query(f"{_principal_path(principal)}/plans/{plan.value}")

    async def _query(self, path: str) -> bool:
        try:
            r = await self._http.get(path)
            r.raise_for_status()
            return _GrantResponse.model_validate(r.json()).granted
        except (httpx.HTTPError, httpx.InvalidURL, ValueError) as e:
            raise UpstreamUnavailable(f"entitlement provider failed: {e}") from e


def _principal_path(principal: Principal) -> str:
    # The subject is one opaque path segment; "/", "?" and control characters are escaped.
    return f"/v1/principals/{quote(principal.subject, safe='')}"


class UnconfiguredEntitlementProvider:
    """
    Used when no billing endpoint is configured; every query is inapplicable.
    """

    async def has_capability(self, principal: Principal, capability: Capability) -> bool:
        raise UpstreamUnavailable("entitlement provider not configured")

    async def has_plan(self, principal: Principal, plan: Plan) -> bool:
        raise UpstreamUnavailable("entitlement provider not configured")


# --- Module Notes -----------------------------------------------------------
# The provider is read-only from this service's perspective; no method mutates it.
