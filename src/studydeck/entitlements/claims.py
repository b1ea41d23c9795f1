"""
studydeck.entitlements.claims

Fallback claims source.

Responsibilities:
- Read the cached plan label previously issued into the principal's session.
"""

from __future__ import annotations

from typing import Protocol

from studydeck.auth.models import Principal
from studydeck.entitlements.models import Plan, parse_plan


class ClaimsSource(Protocol):
    async def plan_for(self, principal: Principal) -> Plan | None: ...


class SessionClaimsSource:
    """
    Reads `metadata.plan` from the verified token claims carried on the principal.
    """

    async def plan_for(self, principal: Principal) -> Plan | None:
        metadata = principal.claims.get("metadata")
        if not isinstance(metadata, dict):
            return None
        return parse_plan(metadata.get("plan"))
