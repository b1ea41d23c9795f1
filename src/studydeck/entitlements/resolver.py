"""
studydeck.entitlements.resolver

Ordered entitlement resolution.

Responsibilities:
- Decide whether a principal holds a capability, with provenance.
- Resolve the principal's plan using the same precedence.

Resolution order (first conclusive source wins):
1. override          operator flag injected at construction
2. primary-provider  billing service; failure means "inapplicable", never "denied"
3. fallback-claims   plan label cached in the principal's session claims
4. default-deny

The resolver is read-only: it never touches quota or resource state, so calling it
twice with unchanged inputs yields the same decision.
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable

from studydeck.auth.models import Principal
from studydeck.entitlements.claims import ClaimsSource
from studydeck.entitlements.models import (
    CAPABILITY_TIERS,
    Capability,
    DecisionSource,
    EntitlementDecision,
    Plan,
)
from studydeck.entitlements.provider import EntitlementProvider
from studydeck.errors import UpstreamUnavailable
from studydeck.observability.logging import get_logger

log = get_logger(__name__)

_Step = Callable[[Principal, Capability, frozenset[Plan]], Awaitable[EntitlementDecision | None]]


class EntitlementResolver:
    def __init__(
        self,
        *,
        provider: EntitlementProvider,
        claims: ClaimsSource,
        override: bool = False,
    ) -> None:
        self._provider = provider
        self._claims = claims
        self._override = override
        self._chain: tuple[_Step, ...] = (
            self._from_override,
            self._from_provider,
            self._from_claims,
        )

    async def resolve(
        self, principal: Principal | None, capability: Capability
    ) -> EntitlementDecision:
        if principal is None or not principal.is_authenticated:
            # Anonymous callers are denied before any source is consulted.
            return EntitlementDecision.deny("principal not authenticated")

        tiers = CAPABILITY_TIERS[capability]
        for step in self._chain:
            decision = await step(principal, capability, tiers)
            if decision is not None:
                self._log(principal, capability, decision)
                return decision

        required = ", ".join(sorted(t.value for t in tiers))
        decision = EntitlementDecision.deny(f"{capability.value} requires plan: {required}")
        self._log(principal, capability, decision)
        return decision

    async def resolve_plan(self, principal: Principal | None) -> Plan:
        if principal is None or not principal.is_authenticated:
            return Plan.free

        if self._override:
            source, plan = DecisionSource.override, Plan.pro
        elif await self._provider_has_pro(principal):
            source, plan = DecisionSource.primary_provider, Plan.pro
        else:
            claimed = await self._claimed_plan(principal)
            if claimed is not None:
                source, plan = DecisionSource.fallback_claims, claimed
            else:
                source, plan = DecisionSource.default_deny, Plan.free

        log.info("plan_resolved", subject=principal.subject, plan=plan.value, source=source.value)
        return plan

    async def _from_override(
        self, principal: Principal, capability: Capability, tiers: frozenset[Plan]
    ) -> EntitlementDecision | None:
        if not self._override:
            return None
        return EntitlementDecision.grant(DecisionSource.override, "operator override enabled")

    async def _from_provider(
        self, principal: Principal, capability: Capability, tiers: frozenset[Plan]
    ) -> EntitlementDecision | None:
        try:
            granted = await self._provider.has_capability(principal, capability)
        except UpstreamUnavailable as e:
            log.warning(
                "entitlement_provider_unavailable",
                subject=principal.subject,
                capability=capability.value,
                error=str(e),
            )
            return None
        if not granted:
            # A negative answer does not end the chain; cached claims may still grant.
            return None
        return EntitlementDecision.grant(
            DecisionSource.primary_provider, f"{capability.value} granted by billing provider"
        )

    async def _from_claims(
        self, principal: Principal, capability: Capability, tiers: frozenset[Plan]
    ) -> EntitlementDecision | None:
        plan = await self._claimed_plan(principal)
        if plan is None or plan not in tiers:
            return None
        return EntitlementDecision.grant(
            DecisionSource.fallback_claims, f"{capability.value} granted via session plan: {plan}"
        )

    async def _provider_has_pro(self, principal: Principal) -> bool:
        try:
            return await self._provider.has_plan(principal, Plan.pro)
        except UpstreamUnavailable as e:
            log.warning("entitlement_provider_unavailable", subject=principal.subject, error=str(e))
            return False

    async def _claimed_plan(self, principal: Principal) -> Plan | None:
        try:
            return await self._claims.plan_for(principal)
        except UpstreamUnavailable as e:
            log.warning("claims_source_unavailable", subject=principal.subject, error=str(e))
            return None

    @staticmethod
    def _log(principal: Principal, capability: Capability, decision: EntitlementDecision) -> None:
        log.info(
            "entitlement_resolved",
            subject=principal.subject,
            capability=capability.value,
            granted=decision.granted,
            source=decision.source.value,
            detail=decision.detail,
        )


# --- Module Notes -----------------------------------------------------------
# Construct one resolver per request (see `studydeck.api.deps.entitlement_resolver`);
# the override flag comes from settings at that point and is fixed for its lifetime.
