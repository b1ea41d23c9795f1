"""
tests.fakes

In-memory stand-ins for the external collaborators.
"""

from __future__ import annotations

from collections.abc import Iterable
from typing import Any

from studydeck.auth.models import Principal
from studydeck.entitlements.claims import SessionClaimsSource
from studydeck.entitlements.models import Capability, Plan
from studydeck.entitlements.resolver import EntitlementResolver
from studydeck.errors import GenerationFailure, UpstreamUnavailable


class FakeProvider:
    def __init__(
        self,
        *,
        capabilities: Iterable[Capability] = (),
        plans: Iterable[Plan] = (),
        unavailable: bool = False,
    ) -> None:
        self.capabilities = set(capabilities)
        self.plans = set(plans)
        self.unavailable = unavailable
        self.calls = 0

    async def has_capability(self, principal: Principal, capability: Capability) -> bool:
        self.calls += 1
        if self.unavailable:
            raise UpstreamUnavailable("billing down")
        return capability in self.capabilities

    async def has_plan(self, principal: Principal, plan: Plan) -> bool:
        self.calls += 1
        if self.unavailable:
            raise UpstreamUnavailable("billing down")
        return plan in self.plans

    def upgrade(self) -> None:
        self.plans.add(Plan.pro)
        self.capabilities.update(Capability)


class FakeGenerator:
    def __init__(
        self, records: list[dict[str, Any]] | None = None, *, error: str | None = None
    ) -> None:
        self.records = records or []
        self.error = error
        self.calls: list[dict[str, Any]] = []

    async def generate(self, *, topic: str, context: str, count: int) -> list[dict[str, Any]]:
        self.calls.append({"topic": topic, "context": context, "count": count})
        if self.error is not None:
            raise GenerationFailure(self.error)
        return self.records


def make_resolver(
    provider: FakeProvider | None = None, *, override: bool = False
) -> EntitlementResolver:
    return EntitlementResolver(
        provider=provider if provider is not None else FakeProvider(unavailable=True),
        claims=SessionClaimsSource(),
        override=override,
    )


def with_plan(principal: Principal, plan: str) -> Principal:
    return Principal(subject=principal.subject, claims={"metadata": {"plan": plan}})


def card_records(n: int) -> list[dict[str, Any]]:
    return [{"front": f"Question {i}", "back": f"Answer {i}"} for i in range(1, n + 1)]
