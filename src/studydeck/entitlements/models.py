"""
studydeck.entitlements.models

Entitlement vocabulary and decision types.

Responsibilities:
- Name the plans and gated capabilities.
- Map each capability to the tiers that satisfy it.
- Define the per-request `EntitlementDecision` (never persisted).
"""

from __future__ import annotations

import enum
from collections.abc import Mapping
from dataclasses import dataclass


class Plan(enum.StrEnum):
    free = "free"
    pro = "pro"


class Capability(enum.StrEnum):
    bulk_generation = "bulk-generation"
    unlimited_collections = "unlimited-collections"


class DecisionSource(enum.StrEnum):
    # Order matches the resolution chain.
    override = "override"
    primary_provider = "primary-provider"
    fallback_claims = "fallback-claims"
    default_deny = "default-deny"


# Every capability maps to a non-empty set of tiers.
CAPABILITY_TIERS: Mapping[Capability, frozenset[Plan]] = {
    Capability.bulk_generation: frozenset({Plan.pro}),
    Capability.unlimited_collections: frozenset({Plan.pro}),
}


@dataclass(frozen=True, slots=True)
class EntitlementDecision:
    granted: bool
    source: DecisionSource
    detail: str

    @classmethod
    def grant(cls, source: DecisionSource, detail: str) -> EntitlementDecision:
        return cls(granted=True, source=source, detail=detail)

    @classmethod
    def deny(cls, detail: str) -> EntitlementDecision:
        return cls(granted=False, source=DecisionSource.default_deny, detail=detail)


def parse_plan(raw: object) -> Plan | None:
    # Unknown labels are treated as absent rather than as "free".
    if not isinstance(raw, str):
        return None
    try:
        return Plan(raw.strip().lower())
    except ValueError:
        return None
