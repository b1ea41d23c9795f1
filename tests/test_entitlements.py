"""
tests.test_entitlements

Precedence, totality and provenance of entitlement resolution.
"""

from __future__ import annotations

import httpx
import pytest

from studydeck.auth.models import Principal
from studydeck.entitlements.claims import SessionClaimsSource
from studydeck.entitlements.models import Capability, DecisionSource, Plan
from studydeck.entitlements.provider import (
    HttpEntitlementProvider,
    UnconfiguredEntitlementProvider,
)
from studydeck.entitlements.resolver import EntitlementResolver
from studydeck.errors import UpstreamUnavailable
from tests.fakes import FakeProvider, make_resolver, with_plan


@pytest.mark.asyncio
async def test_override_grants_regardless_of_provider_and_claims(alice: Principal) -> None:
    provider = FakeProvider()
    resolver = make_resolver(provider, override=True)

    d = await resolver.resolve(with_plan(alice, "free"), Capability.bulk_generation)

    assert d.granted is True
    assert d.source is DecisionSource.override
    assert provider.calls == 0


@pytest.mark.asyncio
async def test_provider_grant_wins_over_claims(alice: Principal) -> None:
    provider = FakeProvider(capabilities=[Capability.unlimited_collections])
    resolver = make_resolver(provider)

    d = await resolver.resolve(with_plan(alice, "free"), Capability.unlimited_collections)

    assert d.granted is True
    assert d.source is DecisionSource.primary_provider


@pytest.mark.asyncio
async def test_provider_failure_falls_through_to_claims(alice: Principal) -> None:
    resolver = make_resolver(FakeProvider(unavailable=True))

    d = await resolver.resolve(with_plan(alice, "pro"), Capability.bulk_generation)

    assert d.granted is True
    assert d.source is DecisionSource.fallback_claims


@pytest.mark.asyncio
async def test_provider_negative_answer_still_consults_claims(alice: Principal) -> None:
    resolver = make_resolver(FakeProvider())

    d = await resolver.resolve(with_plan(alice, "pro"), Capability.bulk_generation)

    assert d.granted is True
    assert d.source is DecisionSource.fallback_claims


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "claims", [{}, {"metadata": {"plan": "free"}}, {"metadata": {"plan": "gold"}}]
)
async def test_no_source_matches_denies_by_default(claims: dict) -> None:
    resolver = make_resolver(FakeProvider(unavailable=True))

    d = await resolver.resolve(Principal(subject="u1", claims=claims), Capability.bulk_generation)

    assert d.granted is False
    assert d.source is DecisionSource.default_deny
    assert "pro" in d.detail


@pytest.mark.asyncio
@pytest.mark.parametrize("principal", [None, Principal(subject=""), Principal(subject="   ")])
async def test_anonymous_principal_is_denied_without_consulting_sources(
    principal: Principal | None,
) -> None:
    provider = FakeProvider(capabilities=list(Capability))
    resolver = make_resolver(provider, override=True)

    d = await resolver.resolve(principal, Capability.bulk_generation)

    assert d.granted is False
    assert d.source is DecisionSource.default_deny
    assert provider.calls == 0
    assert await resolver.resolve_plan(principal) is Plan.free


@pytest.mark.asyncio
async def test_resolve_is_repeatable_with_unchanged_inputs(alice: Principal) -> None:
    resolver = make_resolver(FakeProvider(unavailable=True))
    principal = with_plan(alice, "pro")

    first = await resolver.resolve(principal, Capability.unlimited_collections)
    second = await resolver.resolve(principal, Capability.unlimited_collections)

    assert first == second


@pytest.mark.asyncio
async def test_resolve_plan_follows_the_same_precedence(alice: Principal) -> None:
    assert await make_resolver(FakeProvider(), override=True).resolve_plan(alice) is Plan.pro
    assert await make_resolver(FakeProvider(plans=[Plan.pro])).resolve_plan(alice) is Plan.pro

    down = make_resolver(FakeProvider(unavailable=True))
    assert await down.resolve_plan(with_plan(alice, "pro")) is Plan.pro
    assert await down.resolve_plan(with_plan(alice, "free")) is Plan.free
    assert await down.resolve_plan(alice) is Plan.free


@pytest.mark.asyncio
async def test_session_claims_source_reads_metadata_plan(alice: Principal) -> None:
    claims = SessionClaimsSource()

    assert await claims.plan_for(with_plan(alice, "PRO")) is Plan.pro
    assert await claims.plan_for(alice) is None
    assert await claims.plan_for(Principal(subject="x", claims={"metadata": "pro"})) is None


def _provider(handler) -> HttpEntitlementProvider:
    http = httpx.AsyncClient(transport=httpx.MockTransport(handler), base_url="http://billing")
    return HttpEntitlementProvider(http=http)


@pytest.mark.asyncio
async def test_http_provider_reads_grant_answers(alice: Principal) -> None:
    seen: list[str] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request.url.path)
        return httpx.Response(200, json={"granted": request.url.path.endswith("/pro")})

    provider = _provider(handler)

    assert await provider.has_plan(alice, Plan.pro) is True
    assert await provider.has_capability(alice, Capability.bulk_generation) is False
    assert seen == [
        "/v1/principals/user_alice/plans/pro",
        "/v1/principals/user_alice/capabilities/bulk-generation",
    ]


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "response",
    [
        httpx.Response(503, text="unavailable"),
        httpx.Response(200, text="not json"),
        httpx.Response(200, json={"status": "ok"}),
    ],
)
async def test_http_provider_failures_are_upstream_unavailable(
    alice: Principal, response: httpx.Response
) -> None:
    provider = _provider(lambda request: response)

    with pytest.raises(UpstreamUnavailable):
        await provider.has_capability(alice, Capability.bulk_generation)


@pytest.mark.asyncio
async def test_provider_outage_over_http_resolves_via_claims(alice: Principal) -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    resolver = EntitlementResolver(provider=_provider(handler), claims=SessionClaimsSource())

    d = await resolver.resolve(with_plan(alice, "pro"), Capability.unlimited_collections)

    assert d.granted is True
    assert d.source is DecisionSource.fallback_claims


@pytest.mark.asyncio
async def test_subject_cannot_address_another_principals_billing_resource() -> None:
    seen: list[bytes] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request.url.raw_path)
        granted = request.url.raw_path == b"/v1/principals/victim/capabilities/bulk-generation"
        return httpx.Response(200, json={"granted": granted})

    resolver = EntitlementResolver(provider=_provider(handler), claims=SessionClaimsSource())
    attacker = Principal(subject="victim/capabilities/bulk-generation?x=")

    d = await resolver.resolve(attacker, Capability.bulk_generation)

    assert d.granted is False
    assert d.source is DecisionSource.default_deny
    assert seen == [
        b"/v1/principals/victim%2Fcapabilities%2Fbulk-generation%3Fx%3D"
        b"/capabilities/bulk-generation"
    ]


@pytest.mark.asyncio
async def test_control_characters_in_subject_still_resolve_via_claims() -> None:
    resolver = EntitlementResolver(
        provider=_provider(lambda request: httpx.Response(200, json={"granted": False})),
        claims=SessionClaimsSource(),
    )
    principal = with_plan(Principal(subject="user\x01x"), "pro")

    d = await resolver.resolve(principal, Capability.bulk_generation)

    assert d.granted is True
    assert d.source is DecisionSource.fallback_claims
    assert await resolver.resolve_plan(principal) is Plan.pro


@pytest.mark.asyncio
async def test_invalid_url_from_transport_is_upstream_unavailable(alice: Principal) -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.InvalidURL("Invalid non-printable ASCII character in URL")

    with pytest.raises(UpstreamUnavailable):
        await _provider(handler).has_plan(alice, Plan.pro)


@pytest.mark.asyncio
async def test_unconfigured_provider_is_always_inapplicable(alice: Principal) -> None:
    provider = UnconfiguredEntitlementProvider()

    with pytest.raises(UpstreamUnavailable):
        await provider.has_plan(alice, Plan.pro)

    resolver = EntitlementResolver(provider=provider, claims=SessionClaimsSource())
    d = await resolver.resolve(alice, Capability.bulk_generation)
    assert d.source is DecisionSource.default_deny
