"""
studydeck.entitlements

Entitlement resolution package.

Responsibilities:
- Capability/plan vocabulary and decision types.
- Pluggable entitlement sources (billing provider, session claims).
- The ordered resolver that turns sources into a decision with provenance.
"""

# Package marker; import from submodules.
