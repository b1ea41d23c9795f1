"""
studydeck.services

Service-layer package.

Responsibilities:
- Own transaction boundaries and persistence decisions.
- Combine ownership checks, entitlement decisions and quota/bulk-insert semantics.
"""

# Package marker.


# --- Module Notes -----------------------------------------------------------
# Services are plain Python and testable with fake collaborators and a SQLite session.
