"""
studydeck.auth

Authentication package.

Responsibilities:
- JWT helpers and validation.
- FastAPI auth dependency producing the typed `Principal`.
"""

# Package marker.


# --- Module Notes -----------------------------------------------------------
# Authorization (ownership, entitlements) lives in services/entitlements, not here.
