"""
studydeck.db.repositories

Repository package.

Responsibilities:
- Group data-access repositories for the persistence layer.
"""

# Package marker; repositories are imported directly from submodules.


# --- Module Notes -----------------------------------------------------------
# Every method takes the owner id and puts it in the same statement that reads or
# writes; repositories never commit, services own the transaction.
