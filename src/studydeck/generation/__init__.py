"""
studydeck.generation

Content generator boundary.

Responsibilities:
- Define the generator contract and its HTTP adapter.
"""

# Package marker.
