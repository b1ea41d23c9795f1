"""
studydeck.api.routers

Router modules mounted by `studydeck.api.app.create_app`.
"""

# Package marker.
