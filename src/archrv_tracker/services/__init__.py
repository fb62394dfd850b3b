"""
archrv_tracker.services

Service-layer package.

Responsibilities:
- Run the package lifecycle workflows on top of the Store.
- Queue and batch outgoing notices.
"""

# Package marker.
