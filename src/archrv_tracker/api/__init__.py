"""
archrv_tracker.api

API package for the tracker service.

Responsibilities:
- FastAPI app factory and router modules.
- API-layer dependency wiring and error-to-response mapping.
"""

# Package marker.


# --- Module Notes -----------------------------------------------------------
# The API layer stays thin: request validation + auth + delegation to services.
