"""
archrv_tracker.auth

Authentication package.

Responsibilities:
- Shared-secret token check for the CI-facing routes.
"""

# Package marker.
