"""
archrv_tracker.db

Persistence package (SQLAlchemy async).

Responsibilities:
- Provide ORM models, engine/session setup, repositories and the Store facade.
"""

# Package marker.
