"""
archrv_tracker.db.repositories

Repository package.

Responsibilities:
- Group session-bound data-access helpers used by the Store facade.
"""

# Package marker; repositories are imported directly from submodules.


# --- Module Notes -----------------------------------------------------------
# Repositories never commit and never raise domain errors; `db.store.Store` owns both.
