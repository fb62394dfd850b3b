"""
archrv_tracker.api.routers

HTTP routers (health, dashboard reads, CI callbacks).
"""
