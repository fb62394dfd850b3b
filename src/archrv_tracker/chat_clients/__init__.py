"""
archrv_tracker.chat_clients

Chat client package.

Responsibilities:
- Deliver notice text to the Telegram group.
- Provide the small HTML markup subset used in notices.
"""

# Package marker.


# --- Module Notes -----------------------------------------------------------
# The notifier depends on a `deliver(text)` callable, not on this package directly.
