"""
tests.test_logging

Secret masking in structured log events.
"""

from __future__ import annotations

from archrv_tracker.observability.logging import _redact_secrets


def test_secret_keys_are_masked() -> None:
    event = _redact_secrets(None, "warning", {"event": "x", "token": "s3cret", "package": "gcc"})

    assert event == {"event": "x", "token": "***", "package": "gcc"}
