"""
Static Feed Client — In-memory adapter for development and testing.

Implements the FeedClient protocol without any network access:

Usage in settings.py:
    GEMMAN = {
        "FEED_CLIENT": "gemman.adapters.static.StaticFeedClient",
    }

WARNING: Do NOT use in production. With no records configured every
sync is an empty snapshot and updates nothing.
"""

from __future__ import annotations

from typing import Any


class StaticFeedClient:
    """
    Feed client serving a fixed snapshot.

    Args:
        records: Records wrapped as {"success": True, "data": records}
        payload: Raw body returned as-is (takes precedence over records)
    """

    def __init__(self, records: list[dict] | None = None, payload: Any = None):
        self.records = list(records or [])
        self.payload = payload
        self.calls = 0

    def fetch(self) -> Any:
        """Return the configured snapshot."""
        self.calls += 1
        if self.payload is not None:
            return self.payload
        return {
            'success': True,
            'data': list(self.records),
            'message': f'{len(self.records)} registro(s)',
        }
