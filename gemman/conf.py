"""
Gemman configuration.

Usage in settings.py:
    GEMMAN = {
        "FEED_CLIENT": "gemman.adapters.http_feed.HttpFeedClient",
        "FEED_URL": "https://supplier.example.com/api",
        "FEED_USERNAME": "...",
        "FEED_PASSWORD": "...",
        "SYNC_BATCH_SIZE": 100,
        "SYNC_INTERVAL_SECONDS": 4 * 60 * 60,
    }
"""

from dataclasses import dataclass, field
from typing import Any

from django.conf import settings


def _default_series() -> dict[str, dict[str, Any]]:
    return {
        'invoice': {'prefix': 'CD', 'start': 103},
        'memo': {'prefix': 'CDM', 'start': 5},
    }


@dataclass
class GemmanSettings:
    """Gemman configuration settings."""

    # Feed client backend (dotted path)
    FEED_CLIENT: str = "gemman.adapters.http_feed.HttpFeedClient"

    # Supplier endpoint and fixed credentials
    FEED_URL: str = ""
    FEED_USERNAME: str = ""
    FEED_PASSWORD: str = ""

    # Seconds per HTTP attempt
    FEED_TIMEOUT: float = 60.0

    # Extra attempts after the first one
    FEED_RETRIES: int = 3

    # Base seconds for exponential backoff between attempts
    FEED_BACKOFF: float = 2.0

    # Overall seconds budget for one fetch, retries included
    FEED_DEADLINE: float = 300.0

    # Records per write transaction
    SYNC_BATCH_SIZE: int = 100

    # Scheduler period (default: every 4 hours)
    SYNC_INTERVAL_SECONDS: int = 4 * 60 * 60

    # A STARTED run older than this is considered abandoned
    SYNC_STALE_AFTER_MINUTES: int = 120

    # Pagination bounds for unit listing
    DEFAULT_PAGE_SIZE: int = 10
    MAX_PAGE_SIZE: int = 100

    # document_type -> {"prefix": str, "start": int}
    DOCUMENT_SERIES: dict[str, dict[str, Any]] = field(default_factory=_default_series)


def get_gemman_settings() -> GemmanSettings:
    """Load settings from Django settings."""
    user_settings: dict[str, Any] = getattr(settings, "GEMMAN", {})
    return GemmanSettings(**{
        k: v for k, v in user_settings.items()
        if k in GemmanSettings.__dataclass_fields__
    })


class _LazySettings:
    """Lazy proxy that re-reads settings on every attribute access."""

    def __getattr__(self, name):
        return getattr(get_gemman_settings(), name)


gemman_settings = _LazySettings()
