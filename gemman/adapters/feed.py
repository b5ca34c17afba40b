"""
Gemman Feed Adapter loader — resolves the configured FeedClient.

Usage:
    from gemman.adapters import get_feed_client

    client = get_feed_client()
    payload = client.fetch()

Settings:
    GEMMAN = {
        "FEED_CLIENT": "gemman.adapters.http_feed.HttpFeedClient",
    }
"""

from __future__ import annotations

import logging
import threading

from django.core.exceptions import ImproperlyConfigured
from django.utils.module_loading import import_string

from gemman.conf import gemman_settings
from gemman.protocols.feed import FeedClient

logger = logging.getLogger(__name__)


# Cached client instance
_lock = threading.Lock()
_feed_client: FeedClient | None = None


def get_feed_client() -> FeedClient:
    """
    Return the configured feed client.

    Returns:
        FeedClient instance

    Raises:
        ImproperlyConfigured: If FEED_CLIENT is empty, cannot be imported
            or does not implement FeedClient
    """
    global _feed_client

    if _feed_client is None:
        with _lock:
            if _feed_client is None:  # double-checked
                client_path = gemman_settings.FEED_CLIENT

                if not client_path:
                    raise ImproperlyConfigured(
                        "GEMMAN['FEED_CLIENT'] must be configured. "
                        "Example: 'gemman.adapters.http_feed.HttpFeedClient'"
                    )

                try:
                    client_class = import_string(client_path)
                except ImportError as e:
                    raise ImproperlyConfigured(
                        f"Failed to import feed client '{client_path}': {e}"
                    ) from e

                client = client_class()
                if not isinstance(client, FeedClient):
                    raise ImproperlyConfigured(
                        f"'{client_path}' does not implement FeedClient.fetch()"
                    )
                _feed_client = client
                logger.debug("Loaded feed client: %s", client_path)

    return _feed_client


def reset_feed_client() -> None:
    """Reset the cached client. Useful for testing."""
    global _feed_client
    _feed_client = None
