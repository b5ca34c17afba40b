"""
Gemman Adapters.

Implementations of protocols for external systems.
"""

from gemman.adapters.feed import get_feed_client, reset_feed_client
from gemman.adapters.http_feed import HttpFeedClient
from gemman.adapters.static import StaticFeedClient

__all__ = [
    "HttpFeedClient",
    "StaticFeedClient",
    "get_feed_client",
    "reset_feed_client",
]
