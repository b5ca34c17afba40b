"""
Gemman Protocols.

Defines interfaces for external system integration.
"""

from gemman.protocols.feed import FeedClient

__all__ = [
    "FeedClient",
]
