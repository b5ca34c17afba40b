"""
Supplier Feed Protocol — Interface for catalog snapshot sources.

Gemman defines this protocol; the HTTP adapter (or any other source)
implements it.
"""

from __future__ import annotations

from typing import Any, Protocol, runtime_checkable


@runtime_checkable
class FeedClient(Protocol):
    """
    Protocol for fetching a full catalog snapshot.

    Implementations return the decoded response body untouched. Shape
    validation and record extraction belong to the sync engine, so a
    contract change on the supplier side is reported as
    MALFORMED_PAYLOAD, not as a transport failure.
    """

    def fetch(self) -> Any:
        """
        Fetch the complete catalog.

        Returns:
            Decoded JSON body, normally
            {"success": bool, "data": [record, ...], "message": str}

        Raises:
            TransientFeedError: Network failure, timeout, non-2xx status
            MalformedFeedPayload: Body is not valid JSON
        """
        ...
