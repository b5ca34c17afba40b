"""
Gemman HTTP Feed Adapter — Supplier catalog over HTTP.

POSTs the fixed credentials to the supplier endpoint and returns the
decoded JSON body.

Settings:
    GEMMAN = {
        "FEED_CLIENT": "gemman.adapters.http_feed.HttpFeedClient",
        "FEED_URL": "https://supplier.example.com/api",
        "FEED_USERNAME": "...",
        "FEED_PASSWORD": "...",
        "FEED_TIMEOUT": 60,
        "FEED_RETRIES": 3,
        "FEED_BACKOFF": 2,
        "FEED_DEADLINE": 300,
    }

Retries cover connection errors, timeouts, 429 and 5xx answers, with
exponential backoff, and never run past FEED_DEADLINE.
"""

from __future__ import annotations

import logging
import time
from typing import Any, Callable

import requests

from gemman.conf import gemman_settings
from gemman.exceptions import MalformedFeedPayload, TransientFeedError

logger = logging.getLogger('gemman')

RETRY_STATUSES = frozenset({429, 500, 502, 503, 504})


class HttpFeedClient:
    """
    Supplier feed client backed by requests.

    Every argument defaults to the matching GEMMAN setting.
    """

    def __init__(
        self,
        url: str | None = None,
        username: str | None = None,
        password: str | None = None,
        timeout: float | None = None,
        retries: int | None = None,
        backoff: float | None = None,
        deadline: float | None = None,
        session: requests.Session | None = None,
        sleep: Callable[[float], None] = time.sleep,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.url = url if url is not None else gemman_settings.FEED_URL
        self.username = username if username is not None else gemman_settings.FEED_USERNAME
        self.password = password if password is not None else gemman_settings.FEED_PASSWORD
        self.timeout = timeout if timeout is not None else gemman_settings.FEED_TIMEOUT
        self.retries = retries if retries is not None else gemman_settings.FEED_RETRIES
        self.backoff = backoff if backoff is not None else gemman_settings.FEED_BACKOFF
        self.deadline = deadline if deadline is not None else gemman_settings.FEED_DEADLINE
        self.session = session or requests.Session()
        self._sleep = sleep
        self._clock = clock

    def fetch(self) -> Any:
        """
        Fetch the complete catalog.

        Raises:
            TransientFeedError: FEED_NOT_CONFIGURED, FEED_UNREACHABLE,
                FEED_TIMEOUT, FEED_REJECTED or FEED_DEADLINE
            MalformedFeedPayload: Body is not JSON
        """
        if not self.url:
            raise TransientFeedError('FEED_NOT_CONFIGURED')

        started = self._clock()
        attempts = self.retries + 1
        last_error: TransientFeedError | None = None

        for attempt in range(1, attempts + 1):
            remaining = self.deadline - (self._clock() - started)
            if remaining <= 0:
                raise self._deadline_error(last_error)

            try:
                response = self._post(min(self.timeout, remaining))
            except requests.Timeout as e:
                last_error = TransientFeedError('FEED_TIMEOUT', detail=str(e), attempt=attempt)
            except requests.RequestException as e:
                last_error = TransientFeedError('FEED_UNREACHABLE', detail=str(e), attempt=attempt)
            else:
                if response.ok:
                    return self._decode(response)
                last_error = TransientFeedError(
                    'FEED_REJECTED',
                    f"Fornecedor respondeu HTTP {response.status_code}",
                    status=response.status_code,
                    attempt=attempt,
                )
                if response.status_code not in RETRY_STATUSES:
                    raise last_error

            logger.warning(
                "gemman.feed.attempt_failed",
                extra={"attempt": attempt, "attempts": attempts, "code": last_error.code},
            )
            if attempt < attempts:
                delay = self.backoff * (2 ** (attempt - 1))
                if delay >= self.deadline - (self._clock() - started):
                    raise self._deadline_error(last_error)
                self._sleep(delay)

        raise last_error

    def _deadline_error(self, last_error: TransientFeedError | None) -> TransientFeedError:
        return TransientFeedError(
            'FEED_DEADLINE',
            deadline=self.deadline,
            last_code=last_error.code if last_error else None,
        )

    def _post(self, timeout: float) -> requests.Response:
        return self.session.post(
            self.url,
            json={'USERNAME': self.username, 'PASSWORD': self.password},
            headers={'Accept': 'application/json'},
            timeout=timeout,
        )

    def _decode(self, response: requests.Response) -> Any:
        try:
            return response.json()
        except ValueError as e:
            raise MalformedFeedPayload(
                'MALFORMED_PAYLOAD',
                "Resposta do fornecedor não é JSON válido",
                detail=str(e)[:200],
            ) from e
