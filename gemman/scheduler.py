"""
SyncScheduler — in-process periodic catalog sync.

Owned by whoever starts it (normally the run_sync_scheduler command):

    scheduler = SyncScheduler(interval_seconds=4 * 3600)
    scheduler.start()
    ...
    scheduler.stop()

Ticks never overlap each other; overlap with manual triggers is
rejected by the single active SyncRun constraint.
"""

import logging
import threading
from typing import Callable

from django.db import close_old_connections

from gemman.conf import gemman_settings
from gemman.models.enums import SyncTrigger

logger = logging.getLogger('gemman')


def _default_run() -> dict:
    from gemman.services.sync import CatalogSync
    return CatalogSync.run_sync(trigger=SyncTrigger.SCHEDULE)


class SyncScheduler:
    """
    Runs a catalog sync every interval_seconds on a daemon thread.

    Args:
        interval_seconds: Seconds between ticks (None = SYNC_INTERVAL_SECONDS)
        run_on_start: Tick immediately on start() instead of after
            the first interval
        run: Callable performing one sync (defaults to CatalogSync.run_sync)
    """

    def __init__(
        self,
        interval_seconds: float | None = None,
        run_on_start: bool = True,
        run: Callable[[], dict] | None = None,
    ):
        if interval_seconds is None:
            interval_seconds = gemman_settings.SYNC_INTERVAL_SECONDS
        if interval_seconds <= 0:
            raise ValueError('interval_seconds must be positive')

        self.interval_seconds = interval_seconds
        self.run_on_start = run_on_start
        self._run = run or _default_run
        self._stop_event = threading.Event()
        self._thread: threading.Thread | None = None

    def tick(self) -> dict | None:
        """
        Run one sync now (public for testing).

        Returns the run result, or None if the run raised.
        """
        close_old_connections()
        try:
            result = self._run()
        except Exception:
            logger.exception("gemman.scheduler.tick_failed")
            return None
        finally:
            close_old_connections()

        logger.info(
            "gemman.scheduler.tick",
            extra={"status": result.get('status'), "code": result.get('code')},
        )
        return result

    def start(self) -> None:
        """Start the background thread. No-op when already running."""
        if self.is_running:
            return

        self._stop_event.clear()
        self._thread = threading.Thread(
            target=self._run_loop,
            name='gemman-sync-scheduler',
            daemon=True,
        )
        self._thread.start()
        logger.info("gemman.scheduler.started", extra={"interval_seconds": self.interval_seconds})

    def stop(self, timeout: float = 30.0) -> None:
        """Signal stop and wait for the current tick to finish."""
        self._stop_event.set()
        if self._thread is not None and self._thread.is_alive():
            self._thread.join(timeout=timeout)
        logger.info("gemman.scheduler.stopped")

    def wait(self, timeout: float | None = None) -> bool:
        """Block until stop() is called. Returns True once stopped."""
        return self._stop_event.wait(timeout=timeout)

    @property
    def is_running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def _run_loop(self) -> None:
        if not self.run_on_start:
            if self._stop_event.wait(timeout=self.interval_seconds):
                return
        while not self._stop_event.is_set():
            self.tick()
            self._stop_event.wait(timeout=self.interval_seconds)
