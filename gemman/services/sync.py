"""
Catalog sync — reconciles the supplier snapshot into InventoryUnit.

One run:
    1. Reclaim abandoned runs, open a SyncRun (STARTED)
    2. Fetch the snapshot through the configured FeedClient
    3. Extract and validate the record list (no writes on failure)
    4. Canonicalize + upsert by stock_id, in sequential batches,
       one transaction.atomic() per batch
    5. Finalize the SyncRun (COMPLETED or FAILED)

Failures never escape run_sync(): they end up on the SyncRun and in the
log. The next scheduled tick is the retry.
"""

import logging
import threading
from datetime import timedelta
from typing import Any

from django.db import DatabaseError, IntegrityError, close_old_connections, transaction
from django.utils import timezone

from gemman.adapters.feed import get_feed_client
from gemman.conf import gemman_settings
from gemman.exceptions import (
    FeedError,
    GemError,
    MalformedFeedPayload,
    PersistenceError,
    SyncInProgress,
    TransientFeedError,
)
from gemman.models.enums import SyncStatus, SyncTrigger
from gemman.models.sync_run import SyncRun
from gemman.models.unit import InventoryUnit
from gemman.protocols.feed import FeedClient
from gemman.services.canonical import canonicalize

logger = logging.getLogger('gemman')

# Keys tried, in order, when the payload is an object
RECORD_KEYS = ('data', 'diamonds', 'results')


def extract_records(payload: Any) -> list:
    """
    Pull the record list out of a feed response.

    Accepts {"success": true, "data": [...]} (fallback keys "diamonds",
    "results") or a bare list.

    Raises:
        TransientFeedError('FEED_REJECTED'): success is false
        MalformedFeedPayload('MALFORMED_PAYLOAD'): anything else
    """
    if isinstance(payload, list):
        return payload

    if not isinstance(payload, dict):
        raise MalformedFeedPayload('MALFORMED_PAYLOAD', payload_type=type(payload).__name__)

    if 'success' in payload and not payload['success']:
        raise TransientFeedError(
            'FEED_REJECTED',
            payload.get('message') or None,
        )

    for key in RECORD_KEYS:
        records = payload.get(key)
        if isinstance(records, list):
            return records

    raise MalformedFeedPayload('MALFORMED_PAYLOAD', keys=sorted(payload)[:20])


def batched(items: list, size: int):
    """Yield consecutive slices of at most size items."""
    for start in range(0, len(items), size):
        yield items[start:start + size]


class CatalogSync:
    """Sync run methods."""

    @classmethod
    def run_sync(cls, trigger: str = SyncTrigger.MANUAL, client: FeedClient | None = None) -> dict:
        """
        Run one full-catalog sync.

        Args:
            trigger: SyncTrigger value recorded on the run
            client: FeedClient to use (None = configured one)

        Returns:
            {"status": "success"|"failure", "processed_count": int,
             "error": str|None, "code": str|None, "sync_run_id": int|None}

        Concurrency:
            - At most one STARTED run (DB constraint); a concurrent
              invocation returns code SYNC_IN_PROGRESS without a new run
            - Each batch runs under its own transaction.atomic()
        """
        try:
            run = cls._open_run(trigger)
        except SyncInProgress as e:
            logger.warning("gemman.sync.rejected", extra={"trigger": trigger})
            return cls._result('failure', 0, e)
        except DatabaseError as e:
            logger.exception("gemman.sync.open_failed")
            return cls._result('failure', 0, PersistenceError('PERSISTENCE_FAILED', str(e)))

        logger.info("gemman.sync.started", extra={"sync_run_id": run.pk, "trigger": trigger})
        processed = 0

        try:
            run.progress(0, 'Buscando dados do fornecedor...')
            feed = client or get_feed_client()
            records = extract_records(feed.fetch())

            run.total_count = len(records)
            run.save(update_fields=['total_count'])
            run.progress(0, f'Processando {len(records)} pedra(s)...')

            batch_size = max(1, int(gemman_settings.SYNC_BATCH_SIZE))
            for number, batch in enumerate(batched(records, batch_size), start=1):
                upserted, skipped = cls._apply_batch(batch, run.pk, number)
                processed += upserted
                if skipped:
                    run.skipped_count += skipped
                    run.save(update_fields=['skipped_count'])
                run.progress(processed, f'Processadas {processed} de {len(records)} pedra(s)')
                logger.info(
                    "gemman.sync.batch_applied",
                    extra={"sync_run_id": run.pk, "batch": number, "processed": processed},
                )

            if not run.complete(processed, f'{processed} pedra(s) sincronizada(s) com sucesso'):
                logger.warning(
                    "gemman.sync.already_finalized",
                    extra={"sync_run_id": run.pk, "status": run.status, "code": run.error_code},
                )
                return cls._result(
                    'failure', processed, GemError(run.error_code or 'ABANDONED', run.message), run=run,
                )
            logger.info(
                "gemman.sync.completed",
                extra={"sync_run_id": run.pk, "processed": processed, "skipped": run.skipped_count},
            )
            return cls._result('success', processed, run=run)

        except MalformedFeedPayload as e:
            logger.error(
                "gemman.sync.malformed_payload",
                extra={"sync_run_id": run.pk, "code": e.code, "data": e.data},
            )
            return cls._fail(run, processed, e)
        except TransientFeedError as e:
            logger.warning(
                "gemman.sync.feed_unavailable",
                extra={"sync_run_id": run.pk, "code": e.code, "error": e.message},
            )
            return cls._fail(run, processed, e)
        except PersistenceError as e:
            logger.error(
                "gemman.sync.persistence_failed",
                extra={"sync_run_id": run.pk, "processed": processed, "error": e.message},
            )
            return cls._fail(run, processed, e)
        except Exception as e:
            logger.exception("gemman.sync.unexpected_error", extra={"sync_run_id": run.pk})
            return cls._fail(run, processed, e)

    @classmethod
    def trigger_sync(cls) -> dict:
        """
        Start a sync in a background thread and return immediately.

        Returns:
            {"message": str, "started": True}

        Raises:
            SyncInProgress('SYNC_IN_PROGRESS'): A run is already active;
                no thread is started
        """
        cls._reclaim_stale()
        active = SyncRun.objects.active().first()
        if active is not None:
            logger.warning("gemman.sync.trigger_rejected", extra={"sync_run_id": active.pk})
            raise SyncInProgress('SYNC_IN_PROGRESS', sync_run_id=active.pk)

        thread = threading.Thread(
            target=cls._run_in_thread,
            name='gemman-sync',
            daemon=True,
        )
        thread.start()
        logger.info("gemman.sync.triggered")
        return {'message': 'Sincronização iniciada', 'started': True}

    # ------------------------------------------------------------------
    # Internal
    # ------------------------------------------------------------------

    @classmethod
    def _run_in_thread(cls) -> None:
        close_old_connections()
        try:
            cls.run_sync(trigger=SyncTrigger.MANUAL)
        finally:
            close_old_connections()

    @classmethod
    def _reclaim_stale(cls) -> None:
        """Fail STARTED runs older than SYNC_STALE_AFTER_MINUTES."""
        cutoff = timezone.now() - timedelta(minutes=gemman_settings.SYNC_STALE_AFTER_MINUTES)
        with transaction.atomic():
            for stale in SyncRun.objects.select_for_update().stale(cutoff):
                stale.fail('ABANDONED', 'Sincronização abandonada (processo interrompido)')
                logger.warning("gemman.sync.abandoned", extra={"sync_run_id": stale.pk})

    @classmethod
    def _open_run(cls, trigger: str) -> SyncRun:
        """Reclaim abandoned runs, then claim the single active slot."""
        cls._reclaim_stale()
        try:
            with transaction.atomic():
                return SyncRun.objects.create(
                    status=SyncStatus.STARTED,
                    trigger=trigger,
                    message='Iniciando sincronização...',
                )
        except IntegrityError:
            active = SyncRun.objects.active().first()
            raise SyncInProgress(
                'SYNC_IN_PROGRESS',
                sync_run_id=active.pk if active else None,
            ) from None

    @classmethod
    def _apply_batch(cls, batch: list, run_id: int, number: int) -> tuple[int, int]:
        """
        Upsert one batch atomically.

        Returns:
            (upserted, skipped)

        Raises:
            PersistenceError: The batch was rolled back
        """
        upserted = skipped = 0
        try:
            with transaction.atomic():
                for record in batch:
                    try:
                        attrs = canonicalize(record)
                    except MalformedFeedPayload as e:
                        skipped += 1
                        logger.warning(
                            "gemman.sync.record_skipped",
                            extra={"sync_run_id": run_id, "batch": number, "code": e.code},
                        )
                        continue

                    stock_id = attrs.pop('stock_id')
                    InventoryUnit.objects.update_or_create(stock_id=stock_id, defaults=attrs)
                    upserted += 1
        except DatabaseError as e:
            raise PersistenceError(
                'PERSISTENCE_FAILED',
                f'Falha ao gravar lote {number}: {e}',
                batch=number,
            ) from e
        return upserted, skipped

    @classmethod
    def _fail(cls, run: SyncRun, processed: int, error: Exception) -> dict:
        code = error.code if isinstance(error, FeedError | PersistenceError) else 'UNEXPECTED'
        message = error.message if hasattr(error, 'message') else str(error) or error.__class__.__name__
        try:
            if not run.fail(code, message, processed=processed):
                logger.warning(
                    "gemman.sync.already_finalized",
                    extra={"sync_run_id": run.pk, "status": run.status, "code": run.error_code},
                )
        except DatabaseError:
            logger.exception("gemman.sync.finalize_failed", extra={"sync_run_id": run.pk})
        return cls._result('failure', processed, error, run=run)

    @staticmethod
    def _result(status: str, processed: int, error: Exception | None = None,
                run: SyncRun | None = None) -> dict:
        return {
            'status': status,
            'processed_count': processed,
            'error': (getattr(error, 'message', None) or str(error)) if error else None,
            'code': (getattr(error, 'code', None) or 'UNEXPECTED') if error else None,
            'sync_run_id': run.pk if run else None,
        }
