"""
SyncRun model — Audit log of catalog sync executions.
"""

from django.db import models
from django.db.models import Q
from django.utils import timezone
from django.utils.translation import gettext_lazy as _

from gemman.models.enums import SyncStatus, SyncTrigger


class SyncRunQuerySet(models.QuerySet):

    def active(self):
        return self.filter(status=SyncStatus.STARTED)

    def stale(self, older_than):
        """STARTED runs whose process most likely died."""
        return self.active().filter(started_at__lt=older_than)

    def latest_run(self):
        return self.order_by('-started_at', '-pk').first()


class SyncRun(models.Model):
    """
    One execution of the catalog sync.

    LIFECYCLE:

        STARTED ──► COMPLETED
           │
           └──────► FAILED

    Created at run start, updated after each batch, finalized once.
    Never deleted.

    At most one run may be STARTED at any time (partial unique
    constraint). A second insert fails with IntegrityError, which the
    sync engine reports as SYNC_IN_PROGRESS.
    """

    status = models.CharField(
        max_length=20,
        choices=SyncStatus.choices,
        default=SyncStatus.STARTED,
        db_index=True,
        verbose_name=_('Status'),
    )
    trigger = models.CharField(
        max_length=20,
        choices=SyncTrigger.choices,
        default=SyncTrigger.MANUAL,
        verbose_name=_('Origem'),
    )
    message = models.TextField(blank=True, default='', verbose_name=_('Mensagem'))
    error_code = models.CharField(
        max_length=40,
        blank=True,
        default='',
        verbose_name=_('Código do Erro'),
        help_text=_('Vazio quando não houve falha'),
    )
    processed_count = models.PositiveIntegerField(default=0, verbose_name=_('Processadas'))
    total_count = models.PositiveIntegerField(default=0, verbose_name=_('Total no Fornecedor'))
    skipped_count = models.PositiveIntegerField(default=0, verbose_name=_('Ignoradas'))

    started_at = models.DateTimeField(default=timezone.now, db_index=True, verbose_name=_('Início'))
    finished_at = models.DateTimeField(null=True, blank=True, verbose_name=_('Fim'))

    objects = SyncRunQuerySet.as_manager()

    class Meta:
        verbose_name = _('Sincronização')
        verbose_name_plural = _('Sincronizações')
        ordering = ['-started_at']
        constraints = [
            models.UniqueConstraint(
                fields=['status'],
                condition=Q(status=SyncStatus.STARTED),
                name='single_active_sync_run',
            ),
        ]

    def progress(self, processed: int, message: str) -> None:
        """Record batch progress while the run is still STARTED."""
        self.processed_count = processed
        self.message = message
        SyncRun.objects.filter(pk=self.pk, status=SyncStatus.STARTED).update(
            processed_count=processed, message=message,
        )

    def complete(self, processed: int, message: str) -> bool:
        """Mark COMPLETED. False if the run was already finalized elsewhere."""
        return self._finalize(status=SyncStatus.COMPLETED, processed_count=processed, message=message)

    def fail(self, code: str, message: str, processed: int | None = None) -> bool:
        """Mark FAILED. False if the run was already finalized elsewhere."""
        values = {'status': SyncStatus.FAILED, 'error_code': code, 'message': message}
        if processed is not None:
            values['processed_count'] = processed
        return self._finalize(**values)

    def _finalize(self, **values) -> bool:
        # Conditional on STARTED: a run reclaimed as abandoned keeps its FAILED row
        values['finished_at'] = timezone.now()
        updated = SyncRun.objects.filter(pk=self.pk, status=SyncStatus.STARTED).update(**values)
        if not updated:
            self.refresh_from_db()
            return False
        for name, value in values.items():
            setattr(self, name, value)
        return True

    def __str__(self) -> str:
        return f"sync:{self.pk} {self.get_status_display()} ({self.processed_count})"
