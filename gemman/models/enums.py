"""
Enums for Gemman models.
"""

from django.db import models
from django.utils.translation import gettext_lazy as _


class UnitStatus(models.TextChoices):
    """
    Unit lifecycle status.

    AVAILABLE is the only status without an owning transaction.
    HELD, MEMO and SOLD always point at the order/shipment/memo
    holding the stone. SOLD may go back to AVAILABLE (deal cancelled).
    """
    AVAILABLE = 'available', _('Disponível')  # Free for sale
    HELD = 'held', _('Reservada')            # Reserved for a customer
    MEMO = 'memo', _('Em Consignação')       # Out on memo
    SOLD = 'sold', _('Vendida')              # Invoiced

    @classmethod
    def reserving(cls) -> list[str]:
        """Statuses that require an owning transaction."""
        return [cls.HELD, cls.MEMO, cls.SOLD]


class SyncStatus(models.TextChoices):
    """SyncRun lifecycle status."""
    STARTED = 'started', _('Em Andamento')
    COMPLETED = 'completed', _('Concluída')
    FAILED = 'failed', _('Falhou')


class SyncTrigger(models.TextChoices):
    """What started a SyncRun."""
    SCHEDULE = 'schedule', _('Agendada')
    MANUAL = 'manual', _('Manual')
    COMMAND = 'command', _('Comando')
