"""
Django Gemman — Catálogo de Pedras.

Sincronização com o fornecedor, ciclo de vida das pedras e numeração
de notas e memorandos.

Uso:
    from gemman import catalog, GemError

    catalog.run_sync()
    catalog.set_status(pedra.pk, 'memo', 'MEMO-42')
    catalog.issue_number('invoice')  # CD-103A/0504
"""


def __getattr__(name):
    """Lazy import to avoid circular imports during app loading."""
    if name == 'catalog':
        from gemman.service import Catalog
        return Catalog
    elif name == 'GemError':
        from gemman.exceptions import GemError
        return GemError
    elif name == 'InventoryUnit':
        from gemman.models.unit import InventoryUnit
        return InventoryUnit
    elif name == 'SyncRun':
        from gemman.models.sync_run import SyncRun
        return SyncRun
    elif name == 'DocumentSequence':
        from gemman.models.sequence import DocumentSequence
        return DocumentSequence
    elif name == 'UnitStatus':
        from gemman.models.enums import UnitStatus
        return UnitStatus
    elif name == 'SyncStatus':
        from gemman.models.enums import SyncStatus
        return SyncStatus
    elif name == 'SyncScheduler':
        from gemman.scheduler import SyncScheduler
        return SyncScheduler
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")


__all__ = [
    'catalog',
    'GemError',
    'InventoryUnit',
    'SyncRun',
    'DocumentSequence',
    'UnitStatus',
    'SyncStatus',
    'SyncScheduler',
]

__version__ = '0.1.0'
