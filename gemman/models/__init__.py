"""
Gemman Models.

Core models for the stone catalog:
- InventoryUnit: One stone and its lifecycle status
- SyncRun: Audit log of supplier feed syncs
- DocumentSequence: Daily document number counters
"""

from gemman.models.enums import SyncStatus, SyncTrigger, UnitStatus
from gemman.models.sequence import DocumentSequence
from gemman.models.sync_run import SyncRun
from gemman.models.unit import RESTRICTED_FIELDS, InventoryUnit

__all__ = [
    'UnitStatus',
    'SyncStatus',
    'SyncTrigger',
    'InventoryUnit',
    'RESTRICTED_FIELDS',
    'SyncRun',
    'DocumentSequence',
]
