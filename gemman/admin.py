"""
Gemman Admin.

- InventoryUnit: descriptive fields editable; lifecycle read-only
  (changes only via catalog.set_status) with a "release" action
- SyncRun: read-only audit trail, never deleted
- DocumentSequence: read-only counters
"""

import logging

from django.contrib import admin
from django.utils.translation import gettext_lazy as _

from gemman.exceptions import GemError
from gemman.models import DocumentSequence, InventoryUnit, SyncRun, UnitStatus

logger = logging.getLogger(__name__)


class ReadOnlyAdmin(admin.ModelAdmin):
    """No add, change or delete. Rows only change through the services."""

    def has_add_permission(self, request):
        return False

    def has_change_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        return False


# =========================================================================
# INVENTORY UNIT ADMIN
# =========================================================================

@admin.register(InventoryUnit)
class InventoryUnitAdmin(admin.ModelAdmin):
    """InventoryUnit admin — lifecycle fields read-only."""

    list_display = ['stock_id', 'shape', 'size', 'color', 'clarity', 'lab',
                    'final_amount', 'status', 'owning_transaction_id', 'updated_at']
    list_filter = ['status', 'shape', 'lab', 'color']
    search_fields = ['stock_id', 'certificate_no', 'owning_transaction_id']
    readonly_fields = ['status', 'owning_transaction_id', 'feed_status', 'created_at', 'updated_at']
    ordering = ['-updated_at']
    actions = ['release_units']

    @admin.action(description=_('Liberar pedras selecionadas'))
    def release_units(self, request, queryset):
        from gemman import catalog

        count = 0
        for unit in queryset.reserved():
            try:
                catalog.set_status(unit.pk, UnitStatus.AVAILABLE)
                count += 1
            except GemError as exc:
                logger.warning("release_units: failed to release %s: %s", unit.stock_id, exc)

        self.message_user(request, _('{count} pedra(s) liberada(s).').format(count=count))


# =========================================================================
# SYNC RUN ADMIN (read-only audit trail)
# =========================================================================

@admin.register(SyncRun)
class SyncRunAdmin(ReadOnlyAdmin):
    """SyncRun admin — read-only. Immutable audit trail."""

    list_display = ['id', 'status', 'trigger', 'processed_count', 'total_count',
                    'skipped_count', 'error_code', 'started_at', 'finished_at']
    list_filter = ['status', 'trigger', 'error_code']
    search_fields = ['message']
    date_hierarchy = 'started_at'


# =========================================================================
# DOCUMENT SEQUENCE ADMIN
# =========================================================================

@admin.register(DocumentSequence)
class DocumentSequenceAdmin(ReadOnlyAdmin):
    """DocumentSequence admin — read-only counters."""

    list_display = ['document_type', 'bucket', 'last_value', 'updated_at']
    list_filter = ['document_type']
    date_hierarchy = 'bucket'
