"""
Gemman serializers — output representation only.

Input is validated by the services (gemman.services), so the views
hand raw request data to them and use these serializers to render
the result.
"""

from rest_framework import serializers

from gemman.models import RESTRICTED_FIELDS, InventoryUnit, SyncRun


class InventoryUnitSerializer(serializers.ModelSerializer):
    """
    Unit representation.

    Restricted cost fields are dropped unless the request user is staff
    (or no request is in the context, e.g. internal use).
    """

    class Meta:
        model = InventoryUnit
        fields = '__all__'

    def to_representation(self, instance):
        data = super().to_representation(instance)
        request = self.context.get('request')
        if request is not None and not getattr(request.user, 'is_staff', False):
            for name in RESTRICTED_FIELDS:
                data.pop(name, None)
        return data


class SyncRunSerializer(serializers.ModelSerializer):
    """Sync run audit entry."""

    class Meta:
        model = SyncRun
        fields = [
            'id', 'status', 'trigger', 'message', 'error_code',
            'processed_count', 'total_count', 'skipped_count',
            'started_at', 'finished_at',
        ]
        read_only_fields = fields
