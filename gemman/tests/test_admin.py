"""
Tests for Gemman admin.
"""

import pytest
from django.contrib import admin

from gemman.models import DocumentSequence, InventoryUnit, SyncRun, UnitStatus


pytestmark = pytest.mark.django_db


class TestAdminRegistration:

    @pytest.mark.parametrize('model', [InventoryUnit, SyncRun, DocumentSequence])
    def test_registered(self, model):
        assert admin.site.is_registered(model)

    def test_sync_runs_cannot_be_deleted(self, rf, staff_user):
        request = rf.get('/')
        request.user = staff_user
        model_admin = admin.site._registry[SyncRun]

        assert not model_admin.has_delete_permission(request)
        assert not model_admin.has_change_permission(request)


class TestInventoryUnitAdmin:

    def test_changelist(self, admin_client, unit, memo_unit):
        response = admin_client.get('/admin/gemman/inventoryunit/')

        assert response.status_code == 200
        assert b'TR002' in response.content

    def test_release_action(self, rf, staff_user, unit, memo_unit, monkeypatch):
        request = rf.post('/')
        request.user = staff_user
        model_admin = admin.site._registry[InventoryUnit]
        monkeypatch.setattr(model_admin, 'message_user', lambda request, message: None)

        model_admin.release_units(request, InventoryUnit.objects.all())

        memo_unit.refresh_from_db()
        assert memo_unit.status == UnitStatus.AVAILABLE
        assert memo_unit.owning_transaction_id is None
