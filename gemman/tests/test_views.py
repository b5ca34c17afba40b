"""
Tests for the Gemman API.
"""

from decimal import Decimal

import pytest

from gemman.models import InventoryUnit, SyncRun, SyncStatus, UnitStatus


pytestmark = pytest.mark.django_db

UNITS = '/api/catalog/units/'


def unit_url(unit, suffix=''):
    return f'{UNITS}{unit.pk}/{suffix}'


class TestPermissions:
    """Reads need login, writes need staff."""

    def test_anonymous_is_rejected(self, api_client, unit):
        assert api_client.get(UNITS).status_code == 401
        assert api_client.get('/api/catalog/sync/status/').status_code == 401

    def test_user_can_read(self, user_client, unit):
        assert user_client.get(UNITS).status_code == 200
        assert user_client.get(unit_url(unit)).status_code == 200

    @pytest.mark.parametrize('method, path, body', [
        ('post', UNITS, {'stock_id': 'X'}),
        ('patch', None, {'color': 'D'}),
        ('delete', None, None),
        ('post', 'status/', {'status': 'held', 'owning_transaction_id': 'ORD-1'}),
        ('post', f'{UNITS}release/', {'owning_transaction_id': 'MEMO-7'}),
    ])
    def test_user_cannot_write(self, user_client, unit, method, path, body):
        if path is None:
            url = unit_url(unit)
        elif path.startswith('/'):
            url = path
        else:
            url = unit_url(unit, path)

        response = getattr(user_client, method)(url, body, format='json')

        assert response.status_code == 403
        unit.refresh_from_db()
        assert unit.color == 'G'
        assert unit.status == UnitStatus.AVAILABLE

    def test_user_cannot_trigger_sync(self, user_client):
        assert user_client.post('/api/catalog/sync/').status_code == 403


class TestUnitList:
    """GET units/"""

    def test_list_shape(self, staff_client, unit, memo_unit):
        response = staff_client.get(UNITS)

        assert response.status_code == 200
        assert response.data['total'] == 2
        assert response.data['pages'] == 1
        assert {u['stock_id'] for u in response.data['items']} == {'TR001', 'TR002'}

    def test_query_params(self, staff_client, unit, memo_unit):
        response = staff_client.get(UNITS, {
            'status': 'memo',
            'colors': 'F,G',
            'sortBy': 'final_amount',
            'sortOrder': 'asc',
            'take': '5',
            'skip': '0',
        })

        assert response.status_code == 200
        assert [u['stock_id'] for u in response.data['items']] == ['TR002']

    def test_restricted_fields_hidden_from_non_staff(self, user_client, memo_unit):
        item = user_client.get(UNITS).data['items'][0]

        assert 'owning_transaction_id' not in item
        assert 'rap_price' not in item
        assert 'discount' not in item
        assert item['status'] == UnitStatus.MEMO

    def test_restricted_fields_shown_to_staff(self, staff_client, memo_unit):
        item = staff_client.get(UNITS).data['items'][0]

        assert item['owning_transaction_id'] == 'MEMO-7'
        assert 'rap_price' in item

    def test_invalid_param(self, staff_client, unit):
        response = staff_client.get(UNITS, {'sortBy': 'password'})

        assert response.status_code == 400
        assert response.data['code'] == 'INVALID_SORT'
        assert 'error' in response.data
        assert 'data' in response.data


class TestUnitDetail:
    """units/<pk>/"""

    def test_retrieve(self, user_client, unit):
        response = user_client.get(unit_url(unit))

        assert response.status_code == 200
        assert response.data['stock_id'] == 'TR001'

    def test_retrieve_unknown(self, user_client):
        response = user_client.get(f'{UNITS}999/')

        assert response.status_code == 404
        assert response.data['code'] == 'UNIT_NOT_FOUND'

    def test_create(self, staff_client, unit_fields):
        response = staff_client.post(UNITS, unit_fields, format='json')

        assert response.status_code == 201
        assert response.data['stock_id'] == 'MAN-1'
        assert response.data['status'] == UnitStatus.AVAILABLE
        assert InventoryUnit.objects.filter(stock_id='MAN-1').exists()

    def test_create_missing_field(self, staff_client):
        response = staff_client.post(UNITS, {'stock_id': 'X'}, format='json')

        assert response.status_code == 400
        assert response.data['code'] == 'MISSING_FIELD'

    def test_create_duplicate(self, staff_client, unit, unit_fields):
        unit_fields['stock_id'] = unit.stock_id

        response = staff_client.post(UNITS, unit_fields, format='json')

        assert response.status_code == 409
        assert response.data['code'] == 'DUPLICATE_STOCK_ID'

    def test_patch(self, staff_client, unit):
        response = staff_client.patch(unit_url(unit), {'color': 'D', 'final_amount': '7100.5'}, format='json')

        assert response.status_code == 200
        unit.refresh_from_db()
        assert unit.color == 'D'
        assert unit.final_amount == Decimal('7100.50')

    def test_create_rejects_list_value(self, staff_client, unit_fields):
        unit_fields['color'] = ['E', 'F']

        response = staff_client.post(UNITS, unit_fields, format='json')

        assert response.status_code == 400
        assert response.data['code'] == 'INVALID_VALUE'
        assert response.data['data']['field'] == 'color'
        assert not InventoryUnit.objects.exists()

    def test_patch_rejects_object_value(self, staff_client, unit):
        response = staff_client.patch(unit_url(unit), {'shape': {'x': 1}}, format='json')

        assert response.status_code == 400
        assert response.data['code'] == 'INVALID_VALUE'
        unit.refresh_from_db()
        assert unit.shape == 'ROUND'

    def test_patch_rejects_oversized_number(self, staff_client, unit):
        response = staff_client.patch(unit_url(unit), {'size': '123456.5'}, format='json')

        assert response.status_code == 400
        assert response.data['data']['field'] == 'size'

    def test_patch_lifecycle(self, staff_client, unit):
        response = staff_client.patch(
            unit_url(unit), {'status': 'held', 'owning_transaction_id': 'SHIP-4'}, format='json',
        )

        assert response.status_code == 200
        assert response.data['owning_transaction_id'] == 'SHIP-4'

    def test_delete(self, staff_client, unit):
        response = staff_client.delete(unit_url(unit))

        assert response.status_code == 204
        assert not InventoryUnit.objects.exists()

    def test_delete_unknown(self, staff_client):
        assert staff_client.delete(f'{UNITS}999/').status_code == 404


class TestUnitStatus:
    """POST units/<pk>/status/"""

    def test_transition(self, staff_client, unit):
        response = staff_client.post(
            unit_url(unit, 'status/'), {'status': 'memo', 'owning_transaction_id': 'MEMO-3'}, format='json',
        )

        assert response.status_code == 200
        assert response.data['status'] == UnitStatus.MEMO
        unit.refresh_from_db()
        assert unit.owning_transaction_id == 'MEMO-3'

    def test_release(self, staff_client, memo_unit):
        response = staff_client.post(unit_url(memo_unit, 'status/'), {'status': 'available'}, format='json')

        assert response.status_code == 200
        assert response.data['owning_transaction_id'] is None

    def test_owner_required(self, staff_client, unit):
        response = staff_client.post(unit_url(unit, 'status/'), {'status': 'sold'}, format='json')

        assert response.status_code == 400
        assert response.data['code'] == 'OWNER_REQUIRED'

    def test_owner_too_long(self, staff_client, unit):
        response = staff_client.post(
            unit_url(unit, 'status/'), {'status': 'held', 'owning_transaction_id': 'O' * 65}, format='json',
        )

        assert response.status_code == 400
        assert response.data['code'] == 'INVALID_VALUE'
        unit.refresh_from_db()
        assert unit.status == UnitStatus.AVAILABLE

    def test_missing_status(self, staff_client, unit):
        response = staff_client.post(unit_url(unit, 'status/'), {}, format='json')

        assert response.status_code == 400
        assert response.data['code'] == 'MISSING_FIELD'


class TestUnitRelease:
    """POST units/release/"""

    def test_releases_transaction(self, staff_client, unit, memo_unit):
        response = staff_client.post(f'{UNITS}release/', {'owning_transaction_id': 'MEMO-7'}, format='json')

        assert response.status_code == 200
        assert response.data['released'] == 1
        assert response.data['items'][0]['stock_id'] == 'TR002'
        memo_unit.refresh_from_db()
        assert memo_unit.status == UnitStatus.AVAILABLE
        assert memo_unit.owning_transaction_id is None

    def test_missing_transaction(self, staff_client, memo_unit):
        response = staff_client.post(f'{UNITS}release/', {}, format='json')

        assert response.status_code == 400
        assert response.data['code'] == 'OWNER_REQUIRED'


class TestSyncEndpoints:
    """sync/ and sync/status/"""

    def test_trigger(self, staff_client, monkeypatch):
        monkeypatch.setattr(
            'gemman.services.sync.CatalogSync.trigger_sync',
            classmethod(lambda cls: {'message': 'Sincronização iniciada', 'started': True}),
        )

        response = staff_client.post('/api/catalog/sync/')

        assert response.status_code == 202
        assert response.data == {'message': 'Sincronização iniciada', 'started': True}

    def test_trigger_while_running(self, staff_client):
        active = SyncRun.objects.create(status=SyncStatus.STARTED)

        response = staff_client.post('/api/catalog/sync/')

        assert response.status_code == 409
        assert response.data['code'] == 'SYNC_IN_PROGRESS'
        assert response.data['data'] == {'sync_run_id': active.pk}
        assert SyncRun.objects.count() == 1

    def test_status(self, user_client, unit):
        run = SyncRun.objects.create(status=SyncStatus.COMPLETED, processed_count=1, total_count=1)

        response = user_client.get('/api/catalog/sync/status/')

        assert response.status_code == 200
        assert response.data['total_units'] == 1
        assert response.data['latest_sync']['id'] == run.pk
        assert response.data['latest_sync']['status'] == SyncStatus.COMPLETED

    def test_status_without_runs(self, user_client):
        response = user_client.get('/api/catalog/sync/status/')

        assert response.data == {'latest_sync': None, 'total_units': 0}
