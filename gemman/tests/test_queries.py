"""
Tests for unit queries (UnitQueries).
"""

from decimal import Decimal

import pytest

from gemman import catalog
from gemman.exceptions import ValidationError
from gemman.models import InventoryUnit, SyncRun, SyncStatus, UnitStatus


pytestmark = pytest.mark.django_db


@pytest.fixture
def stones(db):
    """Five stones with distinct grades."""
    rows = [
        ('A1', 'ROUND', '1.000', 'D', 'IF', 'GIA', '10000'),
        ('A2', 'ROUND', '0.500', 'G', 'VS1', 'IGI', '2000'),
        ('B1', 'OVAL', '1.000', 'H', 'SI1', 'GIA', '4000'),
        ('B2', 'PEAR', '2.010', 'G', 'VS2', 'HRD', '25000'),
        ('C1', 'EMERALD', '0.300', 'F', 'VVS1', 'GIA', '900'),
    ]
    units = []
    for stock_id, shape, size, color, clarity, lab, amount in rows:
        units.append(InventoryUnit.objects.create(
            stock_id=stock_id,
            shape=shape,
            size=Decimal(size),
            color=color,
            clarity=clarity,
            lab=lab,
            final_amount=Decimal(amount),
        ))
    InventoryUnit.objects.filter(stock_id='B2').update(status=UnitStatus.SOLD, owning_transaction_id='INV-1')
    return units


def stock_ids(page):
    return [u.stock_id for u in page['items']]


class TestSearch:
    """Tests for catalog.search()."""

    def test_defaults(self, stones):
        page = catalog.search()

        assert page['total'] == 5
        assert page['pages'] == 1
        assert len(page['items']) == 5

    def test_free_text(self, stones):
        assert set(stock_ids(catalog.search(search='oval'))) == {'B1'}
        assert set(stock_ids(catalog.search(search='gia'))) == {'A1', 'B1', 'C1'}

    def test_status(self, stones):
        assert stock_ids(catalog.search(status='SOLD')) == ['B2']
        assert catalog.search(status='available')['total'] == 4

    def test_invalid_status(self, stones):
        with pytest.raises(ValidationError) as exc:
            catalog.search(status='lost')

        assert exc.value.code == 'INVALID_STATUS'

    def test_carat(self, stones):
        assert set(stock_ids(catalog.search(carat='1'))) == {'A1', 'B1'}

    def test_invalid_carat(self, stones):
        with pytest.raises(ValidationError) as exc:
            catalog.search(carat='heavy')

        assert exc.value.code == 'INVALID_VALUE'

    def test_set_filters(self, stones):
        assert set(stock_ids(catalog.search(colors='G,H'))) == {'A2', 'B1', 'B2'}
        assert set(stock_ids(catalog.search(colors=['G'], shapes=['ROUND']))) == {'A2'}
        assert set(stock_ids(catalog.search(clarities='IF, VVS1'))) == {'A1', 'C1'}

    def test_ids(self, stones):
        wanted = [stones[0].pk, stones[3].pk]

        assert set(stock_ids(catalog.search(ids=','.join(map(str, wanted))))) == {'A1', 'B2'}

    def test_invalid_ids(self, stones):
        with pytest.raises(ValidationError):
            catalog.search(ids='1,x')

    def test_sort(self, stones):
        page = catalog.search(sort_by='final_amount', sort_order='asc')

        assert stock_ids(page) == ['C1', 'A2', 'B1', 'A1', 'B2']

    def test_sort_desc_with_tiebreak(self, stones):
        """Equal sizes fall back to newest first."""
        page = catalog.search(sort_by='size', sort_order='desc')

        assert stock_ids(page) == ['B2', 'B1', 'A1', 'A2', 'C1']

    @pytest.mark.parametrize('kwargs', [
        {'sort_by': 'owning_transaction_id'},
        {'sort_by': 'size', 'sort_order': 'sideways'},
    ])
    def test_invalid_sort(self, stones, kwargs):
        with pytest.raises(ValidationError) as exc:
            catalog.search(**kwargs)

        assert exc.value.code == 'INVALID_SORT'

    def test_pagination(self, stones):
        page = catalog.search(sort_by='stock_id', sort_order='asc', take='2', skip='2')

        assert stock_ids(page) == ['B1', 'B2']
        assert page['total'] == 5
        assert page['pages'] == 3

    def test_skip_past_end(self, stones):
        page = catalog.search(skip=10)

        assert page['items'] == []
        assert page['total'] == 5

    @pytest.mark.parametrize('kwargs', [
        {'take': 0},
        {'take': 101},
        {'take': 'ten'},
        {'skip': -1},
    ])
    def test_invalid_pagination(self, stones, kwargs):
        with pytest.raises(ValidationError) as exc:
            catalog.search(**kwargs)

        assert exc.value.code == 'INVALID_PAGINATION'

    def test_empty_catalog(self):
        page = catalog.search()

        assert page == {'items': [], 'total': 0, 'pages': 0}


class TestSyncStatus:
    """Tests for catalog.sync_status()."""

    def test_no_runs(self, unit):
        assert catalog.sync_status() == {'latest_sync': None, 'total_units': 1}

    def test_latest_run(self, stones):
        SyncRun.objects.create(status=SyncStatus.FAILED, error_code='FEED_UNREACHABLE')
        latest = SyncRun.objects.create(status=SyncStatus.COMPLETED, processed_count=5)

        status = catalog.sync_status()

        assert status['latest_sync'] == latest
        assert status['total_units'] == 5
