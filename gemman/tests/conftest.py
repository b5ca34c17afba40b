"""
Pytest fixtures for Gemman tests.
"""

from datetime import date
from decimal import Decimal

import pytest
from django.contrib.auth import get_user_model
from rest_framework.test import APIClient

from gemman.adapters.feed import reset_feed_client
from gemman.adapters.static import StaticFeedClient
from gemman.models import InventoryUnit, UnitStatus


User = get_user_model()


@pytest.fixture(autouse=True)
def _fresh_feed_client():
    """Never leak the cached feed client between tests."""
    reset_feed_client()
    yield
    reset_feed_client()


def make_record(stock_id, **overrides):
    """Supplier record as the feed sends it."""
    record = {
        'StockID': stock_id,
        'Certificate No': f'GIA{stock_id}',
        'Shape': 'ROUND',
        'Size': '1.01',
        'Color': 'G',
        'Clarity': 'VS1',
        'Cut': 'EX',
        'Polish': 'EX',
        'Sym': 'EX',
        'Floro': 'NON',
        'Lab': 'GIA',
        'RapPrice': '9,800.00',
        'RapAmount': '9898.00',
        'Discount': '-35.5',
        'PricePerCarat': '6322.00',
        'FinalAmount': '6385.22',
        'Measurement': '6.42x6.45x3.98',
        'Depth': '61.8',
        'Table': '57',
        'Video URL': f'https://v360.example.com/{stock_id}',
        'Status': 'Available',
    }
    record.update(overrides)
    return record


@pytest.fixture
def record_factory():
    """Build supplier records: record_factory('TR001', Color='H')."""
    return make_record


@pytest.fixture
def feed():
    """Empty in-memory feed; assign .records or .payload in the test."""
    return StaticFeedClient()


@pytest.fixture
def unit(db):
    """An available stone."""
    return InventoryUnit.objects.create(
        stock_id='TR001',
        certificate_no='GIA2141438171',
        shape='ROUND',
        size=Decimal('1.010'),
        color='G',
        clarity='VS1',
        polish='EX',
        symmetry='EX',
        lab='GIA',
        rap_price=Decimal('9800.00'),
        price_per_carat=Decimal('6322.00'),
        final_amount=Decimal('6385.22'),
    )


@pytest.fixture
def memo_unit(db):
    """A stone out on memo."""
    return InventoryUnit.objects.create(
        stock_id='TR002',
        shape='OVAL',
        size=Decimal('0.700'),
        color='F',
        clarity='VVS2',
        polish='VG',
        symmetry='VG',
        lab='IGI',
        price_per_carat=Decimal('3100.00'),
        final_amount=Decimal('2170.00'),
        status=UnitStatus.MEMO,
        owning_transaction_id='MEMO-7',
    )


@pytest.fixture
def unit_fields():
    """Minimal valid payload for create_unit()."""
    return {
        'stock_id': 'MAN-1',
        'shape': 'PEAR',
        'size': '0.52',
        'color': 'E',
        'clarity': 'SI1',
        'polish': 'VG',
        'symmetry': 'G',
        'lab': 'GIA',
        'price_per_carat': '2500',
        'final_amount': '1300',
    }


@pytest.fixture
def user(db):
    """Create a regular (non-staff) user."""
    return User.objects.create_user(username='vendedor', password='testpass123')


@pytest.fixture
def staff_user(db):
    """Create a staff user."""
    return User.objects.create_user(username='gerente', password='testpass123', is_staff=True)


@pytest.fixture
def api_client():
    """Unauthenticated API client."""
    return APIClient()


@pytest.fixture
def user_client(user):
    client = APIClient()
    client.force_authenticate(user=user)
    return client


@pytest.fixture
def staff_client(staff_user):
    client = APIClient()
    client.force_authenticate(user=staff_user)
    return client


@pytest.fixture
def day():
    """A fixed document date (5 April)."""
    return date(2025, 4, 5)
