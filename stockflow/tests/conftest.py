"""
Pytest fixtures for Stockflow tests.
"""

import pytest
from django.contrib.auth import get_user_model

from stockflow.adapters import reset_snapshot_provider
from stockflow.adapters.memory import InMemorySnapshotProvider
from stockflow.models import CatalogItem, StockRecord
from stockflow.records import MovementLine
from stockflow.services.validation import ValidationPolicy


User = get_user_model()


@pytest.fixture(autouse=True)
def _fresh_provider():
    """Each test loads the configured provider from scratch."""
    reset_snapshot_provider()
    yield
    reset_snapshot_provider()


@pytest.fixture
def policy():
    """Default policy without context enforcement."""
    return ValidationPolicy()


@pytest.fixture
def provider():
    """In-memory provider seeded with the dashboard's products."""
    p = InMemorySnapshotProvider()
    p.add_product('SAM-S23-128', 'Samsung Galaxy S23 128GB', 'SU', quantity=45, minimum=10)
    p.add_product('APL-IP14P-256', 'iPhone 14 Pro 256GB', 'YA', quantity=25, minimum=5)
    p.add_product('SON-WH1000', 'Sony WH-1000XM5', 'SU', quantity=8, minimum=15)
    p.add_product('APL-MW-BLK', 'Apple Magic Mouse', 'PNP', quantity=12, minimum=2)
    p.add_catalog_entry('NEW-ITEM', 'Brand New Item', 'Parco')
    return p


@pytest.fixture
def make_lines():
    """Build MovementLines numbered 1..N from (sku, quantity[, reason, condition]) tuples."""
    def _make(*rows):
        return [
            MovementLine(row, *values)
            for row, values in enumerate(rows, start=1)
        ]
    return _make


@pytest.fixture
def user(db):
    """Create a test user."""
    return User.objects.create_user(
        username='operator',
        password='testpass123'
    )


@pytest.fixture
def catalog(db):
    """Catalog items and stock records mirroring the in-memory provider."""
    rows = [
        ('SAM-S23-128', 'Samsung Galaxy S23 128GB', 'SU', 45, 10),
        ('APL-IP14P-256', 'iPhone 14 Pro 256GB', 'YA', 25, 5),
        ('SON-WH1000', 'Sony WH-1000XM5', 'SU', 8, 15),
        ('APL-MW-BLK', 'Apple Magic Mouse', 'PNP', 12, 2),
    ]
    items = {}
    for sku, name, category, quantity, minimum in rows:
        item = CatalogItem.objects.create(sku=sku, name=name, category=category)
        StockRecord.objects.create(item=item, _quantity=quantity, minimum=minimum)
        items[sku] = item
    items['NEW-ITEM'] = CatalogItem.objects.create(
        sku='NEW-ITEM', name='Brand New Item', category='Parco',
    )
    return items
