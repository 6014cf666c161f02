"""
Tests for the Django snapshot provider and ledger models.
"""

import pytest
from django.db import IntegrityError, transaction

from stockflow import movements
from stockflow.adapters import get_snapshot_provider
from stockflow.adapters.orm import DjangoSnapshotProvider
from stockflow.exceptions import AllLinesRejectedError, StaleReportError, StorageError
from stockflow.models import CatalogItem, LineStatus, Movement, MovementKind, StockRecord
from stockflow.services.commit import Committer
from stockflow.services.validation import Validator


pytestmark = pytest.mark.django_db


@pytest.fixture
def orm():
    return DjangoSnapshotProvider()


class TestLookup:
    """Tests for catalog and stock lookups."""

    def test_lookup_catalog(self, catalog, orm):
        entry = orm.lookup_catalog('SAM-S23-128')

        assert entry.sku == 'SAM-S23-128'
        assert entry.name == 'Samsung Galaxy S23 128GB'
        assert entry.category == 'SU'

    def test_unknown_sku(self, catalog, orm):
        assert orm.lookup_catalog('INVALID-SKU') is None

    def test_inactive_item_not_resolved(self, catalog, orm):
        CatalogItem.objects.filter(sku='APL-MW-BLK').update(is_active=False)

        assert orm.lookup_catalog('APL-MW-BLK') is None

    def test_current_stock(self, catalog, orm):
        level = orm.current_stock('SON-WH1000')

        assert (level.quantity, level.minimum) == (8, 15)
        assert level.is_low

    def test_never_stocked(self, catalog, orm):
        assert orm.lookup_catalog('NEW-ITEM') is not None
        assert orm.current_stock('NEW-ITEM') is None


class TestOrmCommit:
    """Tests for committing through the database."""

    def test_commit_writes_stock_and_ledger(self, catalog, orm, policy, make_lines, user):
        report = Validator(orm, policy).validate(
            make_lines(('SON-WH1000', 5), ('INVALID-SKU', 1)), 'outbound', channel='Amazon',
        )

        result = Committer(orm, policy).commit(report, user)

        record = StockRecord.objects.get(item__sku='SON-WH1000')
        assert record.quantity == 3
        assert result.stock['SON-WH1000'].quantity == 3

        move = Movement.objects.get()
        assert move.delta == -5
        assert move.kind == MovementKind.OUTBOUND
        assert move.username == 'operator'
        assert move.report_id == report.report_id
        assert move.row == 1
        assert move.channel == 'Amazon'
        assert move.stock == record

    def test_first_inbound_creates_record(self, catalog, orm, policy, make_lines, settings):
        settings.STOCKFLOW = {'DEFAULT_MINIMUM': 3}
        report = Validator(orm, policy).validate(
            make_lines(('NEW-ITEM', 12)), 'inbound', category='Parco',
        )

        Committer(orm, policy).commit(report, 'operator')

        record = StockRecord.objects.get(item__sku='NEW-ITEM')
        assert record.quantity == 12
        assert record.minimum == 3
        assert record.movements.count() == 1

    def test_is_committed(self, catalog, orm, policy, make_lines):
        report = Validator(orm, policy).validate(
            make_lines(('SAM-S23-128', 1)), 'inbound', category='SU',
        )
        assert not orm.is_committed(report.report_id)

        Committer(orm, policy).commit(report, 'operator')

        assert orm.is_committed(report.report_id)
        with pytest.raises(StaleReportError):
            Committer(orm, policy).commit(report, 'operator')
        assert StockRecord.objects.get(item__sku='SAM-S23-128').quantity == 46

    def test_revalidation_sees_database(self, catalog, orm, policy, make_lines):
        """Stock changed after validation is picked up at commit."""
        report = Validator(orm, policy).validate(
            make_lines(('APL-IP14P-256', 20)), 'outbound', channel='PNP',
        )
        StockRecord.objects.filter(item__sku='APL-IP14P-256').update(_quantity=10)

        with pytest.raises(AllLinesRejectedError) as exc:
            Committer(orm, policy).commit(report, 'operator')

        assert exc.value.rejected[0].message == 'Insufficient stock (Available: 10, Requested: 20)'
        assert not Movement.objects.exists()

    def test_negative_stock_rolls_back(self, catalog, orm, make_lines):
        """A batch with one impossible delta writes nothing."""
        with pytest.raises(StorageError) as exc:
            orm.apply_deltas({'SAM-S23-128': -5, 'SON-WH1000': -9}, [])

        assert exc.value.code == 'NEGATIVE_STOCK'
        assert StockRecord.objects.get(item__sku='SAM-S23-128').quantity == 45
        assert StockRecord.objects.get(item__sku='SON-WH1000').quantity == 8

    def test_unknown_sku_in_deltas(self, catalog, orm):
        with pytest.raises(StorageError) as exc:
            orm.apply_deltas({'INVALID-SKU': 1}, [])

        assert exc.value.code == 'STORAGE_FAILURE'


class TestConfiguredProvider:
    """Tests for the provider loaded from settings."""

    def test_default_is_orm(self):
        assert isinstance(get_snapshot_provider(), DjangoSnapshotProvider)

    def test_loader_caches(self):
        assert get_snapshot_provider() is get_snapshot_provider()

    def test_memory_provider_from_settings(self, settings):
        from stockflow.adapters import reset_snapshot_provider
        from stockflow.adapters.memory import InMemorySnapshotProvider

        settings.STOCKFLOW = {
            'SNAPSHOT_PROVIDER': 'stockflow.adapters.memory.InMemorySnapshotProvider',
        }
        reset_snapshot_provider()

        assert isinstance(get_snapshot_provider(), InMemorySnapshotProvider)

    def test_bad_path(self, settings):
        from django.core.exceptions import ImproperlyConfigured

        from stockflow.adapters import reset_snapshot_provider

        settings.STOCKFLOW = {'SNAPSHOT_PROVIDER': 'stockflow.adapters.nowhere.Provider'}
        reset_snapshot_provider()

        with pytest.raises(ImproperlyConfigured):
            get_snapshot_provider()

    def test_facade_round_trip(self, catalog, make_lines, user):
        """movements.validate/commit use the configured provider by default."""
        report = movements.validate(
            make_lines(('APL-MW-BLK', 2, 'Customer Return', 'Good')),
            'return',
            channel='Direct Sales',
        )

        result = movements.commit(report, user)

        assert result.stock['APL-MW-BLK'].quantity == 14
        assert Movement.objects.get().kind == MovementKind.RETURN


class TestLedgerModels:
    """Tests for model invariants."""

    def _movement(self, catalog):
        report = movements.validate(
            [movements.lines([{'SKU': 'SAM-S23-128', 'Quantity': 1}])[0]],
            'inbound', category='SU',
        )
        movements.commit(report, 'operator')
        return Movement.objects.get()

    def test_movement_cannot_be_updated(self, catalog):
        move = self._movement(catalog)
        move.delta = 100

        with pytest.raises(ValueError, match='immutable'):
            move.save()

    def test_movement_cannot_be_deleted(self, catalog):
        move = self._movement(catalog)

        with pytest.raises(ValueError, match='immutable'):
            move.delete()

    def test_quantity_cannot_go_negative(self, catalog):
        with pytest.raises(IntegrityError):
            with transaction.atomic():
                StockRecord.objects.filter(item__sku='SAM-S23-128').update(_quantity=-1)

    def test_low_manager(self, catalog):
        skus = set(StockRecord.objects.low().values_list('item__sku', flat=True))

        assert skus == {'SON-WH1000'}

    def test_recalculate_from_ledger(self, catalog):
        record = StockRecord.objects.get(item__sku='SAM-S23-128')
        StockRecord.objects.filter(pk=record.pk).update(_quantity=0)
        self._movement(catalog)
        record.refresh_from_db()
        StockRecord.objects.filter(pk=record.pk).update(_quantity=99)
        record.refresh_from_db()

        assert record.recalculate() == 1
        record.refresh_from_db()
        assert record.quantity == 1

    def test_str(self, catalog):
        record = StockRecord.objects.get(item__sku='SON-WH1000')

        assert str(record) == 'SON-WH1000: 8 (min 15)'


class TestCommitLock:
    """locked() covers every SKU a commit touches."""

    def test_never_stocked_sku_is_locked(self, catalog, orm):
        """Catalog rows are locked even when no StockRecord exists yet."""
        locked = orm._lock_rows(['NEW-ITEM', 'SAM-S23-128'])

        assert sorted(locked) == sorted([catalog['NEW-ITEM'].pk, catalog['SAM-S23-128'].pk])

    def test_commit_locks_before_checking(self, catalog, orm, policy, make_lines):
        """A first inbound commit holds the lock for its SKU while it writes."""
        calls = []
        original = orm._lock_rows

        def spy(skus):
            skus = list(skus)
            calls.append((skus, StockRecord.objects.filter(item__sku__in=skus).count()))
            return original(skus)

        orm._lock_rows = spy
        report = Validator(orm, policy).validate(
            make_lines(('NEW-ITEM', 4)), 'inbound', category='Parco',
        )

        Committer(orm, policy).commit(report, 'operator')

        assert calls == [(['NEW-ITEM'], 0)]
        assert StockRecord.objects.get(item__sku='NEW-ITEM').quantity == 4


class TestProviderParity:
    """Both bundled providers give the same outcome for the same flow."""

    @pytest.fixture(params=['memory', 'orm'])
    def any_provider(self, request, catalog, provider, orm):
        return provider if request.param == 'memory' else orm

    def test_first_stock_uses_default_minimum(self, any_provider, policy, make_lines, settings):
        settings.STOCKFLOW = {'DEFAULT_MINIMUM': 10}
        received = Validator(any_provider, policy).validate(
            make_lines(('NEW-ITEM', 5)), 'inbound', category='Parco',
        )
        Committer(any_provider, policy).commit(received, 'operator')

        report = Validator(any_provider, policy).validate(
            make_lines(('NEW-ITEM', 1)), 'outbound', channel='Amazon',
        )

        assert any_provider.current_stock('NEW-ITEM').minimum == 10
        assert report.lines[0].status == LineStatus.WARNING
        assert report.lines[0].message == 'Will leave low stock (Remaining: 4)'
