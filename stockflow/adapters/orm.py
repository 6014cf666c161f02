"""
Django Snapshot Provider — catalog, stock and ledger in the project database.

Default provider. Backed by CatalogItem, StockRecord and Movement.

Concurrency:
    - locked() opens transaction.atomic() and select_for_update()s the
      CatalogItem and StockRecord rows for the commit's SKUs; catalog
      rows cover SKUs that have never been stocked
    - apply_deltas() runs under its own atomic block (a savepoint when
      nested in locked()), updates quantities with F() and bulk-creates
      the Movement rows
    - Any DatabaseError rolls everything back and surfaces as StorageError
"""

from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import Iterable, Iterator, Mapping, Sequence

from django.db import DatabaseError, transaction
from django.db.models import F

from stockflow.conf import stockflow_settings
from stockflow.exceptions import StorageError
from stockflow.models.catalog import CatalogItem
from stockflow.models.movement import Movement
from stockflow.models.stock import StockRecord
from stockflow.protocols.snapshot import CatalogEntry, StockLevel
from stockflow.records import AuditEntry

logger = logging.getLogger(__name__)


def _to_stock_level(record: StockRecord) -> StockLevel:
    return StockLevel(sku=record.item.sku, quantity=record.quantity, minimum=record.minimum)


class DjangoSnapshotProvider:
    """SnapshotProvider over the Stockflow models."""

    def _records(self):
        return StockRecord.objects.select_related('item')

    def lookup_catalog(self, sku: str) -> CatalogEntry | None:
        item = CatalogItem.objects.filter(sku=sku, is_active=True).first()
        if item is None:
            return None
        return CatalogEntry(sku=item.sku, name=item.name, category=item.category or None)

    def current_stock(self, sku: str) -> StockLevel | None:
        record = self._records().filter(item__sku=sku).first()
        if record is None:
            return None
        return _to_stock_level(record)

    def is_committed(self, report_id: str) -> bool:
        return Movement.objects.filter(report_id=report_id).exists()

    @contextmanager
    def locked(self, skus: Iterable[str]) -> Iterator[None]:
        try:
            with transaction.atomic():
                self._lock_rows(skus)
                yield
        except DatabaseError as e:
            raise StorageError('STORAGE_FAILURE', error=str(e)) from e

    def _lock_rows(self, skus: Iterable[str]) -> list[int]:
        """
        Row-lock the catalog items and stock records for these SKUs.

        Catalog rows exist even for never-stocked SKUs, so commits touching
        the same SKU always contend on at least one row. Locks are taken in
        pk order to avoid deadlocks between commits.

        Returns:
            pks of the locked catalog items
        """
        skus = list(skus)
        item_pks = list(
            CatalogItem.objects.select_for_update()
            .filter(sku__in=skus)
            .order_by('pk')
            .values_list('pk', flat=True)
        )
        list(
            StockRecord.objects.for_skus(skus)
            .select_for_update()
            .order_by('pk')
            .values_list('pk', flat=True)
        )
        return item_pks

    def apply_deltas(self, deltas: Mapping[str, int],
                     entries: Sequence[AuditEntry]) -> dict[str, StockLevel]:
        try:
            with transaction.atomic():
                records = self._ensure_records(deltas.keys())

                for sku, delta in deltas.items():
                    record = records[sku]
                    if record.quantity + delta < 0:
                        raise StorageError(
                            'NEGATIVE_STOCK',
                            sku=sku,
                            available=record.quantity,
                            delta=delta,
                        )
                    StockRecord.objects.filter(pk=record.pk).update(
                        _quantity=F('_quantity') + delta,
                    )

                Movement.objects.bulk_create([
                    Movement(
                        stock=records[entry.sku],
                        delta=entry.delta,
                        kind=str(entry.kind),
                        report_id=entry.report_id,
                        row=entry.row,
                        username=entry.user,
                        reason=entry.reason or '',
                        condition=entry.condition or '',
                        category=entry.category or '',
                        channel=entry.channel or '',
                        timestamp=entry.timestamp,
                    )
                    for entry in entries
                ])

                updated = self._records().filter(item__sku__in=list(deltas))
                return {record.item.sku: _to_stock_level(record) for record in updated}

        except DatabaseError as e:
            logger.exception("Failed to apply deltas for %d SKU(s)", len(deltas))
            raise StorageError('STORAGE_FAILURE', error=str(e)) from e

    def _ensure_records(self, skus: Iterable[str]) -> dict[str, StockRecord]:
        """Locked StockRecord per SKU, creating empty ones for first-time SKUs."""
        skus = list(skus)
        records = {
            record.item.sku: record
            for record in StockRecord.objects.for_skus(skus).select_related('item').select_for_update()
        }
        missing = [sku for sku in skus if sku not in records]
        if missing:
            items = {item.sku: item for item in CatalogItem.objects.filter(sku__in=missing)}
            for sku in missing:
                if sku not in items:
                    raise StorageError('STORAGE_FAILURE', sku=sku, error='unknown SKU')
                record, _ = StockRecord.objects.get_or_create(
                    item=items[sku],
                    defaults={'minimum': stockflow_settings.DEFAULT_MINIMUM},
                )
                records[sku] = record
        return records
