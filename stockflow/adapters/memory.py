"""
In-memory Snapshot Provider — process-local catalog, stock and ledger.

This adapter implements the SnapshotProvider protocol with plain dicts
guarded by a re-entrant lock. Suitable for:

- Unit tests that don't need a database
- Local development and demos
- Hosts that keep stock in memory and persist elsewhere

Usage in settings.py:
    STOCKFLOW = {
        "SNAPSHOT_PROVIDER": "stockflow.adapters.memory.InMemorySnapshotProvider",
    }

WARNING: State lives in one process. Two workers each get their own copy.
"""

from __future__ import annotations

import threading
from contextlib import contextmanager
from typing import Iterable, Iterator, Mapping, Sequence

from stockflow.conf import stockflow_settings
from stockflow.exceptions import StorageError
from stockflow.protocols.snapshot import CatalogEntry, StockLevel
from stockflow.records import AuditEntry


class InMemorySnapshotProvider:
    """
    Dict-backed provider.

    apply_deltas computes the new stock table aside and swaps it in under
    the lock, so readers see either the old table or the new one.
    """

    def __init__(self):
        self._lock = threading.RLock()
        self._catalog: dict[str, CatalogEntry] = {}
        self._stock: dict[str, StockLevel] = {}
        self._audit: list[AuditEntry] = []
        self._reports: set[str] = set()

    def add_product(self, sku: str, name: str | None = None, category: str | None = None,
                    quantity: int = 0, minimum: int = 0) -> CatalogEntry:
        """Register a SKU with its opening stock."""
        if quantity < 0:
            raise ValueError("Opening quantity cannot be negative")
        entry = CatalogEntry(sku=sku, name=name or sku, category=category)
        with self._lock:
            self._catalog[sku] = entry
            self._stock = {**self._stock, sku: StockLevel(sku, quantity, minimum)}
        return entry

    def add_catalog_entry(self, sku: str, name: str | None = None,
                          category: str | None = None) -> CatalogEntry:
        """Register a SKU that has never been stocked."""
        entry = CatalogEntry(sku=sku, name=name or sku, category=category)
        with self._lock:
            self._catalog[sku] = entry
        return entry

    # ── SnapshotProvider ─────────────────────────────────────────────

    def lookup_catalog(self, sku: str) -> CatalogEntry | None:
        return self._catalog.get(sku)

    def current_stock(self, sku: str) -> StockLevel | None:
        return self._stock.get(sku)

    @contextmanager
    def locked(self, skus: Iterable[str]) -> Iterator[None]:
        with self._lock:
            yield

    def is_committed(self, report_id: str) -> bool:
        return report_id in self._reports

    def apply_deltas(self, deltas: Mapping[str, int],
                     entries: Sequence[AuditEntry]) -> dict[str, StockLevel]:
        with self._lock:
            table = dict(self._stock)
            updated: dict[str, StockLevel] = {}

            for sku, delta in deltas.items():
                if sku not in self._catalog:
                    raise StorageError('STORAGE_FAILURE', sku=sku)
                current = table.get(sku) or StockLevel(sku, 0, stockflow_settings.DEFAULT_MINIMUM)
                new_quantity = current.quantity + delta
                if new_quantity < 0:
                    raise StorageError(
                        'NEGATIVE_STOCK',
                        sku=sku,
                        available=current.quantity,
                        delta=delta,
                    )
                updated[sku] = StockLevel(sku, new_quantity, current.minimum)

            table.update(updated)
            self._stock = table
            self._audit.extend(entries)
            self._reports.update(entry.report_id for entry in entries)
            return updated

    # ── Inspection ───────────────────────────────────────────────────

    def stock_levels(self) -> dict[str, StockLevel]:
        """Copy of the current stock table."""
        return dict(self._stock)

    @property
    def audit_log(self) -> list[AuditEntry]:
        """Copy of every audit entry applied so far, oldest first."""
        with self._lock:
            return list(self._audit)
