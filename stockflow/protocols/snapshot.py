"""
Snapshot Provider Protocol — Interface for catalog and stock state.

Stockflow defines this protocol; the host project (or one of the bundled
adapters) implements it. The engine never talks to storage directly.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, ContextManager, Iterable, Mapping, Protocol, Sequence, runtime_checkable

if TYPE_CHECKING:
    from stockflow.records import AuditEntry


@dataclass(frozen=True)
class CatalogEntry:
    """Catalog data for one SKU. Read-only to the engine."""

    sku: str
    name: str
    category: str | None = None


@dataclass(frozen=True)
class StockLevel:
    """On-hand quantity and minimum threshold for one SKU."""

    sku: str
    quantity: int
    minimum: int = 0

    @property
    def is_low(self) -> bool:
        return self.quantity < self.minimum


@runtime_checkable
class SnapshotProvider(Protocol):
    """
    Protocol for catalog and stock access.

    Implementations must guarantee that:
    - apply_deltas is atomic: all deltas and audit entries land, or none do
    - apply_deltas never leaves a quantity below zero
    - locked() serializes callers touching the same SKUs, and reads made
      inside it see the latest committed state
    """

    def lookup_catalog(self, sku: str) -> CatalogEntry | None:
        """
        Resolve a SKU against the catalog.

        Args:
            sku: Product code as submitted

        Returns:
            CatalogEntry or None if the SKU is unknown
        """
        ...

    def current_stock(self, sku: str) -> StockLevel | None:
        """
        Current stock for a SKU.

        Returns:
            StockLevel or None if the SKU has never been stocked
        """
        ...

    def apply_deltas(
        self,
        deltas: Mapping[str, int],
        entries: Sequence[AuditEntry],
    ) -> dict[str, StockLevel]:
        """
        Apply signed quantity changes and record their audit entries.

        Args:
            deltas: SKU -> signed change
            entries: One audit entry per applied line

        Returns:
            Dict[sku, StockLevel] with the new values for every SKU in deltas

        Raises:
            StorageError: Nothing was written
        """
        ...

    def locked(self, skus: Iterable[str]) -> ContextManager[None]:
        """Serialized section for a commit touching these SKUs."""
        ...

    def is_committed(self, report_id: str) -> bool:
        """Whether entries for this validation report were already applied."""
        ...
