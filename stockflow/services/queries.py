"""
Stock queries — read-only operations over the Django ledger.

All methods are classmethods and use no locking.
"""

from django.db.models import Count, Sum
from django.db.models.functions import Coalesce
from django.utils import timezone

from stockflow.models.enums import MovementKind
from stockflow.models.movement import Movement
from stockflow.models.stock import StockRecord
from stockflow.protocols.snapshot import StockLevel


class StockQueries:
    """Read-only stock query methods."""

    @classmethod
    def low_stock(cls, category: str | None = None) -> list[StockLevel]:
        """
        Stock records below their minimum threshold.

        Args:
            category: Restrict to one catalog category (None = all)

        Returns:
            StockLevels ordered by how far below minimum they are
        """
        qs = StockRecord.objects.low().select_related('item').filter(item__is_active=True)
        if category:
            qs = qs.filter(item__category=category)

        levels = [
            StockLevel(sku=record.item.sku, quantity=record.quantity, minimum=record.minimum)
            for record in qs
        ]
        return sorted(levels, key=lambda level: (level.quantity - level.minimum, level.sku))

    @classmethod
    def recent_movements(cls, limit: int = 10, kind=None):
        """Latest ledger rows, newest first."""
        qs = Movement.objects.select_related('stock__item').order_by('-timestamp', '-pk')
        if kind is not None:
            qs = qs.filter(kind=MovementKind.coerce(kind))
        return qs[:limit]

    @classmethod
    def summary(cls) -> dict[str, int]:
        """
        Dashboard totals.

        Returns:
            Dict with skus, units, low_stock and movements_today
        """
        totals = StockRecord.objects.filter(item__is_active=True).aggregate(
            skus=Count('pk'),
            units=Coalesce(Sum('_quantity'), 0),
        )
        return {
            'skus': totals['skus'],
            'units': totals['units'],
            'low_stock': StockRecord.objects.low().filter(item__is_active=True).count(),
            'movements_today': Movement.objects.filter(
                timestamp__date=timezone.localdate(),
            ).count(),
        }
