"""
StockRecord model — on-hand quantity cache per SKU.
"""

from django.db import models
from django.db.models import F, Q
from django.utils.translation import gettext_lazy as _


class StockRecordManager(models.Manager):
    """Manager with helper methods for StockRecord queries."""

    def for_skus(self, skus):
        return self.filter(item__sku__in=list(skus))

    def low(self):
        """Records below their minimum threshold."""
        return self.filter(_quantity__lt=F('minimum'))


class StockRecord(models.Model):
    """
    Quantity on hand for one catalog item.

    Performance:
    - _quantity is a cache written only by the snapshot provider's apply
    - The Movement ledger holds the full history of changes
    - Use recalculate() for audit/correction
    """

    item = models.OneToOneField(
        'stockflow.CatalogItem',
        on_delete=models.PROTECT,
        related_name='stock',
        verbose_name=_('Item'),
    )

    _quantity = models.IntegerField(default=0, verbose_name=_('Quantity'))
    minimum = models.PositiveIntegerField(
        default=0,
        verbose_name=_('Minimum'),
        help_text=_('Outbound movements that leave less than this are flagged'),
    )

    updated_at = models.DateTimeField(auto_now=True)

    objects = StockRecordManager()

    class Meta:
        verbose_name = _('Stock Record')
        verbose_name_plural = _('Stock Records')
        ordering = ['item__sku']
        constraints = [
            models.CheckConstraint(
                condition=Q(_quantity__gte=0),
                name='stockflow_quantity_non_negative',
            ),
        ]

    @property
    def quantity(self) -> int:
        """On-hand quantity — O(1) cache read."""
        return self._quantity

    @property
    def sku(self) -> str:
        return self.item.sku

    @property
    def is_low(self) -> bool:
        return self._quantity < self.minimum

    def recalculate(self) -> int:
        """
        Recalculate quantity from the Movement ledger.

        Use for:
        - Integrity audit
        - Correction after detected inconsistency

        Returns:
            New calculated quantity
        """
        import logging

        from django.db.models import Sum
        from django.db.models.functions import Coalesce

        total = self.movements.aggregate(t=Coalesce(Sum('delta'), 0))['t']

        if total != self._quantity:
            old = self._quantity
            self._quantity = total
            self.save(update_fields=['_quantity', 'updated_at'])

            logger = logging.getLogger('stockflow')
            logger.warning(
                f"StockRecord {self.pk} recalculated: {old} → {total} "
                f"(diff: {total - old})"
            )

        return total

    def __str__(self) -> str:
        return f"{self.item.sku}: {self._quantity} (min {self.minimum})"
