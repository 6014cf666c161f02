"""
Movement model — Immutable ledger of committed movement lines.
"""

from django.db import models
from django.utils import timezone
from django.utils.translation import gettext_lazy as _

from stockflow.models.enums import MovementKind

REASON_MAX_LENGTH = 255
CONDITION_MAX_LENGTH = 64


class Movement(models.Model):
    """
    Immutable audit record of one applied line.

    Rules:
    - NEVER update() or delete()
    - Corrections are new Movements with inverse delta
    - Written together with the StockRecord change, in one transaction
    """

    stock = models.ForeignKey(
        'stockflow.StockRecord',
        on_delete=models.PROTECT,
        related_name='movements',
        verbose_name=_('Stock Record'),
    )

    delta = models.IntegerField(
        verbose_name=_('Delta'),
        help_text=_('Positive = in, Negative = out'),
    )
    kind = models.CharField(
        max_length=16,
        choices=MovementKind.choices,
        verbose_name=_('Kind'),
    )

    # Originating validation report and row
    report_id = models.CharField(max_length=32, db_index=True, verbose_name=_('Report'))
    row = models.PositiveIntegerField(verbose_name=_('Row'))

    username = models.CharField(max_length=150, verbose_name=_('User'))
    reason = models.CharField(max_length=REASON_MAX_LENGTH, blank=True, default='', verbose_name=_('Reason'))
    condition = models.CharField(max_length=CONDITION_MAX_LENGTH, blank=True, default='', verbose_name=_('Condition'))
    category = models.CharField(max_length=64, blank=True, default='', verbose_name=_('Category'))
    channel = models.CharField(max_length=64, blank=True, default='', verbose_name=_('Channel'))

    timestamp = models.DateTimeField(default=timezone.now, db_index=True, verbose_name=_('Timestamp'))

    class Meta:
        verbose_name = _('Movement')
        verbose_name_plural = _('Movements')
        ordering = ['timestamp', 'report_id', 'row']
        indexes = [
            models.Index(fields=['stock', 'timestamp'], name='stockflow_mov_stock_ts'),
            models.Index(fields=['kind', 'timestamp'], name='stockflow_mov_kind_ts'),
        ]

    def save(self, *args, **kwargs):
        if self.pk:
            raise ValueError(
                "Movements are immutable. "
                "To correct one, commit a new movement with the inverse delta."
            )
        super().save(*args, **kwargs)

    def delete(self, *args, **kwargs):
        raise ValueError(
            "Movements are immutable. "
            "To reverse one, commit a new movement with the inverse delta."
        )

    def __str__(self) -> str:
        signal = '+' if self.delta > 0 else ''
        return f"{signal}{self.delta} | {self.kind} | row {self.row}"
