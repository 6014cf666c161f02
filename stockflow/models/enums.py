"""
Enums for Stockflow.

Values are the exact strings the UI and audit consumers match on.
"""

from django.db import models
from django.utils.translation import gettext_lazy as _

from stockflow.exceptions import StockflowError


class MovementKind(models.TextChoices):
    """
    Direction of a stock movement.

    INBOUND:  Receipt from a supplier, increases stock.
    OUTBOUND: Dispatch to a sales channel, decreases stock.
    RETURN:   Reversal of a dispatch, increases stock.
    """
    INBOUND = 'inbound', _('Inbound')
    OUTBOUND = 'outbound', _('Outbound')
    RETURN = 'return', _('Return')

    @property
    def delta_sign(self) -> int:
        """+1 for movements that add stock, -1 for movements that remove it."""
        if self is MovementKind.INBOUND or self is MovementKind.RETURN:
            return 1
        if self is MovementKind.OUTBOUND:
            return -1
        raise StockflowError('INVALID_KIND', kind=str(self))

    @classmethod
    def coerce(cls, value) -> 'MovementKind':
        """Accept a member or its string value."""
        try:
            return cls(value)
        except ValueError:
            raise StockflowError('INVALID_KIND', kind=value) from None


class LineStatus(models.TextChoices):
    """Outcome of validating a single movement line."""
    VALID = 'valid', _('Valid')        # Will be applied
    WARNING = 'warning', _('Warning')  # Will be applied, needs attention
    ERROR = 'error', _('Error')        # Never applied
