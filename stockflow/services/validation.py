"""
Movement validation — classify each line of a batch.

Read-only: looks up catalog and stock through the snapshot provider and
never writes. The same batch against the same snapshot always yields the
same statuses and messages.
"""

import logging
from dataclasses import dataclass, field
from typing import Iterable, Sequence

from stockflow.conf import stockflow_settings
from stockflow.exceptions import StockflowError
from stockflow.models.enums import LineStatus, MovementKind
from stockflow.protocols.snapshot import CatalogEntry, SnapshotProvider, StockLevel
from stockflow.records import LineResult, MovementLine, ValidationReport

logger = logging.getLogger('stockflow')

MSG_SKU_NOT_FOUND = "SKU not found in system"
MSG_NEGATIVE_QUANTITY = "Negative quantity not allowed"
MSG_ZERO_QUANTITY = "Zero quantity detected"
MSG_INSUFFICIENT = "Insufficient stock (Available: {available}, Requested: {requested})"
MSG_LOW_STOCK = "Will leave low stock (Remaining: {remaining})"
MSG_DAMAGED = "Damaged items require quality inspection"


@dataclass(frozen=True)
class ValidationPolicy:
    """Tunable parts of validation and commit."""

    default_minimum: int = 0
    damaged_conditions: frozenset[str] = field(default_factory=lambda: frozenset({'damaged'}))
    block_on_warnings: bool = False
    report_ttl_minutes: int = 0
    enforce_context: bool = False
    categories: tuple[str, ...] = ()
    channels: tuple[str, ...] = ()

    @classmethod
    def from_settings(cls) -> 'ValidationPolicy':
        return cls(
            default_minimum=stockflow_settings.DEFAULT_MINIMUM,
            damaged_conditions=frozenset(
                c.strip().lower() for c in stockflow_settings.DAMAGED_CONDITIONS
            ),
            block_on_warnings=stockflow_settings.BLOCK_ON_WARNINGS,
            report_ttl_minutes=stockflow_settings.REPORT_TTL_MINUTES,
            enforce_context=stockflow_settings.ENFORCE_CONTEXT,
            categories=tuple(stockflow_settings.CATEGORIES),
            channels=tuple(stockflow_settings.CHANNELS),
        )

    def is_damaged(self, condition: str | None) -> bool:
        return bool(condition) and condition.strip().lower() in self.damaged_conditions


class Validator:
    """Classifies movement lines against a provider's current snapshot."""

    def __init__(self, provider: SnapshotProvider, policy: ValidationPolicy | None = None):
        self.provider = provider
        self.policy = policy or ValidationPolicy.from_settings()

    def validate(self, lines: Sequence[MovementLine], kind, category: str = '',
                 channel: str = '', reason: str = '') -> ValidationReport:
        """
        Validate a batch.

        Args:
            lines: Movement lines in input order
            kind: MovementKind (or its string value)
            category: Inbound category
            channel: Outbound/return sales channel
            reason: Default return reason for lines without one

        Returns:
            ValidationReport with one LineResult per line, same order

        Raises:
            StockflowError('INVALID_KIND'): Unknown kind
            StockflowError('INVALID_CONTEXT'): Missing or unknown category/channel
        """
        kind = MovementKind.coerce(kind)
        self.check_context(kind, category, channel)

        results = tuple(self.classify_all(lines, kind))
        report = ValidationReport(
            kind=kind,
            lines=results,
            category=category or '',
            channel=channel or '',
            reason=reason or '',
        )
        logger.info(
            "movements.validate",
            extra={
                "report_id": report.report_id,
                "kind": str(kind),
                "lines": len(results),
                **report.counts,
            },
        )
        return report

    def check_context(self, kind: MovementKind, category: str, channel: str) -> None:
        if kind == MovementKind.INBOUND:
            label, value, allowed = 'category', category, self.policy.categories
        else:
            label, value, allowed = 'channel', channel, self.policy.channels

        if not value:
            raise StockflowError('INVALID_CONTEXT', kind=str(kind), field=label)
        if self.policy.enforce_context and allowed and value not in allowed:
            raise StockflowError(
                'INVALID_CONTEXT', kind=str(kind), field=label, value=value,
            )

    def classify_all(self, lines: Iterable[MovementLine], kind: MovementKind) -> Iterable[LineResult]:
        """Classify lines in order, looking each distinct SKU up once."""
        catalog_cache: dict[str, CatalogEntry | None] = {}
        stock_cache: dict[str, StockLevel | None] = {}

        for line in lines:
            if line.sku not in catalog_cache:
                catalog_cache[line.sku] = self.provider.lookup_catalog(line.sku)
            entry = catalog_cache[line.sku]

            stock = None
            if entry is not None:
                if line.sku not in stock_cache:
                    stock_cache[line.sku] = self.provider.current_stock(line.sku)
                stock = stock_cache[line.sku]

            yield self.classify(line, kind, entry, stock)

    def classify(self, line: MovementLine, kind: MovementKind,
                 entry: CatalogEntry | None, stock: StockLevel | None) -> LineResult:
        """Apply the line rules in precedence order; first match wins."""
        if entry is None:
            return LineResult(line, LineStatus.ERROR, MSG_SKU_NOT_FOUND)

        def result(status, message=''):
            return LineResult(line, status, message, catalog=entry, stock=stock)

        if line.quantity < 0:
            return result(LineStatus.ERROR, MSG_NEGATIVE_QUANTITY)

        status, message = LineStatus.VALID, ''

        if line.quantity == 0:
            status, message = LineStatus.WARNING, MSG_ZERO_QUANTITY

        elif kind == MovementKind.OUTBOUND:
            available = stock.quantity if stock else 0
            minimum = stock.minimum if stock else self.policy.default_minimum

            if line.quantity > available:
                return result(
                    LineStatus.ERROR,
                    MSG_INSUFFICIENT.format(available=available, requested=line.quantity),
                )

            remaining = available - line.quantity
            if remaining < minimum:
                status, message = LineStatus.WARNING, MSG_LOW_STOCK.format(remaining=remaining)

        # Damaged returns warn on top of whatever else applied
        if kind == MovementKind.RETURN and self.policy.is_damaged(line.condition):
            message = f"{message}; {MSG_DAMAGED}" if message else MSG_DAMAGED
            status = LineStatus.WARNING

        return result(status, message)
