"""
Value objects passed between callers and the engine.

All of them are frozen: a report or commit result never changes after it
is produced. The engine holds no session state; these objects are the
whole conversation between validate() and commit().
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from django.utils import timezone

from stockflow.models.enums import LineStatus, MovementKind
from stockflow.protocols.snapshot import CatalogEntry, StockLevel


def _new_report_id() -> str:
    return uuid.uuid4().hex


@dataclass(frozen=True)
class MovementLine:
    """One row of an uploaded batch, as submitted."""

    row: int
    sku: str
    quantity: int
    reason: str | None = None
    condition: str | None = None

    def as_dict(self) -> dict[str, Any]:
        return {
            'row': self.row,
            'sku': self.sku,
            'quantity': self.quantity,
            'reason': self.reason,
            'condition': self.condition,
        }


@dataclass(frozen=True)
class LineResult:
    """Validation outcome for one MovementLine."""

    line: MovementLine
    status: LineStatus
    message: str = ''
    catalog: CatalogEntry | None = None
    stock: StockLevel | None = None

    @property
    def row(self) -> int:
        return self.line.row

    @property
    def sku(self) -> str:
        return self.line.sku

    @property
    def is_applicable(self) -> bool:
        """Valid and warning lines are applied on commit; errors never are."""
        return self.status != LineStatus.ERROR

    def as_dict(self) -> dict[str, Any]:
        return {
            **self.line.as_dict(),
            'product': self.catalog.name if self.catalog else None,
            'available': self.stock.quantity if self.stock else None,
            'status': str(self.status),
            'message': self.message,
        }


@dataclass(frozen=True)
class ValidationReport:
    """
    Ordered line results for one batch, plus the context they were
    validated against.

    lines has exactly one entry per input line, in input order.
    """

    kind: MovementKind
    lines: tuple[LineResult, ...]
    category: str = ''
    channel: str = ''
    reason: str = ''
    report_id: str = field(default_factory=_new_report_id)
    created_at: datetime = field(default_factory=timezone.now)

    def _count(self, status: LineStatus) -> int:
        return sum(1 for result in self.lines if result.status == status)

    @property
    def valid_count(self) -> int:
        return self._count(LineStatus.VALID)

    @property
    def warning_count(self) -> int:
        return self._count(LineStatus.WARNING)

    @property
    def error_count(self) -> int:
        return self._count(LineStatus.ERROR)

    @property
    def counts(self) -> dict[str, int]:
        return {
            'valid': self.valid_count,
            'warning': self.warning_count,
            'error': self.error_count,
        }

    @property
    def has_errors(self) -> bool:
        return self.error_count > 0

    @property
    def applicable_lines(self) -> tuple[LineResult, ...]:
        return tuple(result for result in self.lines if result.is_applicable)

    def as_dict(self) -> dict[str, Any]:
        return {
            'report_id': self.report_id,
            'kind': str(self.kind),
            'category': self.category,
            'channel': self.channel,
            'reason': self.reason,
            'created_at': self.created_at.isoformat(),
            'counts': self.counts,
            'lines': [result.as_dict() for result in self.lines],
        }


@dataclass(frozen=True)
class AuditEntry:
    """Ledger record for one applied line."""

    timestamp: datetime
    user: str
    sku: str
    delta: int
    kind: MovementKind
    report_id: str
    row: int
    reason: str = ''
    condition: str = ''
    category: str = ''
    channel: str = ''

    def as_dict(self) -> dict[str, Any]:
        return {
            'timestamp': self.timestamp.isoformat(),
            'user': self.user,
            'sku': self.sku,
            'delta': self.delta,
            'kind': str(self.kind),
            'report_id': self.report_id,
            'row': self.row,
            'reason': self.reason,
            'condition': self.condition,
            'category': self.category,
            'channel': self.channel,
        }


@dataclass(frozen=True)
class CommitResult:
    """What a successful commit applied and what it left behind."""

    report_id: str
    user: str
    committed_at: datetime
    applied: tuple[LineResult, ...]
    rejected: tuple[LineResult, ...]
    stock: dict[str, StockLevel]
    audit: tuple[AuditEntry, ...]

    @property
    def applied_count(self) -> int:
        return len(self.applied)

    def as_dict(self) -> dict[str, Any]:
        return {
            'report_id': self.report_id,
            'user': self.user,
            'committed_at': self.committed_at.isoformat(),
            'applied': [result.as_dict() for result in self.applied],
            'rejected': [result.as_dict() for result in self.rejected],
            'stock': {
                sku: {'quantity': level.quantity, 'minimum': level.minimum}
                for sku, level in self.stock.items()
            },
            'audit': [entry.as_dict() for entry in self.audit],
        }
