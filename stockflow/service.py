"""
Movements Service — The single public interface for the movement engine.

Usage:
    from stockflow import movements, StockflowError

    lines = movements.read_batch(request.FILES["file"])
    report = movements.validate(lines, "outbound", channel="Amazon")
    if not report.has_errors or confirmed:
        result = movements.commit(report, request.user)
"""

from typing import Sequence

from asgiref.sync import sync_to_async

from stockflow.adapters import get_snapshot_provider
from stockflow.parsing import lines_from_records, read_batch
from stockflow.protocols.snapshot import SnapshotProvider, StockLevel
from stockflow.records import CommitResult, MovementLine, ValidationReport
from stockflow.services.commit import Committer
from stockflow.services.queries import StockQueries
from stockflow.services.validation import ValidationPolicy, Validator
from stockflow.templates import TemplateSpec, template_for


class Movements:
    """
    Single interface for validating and committing stock movements.

    Every call is independent: the engine keeps no state between validate()
    and commit(). The report object is the only thing carried across.

    provider defaults to the configured SnapshotProvider; policy defaults to
    the current STOCKFLOW settings.
    """

    # ══════════════════════════════════════════════════════════════
    # CORE: VALIDATE / COMMIT
    # ══════════════════════════════════════════════════════════════

    @classmethod
    def validate(cls, lines: Sequence[MovementLine], kind, category: str = '',
                 channel: str = '', reason: str = '',
                 provider: SnapshotProvider | None = None,
                 policy: ValidationPolicy | None = None) -> ValidationReport:
        """
        Classify every line of a batch. Pure: nothing is written.

        Raises:
            StockflowError('INVALID_KIND' | 'INVALID_CONTEXT')
        """
        validator = Validator(provider or get_snapshot_provider(), policy)
        return validator.validate(
            lines, kind, category=category, channel=channel, reason=reason,
        )

    @classmethod
    def commit(cls, report: ValidationReport, user,
               provider: SnapshotProvider | None = None,
               policy: ValidationPolicy | None = None) -> CommitResult:
        """
        Apply a report's valid and warning lines as one transaction.

        Raises:
            StaleReportError, AllLinesRejectedError, CommitBlockedError,
            StorageError — stock is unchanged whenever one is raised
        """
        committer = Committer(provider or get_snapshot_provider(), policy)
        return committer.commit(report, user)

    @classmethod
    async def avalidate(cls, *args, **kwargs) -> ValidationReport:
        """Async variant of validate() for ASGI views."""
        return await sync_to_async(cls.validate)(*args, **kwargs)

    @classmethod
    async def acommit(cls, *args, **kwargs) -> CommitResult:
        """Async variant of commit() for ASGI views."""
        return await sync_to_async(cls.commit)(*args, **kwargs)

    # ══════════════════════════════════════════════════════════════
    # UPLOAD BOUNDARY
    # ══════════════════════════════════════════════════════════════

    @classmethod
    def read_batch(cls, source, filename: str | None = None) -> list[MovementLine]:
        """Spreadsheet upload -> MovementLines (see stockflow.parsing)."""
        return read_batch(source, filename)

    @classmethod
    def lines(cls, records) -> list[MovementLine]:
        """Row dicts -> MovementLines (see stockflow.parsing)."""
        return lines_from_records(records)

    @classmethod
    def template(cls, kind) -> TemplateSpec:
        """Upload template for a movement kind."""
        return template_for(kind)

    # ══════════════════════════════════════════════════════════════
    # QUERIES (Django ledger)
    # ══════════════════════════════════════════════════════════════

    @classmethod
    def low_stock(cls, category: str | None = None) -> list[StockLevel]:
        return StockQueries.low_stock(category)

    @classmethod
    def recent_movements(cls, limit: int = 10, kind=None):
        return StockQueries.recent_movements(limit, kind)

    @classmethod
    def summary(cls) -> dict[str, int]:
        return StockQueries.summary()
