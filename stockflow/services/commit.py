"""
Movement commit — apply a validation report as one transaction.

Concurrency:
    - Re-validation and apply both run inside provider.locked()
    - Stock may have moved since the report was produced; every applicable
      line is re-checked against the state visible under the lock
    - provider.apply_deltas() writes stock and audit entries atomically
"""

import logging
from collections import defaultdict
from datetime import timedelta

from django.utils import timezone

from stockflow.exceptions import (
    AllLinesRejectedError,
    CommitBlockedError,
    StaleReportError,
    StockflowError,
    StorageError,
)
from stockflow.models.enums import LineStatus
from stockflow.protocols.snapshot import SnapshotProvider
from stockflow.records import AuditEntry, CommitResult, LineResult, ValidationReport
from stockflow.services.validation import MSG_INSUFFICIENT, ValidationPolicy, Validator

logger = logging.getLogger('stockflow')


def user_identity(user) -> str:
    """Audit identity for a Django user or any plain identifier."""
    if user is None:
        return ''
    get_username = getattr(user, 'get_username', None)
    if callable(get_username):
        return str(get_username())
    return str(user)


class Committer:
    """Applies the acceptable lines of a ValidationReport."""

    def __init__(self, provider: SnapshotProvider, policy: ValidationPolicy | None = None):
        self.provider = provider
        self.policy = policy or ValidationPolicy.from_settings()
        self.validator = Validator(provider, self.policy)

    def commit(self, report: ValidationReport, user) -> CommitResult:
        """
        Commit a report.

        Raises:
            StockflowError('USER_REQUIRED'): No user identity
            StaleReportError('REPORT_EXPIRED'): Report older than the TTL
            StaleReportError('REPORT_ALREADY_COMMITTED'): Report applied before
            AllLinesRejectedError: Nothing left to apply
            CommitBlockedError: Warnings present and policy blocks them
            StorageError: Provider failed; nothing was written
        """
        identity = user_identity(user)
        if not identity:
            raise StockflowError('USER_REQUIRED', report_id=report.report_id)

        self._check_expiry(report)

        eligible = report.applicable_lines
        if not eligible:
            raise AllLinesRejectedError(
                report_id=report.report_id,
                rejected=list(report.lines),
            )

        skus = sorted({result.sku for result in eligible})

        try:
            with self.provider.locked(skus):
                if self.provider.is_committed(report.report_id):
                    raise StaleReportError(
                        'REPORT_ALREADY_COMMITTED', report_id=report.report_id,
                    )

                applied, rejected = self._revalidate(report, eligible)

                if not applied:
                    raise AllLinesRejectedError(
                        report_id=report.report_id,
                        rejected=rejected,
                    )

                if self.policy.block_on_warnings:
                    warnings = [r.row for r in applied if r.status == LineStatus.WARNING]
                    if warnings:
                        raise CommitBlockedError(
                            'WARNINGS_BLOCK_COMMIT',
                            report_id=report.report_id,
                            rows=warnings,
                        )

                committed_at = timezone.now()
                entries = [
                    self._audit_entry(report, result, identity, committed_at)
                    for result in applied
                ]
                deltas: dict[str, int] = defaultdict(int)
                for entry in entries:
                    deltas[entry.sku] += entry.delta

                stock = self.provider.apply_deltas(dict(deltas), entries)

        except StorageError as e:
            logger.error(
                "movements.commit.failed",
                extra={
                    "report_id": report.report_id,
                    "code": e.code,
                    "user": identity,
                },
            )
            raise

        if rejected:
            logger.warning(
                "movements.commit.rejected",
                extra={
                    "report_id": report.report_id,
                    "rows": [r.row for r in rejected],
                },
            )
        logger.info(
            "movements.commit",
            extra={
                "report_id": report.report_id,
                "kind": str(report.kind),
                "applied": len(applied),
                "rejected": len(rejected),
                "skus": len(stock),
                "user": identity,
            },
        )

        return CommitResult(
            report_id=report.report_id,
            user=identity,
            committed_at=committed_at,
            applied=tuple(applied),
            rejected=tuple(rejected),
            stock=stock,
            audit=tuple(entries),
        )

    def _check_expiry(self, report: ValidationReport) -> None:
        ttl = self.policy.report_ttl_minutes
        if ttl and timezone.now() - report.created_at > timedelta(minutes=ttl):
            raise StaleReportError(
                'REPORT_EXPIRED',
                report_id=report.report_id,
                created_at=report.created_at.isoformat(),
            )

    def _revalidate(self, report: ValidationReport,
                    eligible: tuple[LineResult, ...]) -> tuple[list[LineResult], list[LineResult]]:
        """
        Re-check eligible lines against current stock, in row order.

        A running quantity per SKU carries the effect of earlier lines, so
        several lines drawing on the same SKU can never overdraw it together.
        """
        sign = report.kind.delta_sign
        running: dict[str, int] = {}
        applied: list[LineResult] = []
        rejected: list[LineResult] = []

        fresh = self.validator.classify_all([r.line for r in eligible], report.kind)
        for result in fresh:
            if result.status == LineStatus.ERROR:
                rejected.append(result)
                continue

            if result.sku not in running:
                running[result.sku] = result.stock.quantity if result.stock else 0

            delta = sign * result.line.quantity
            if running[result.sku] + delta < 0:
                rejected.append(LineResult(
                    result.line,
                    LineStatus.ERROR,
                    MSG_INSUFFICIENT.format(
                        available=running[result.sku],
                        requested=result.line.quantity,
                    ),
                    catalog=result.catalog,
                    stock=result.stock,
                ))
                continue

            running[result.sku] += delta
            applied.append(result)

        return applied, rejected

    @staticmethod
    def _audit_entry(report: ValidationReport, result: LineResult,
                     identity: str, committed_at) -> AuditEntry:
        line = result.line
        return AuditEntry(
            timestamp=committed_at,
            user=identity,
            sku=line.sku,
            delta=report.kind.delta_sign * line.quantity,
            kind=report.kind,
            report_id=report.report_id,
            row=line.row,
            reason=line.reason or report.reason,
            condition=line.condition or '',
            category=report.category,
            channel=report.channel,
        )
