"""
Django Stockflow — stock movement validation and commit engine.

Turns uploaded inbound, outbound and return batches into validated,
conflict-checked stock changes with an audit trail.

Usage:
    from stockflow import movements, StockflowError

    report = movements.validate(lines, "outbound", channel="Amazon")
    report.counts                         # {'valid': 3, 'warning': 1, 'error': 0}
    result = movements.commit(report, user)
"""


def __getattr__(name):
    """Lazy import to avoid circular imports during app loading."""
    if name == 'movements':
        from stockflow.service import Movements
        return Movements
    elif name == 'StockflowError':
        from stockflow.exceptions import StockflowError
        return StockflowError
    elif name == 'StaleReportError':
        from stockflow.exceptions import StaleReportError
        return StaleReportError
    elif name == 'AllLinesRejectedError':
        from stockflow.exceptions import AllLinesRejectedError
        return AllLinesRejectedError
    elif name == 'StorageError':
        from stockflow.exceptions import StorageError
        return StorageError
    elif name == 'MovementKind':
        from stockflow.models.enums import MovementKind
        return MovementKind
    elif name == 'LineStatus':
        from stockflow.models.enums import LineStatus
        return LineStatus
    elif name == 'MovementLine':
        from stockflow.records import MovementLine
        return MovementLine
    elif name == 'ValidationReport':
        from stockflow.records import ValidationReport
        return ValidationReport
    elif name == 'CommitResult':
        from stockflow.records import CommitResult
        return CommitResult
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")


__all__ = [
    'movements',
    'StockflowError',
    'StaleReportError',
    'AllLinesRejectedError',
    'StorageError',
    'MovementKind',
    'LineStatus',
    'MovementLine',
    'ValidationReport',
    'CommitResult',
]

__version__ = '0.1.0'
