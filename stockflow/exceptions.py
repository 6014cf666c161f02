"""
Exceptions for Stockflow.

All errors are StockflowError with a structured code for programmatic handling.
Line-level outcomes (valid/warning/error) are never raised; they live in the
ValidationReport.
"""

from typing import Any


def _serialize(value: Any) -> Any:
    if isinstance(value, (list, tuple)):
        return [_serialize(v) for v in value]
    if hasattr(value, 'as_dict'):
        return value.as_dict()
    return value


class StockflowError(Exception):
    """
    Structured exception for movement operations.

    Usage:
        try:
            movements.commit(report, user)
        except StaleReportError as e:
            if e.code == 'REPORT_ALREADY_COMMITTED':
                ...

    Attributes:
        code: Error code for programmatic handling
        message: Human-readable message
        data: Additional context data
    """

    _default_messages = {
        'INVALID_CONTEXT': 'Category or channel is missing or not recognised',
        'INVALID_KIND': 'Unknown movement kind',
        'USER_REQUIRED': 'A user is required to commit movements',
    }

    def __init__(self, code: str, message: str | None = None, **data: Any):
        self.code = code
        self.message = message or self._lookup_message(code)
        self.data = data
        super().__init__(self.message)

    @classmethod
    def _lookup_message(cls, code: str) -> str:
        for klass in cls.__mro__:
            messages = klass.__dict__.get('_default_messages', {})
            if code in messages:
                return messages[code]
        return code

    def as_dict(self) -> dict[str, Any]:
        """Serialize to dict (useful for APIs)."""
        return {
            'code': self.code,
            'message': self.message,
            'data': {k: _serialize(v) for k, v in self.data.items()},
        }

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.code!r}, {self.message!r})"


class BatchFormatError(StockflowError):
    """Upload could not be turned into movement lines."""

    _default_messages = {
        'INVALID_BATCH': 'Uploaded file does not match the movement template',
    }

    def __init__(self, code: str = 'INVALID_BATCH', message: str | None = None, **data: Any):
        super().__init__(code, message, **data)

    @property
    def errors(self) -> list[dict[str, Any]]:
        """Shortcut for data['errors'] — one dict per offending row."""
        return self.data.get('errors', [])


class StaleReportError(StockflowError):
    """Report can no longer be committed as-is. Re-validate and retry."""

    _default_messages = {
        'REPORT_EXPIRED': 'Validation report has expired',
        'REPORT_ALREADY_COMMITTED': 'Validation report was already committed',
    }


class AllLinesRejectedError(StaleReportError):
    """Nothing left to apply after (re-)validation."""

    _default_messages = {
        'ALL_LINES_REJECTED': 'No lines left to apply',
    }

    def __init__(self, code: str = 'ALL_LINES_REJECTED', message: str | None = None, **data: Any):
        super().__init__(code, message, **data)

    @property
    def rejected(self) -> list:
        """Shortcut for data['rejected'] — LineResults that blocked the commit."""
        return self.data.get('rejected', [])


class CommitBlockedError(StockflowError):
    """Commit refused by policy."""

    _default_messages = {
        'WARNINGS_BLOCK_COMMIT': 'Warnings must be resolved before committing',
    }


class StorageError(StockflowError):
    """Snapshot provider failed to apply a commit. Nothing was written."""

    _default_messages = {
        'STORAGE_FAILURE': 'Stock store failed to apply the commit',
        'NEGATIVE_STOCK': 'Commit would leave negative stock',
    }
