"""
Movement services — modular organization of engine operations.

    from stockflow.services import Validator, Committer, StockQueries
"""

from stockflow.services.commit import Committer
from stockflow.services.queries import StockQueries
from stockflow.services.validation import ValidationPolicy, Validator

__all__ = [
    'Validator',
    'ValidationPolicy',
    'Committer',
    'StockQueries',
]
