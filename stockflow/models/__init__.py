"""
Stockflow Models.

Core models backing the Django snapshot provider:
- CatalogItem: Products SKUs resolve to
- StockRecord: On-hand quantity cache per item
- Movement: Immutable ledger of committed lines
"""

from stockflow.models.catalog import CatalogItem
from stockflow.models.enums import LineStatus, MovementKind
from stockflow.models.movement import Movement
from stockflow.models.stock import StockRecord

__all__ = [
    'MovementKind',
    'LineStatus',
    'CatalogItem',
    'StockRecord',
    'Movement',
]
