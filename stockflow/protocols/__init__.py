"""
Stockflow Protocols.

Defines interfaces for external system integration.
"""

from stockflow.protocols.snapshot import (
    CatalogEntry,
    SnapshotProvider,
    StockLevel,
)

__all__ = [
    "CatalogEntry",
    "SnapshotProvider",
    "StockLevel",
]
