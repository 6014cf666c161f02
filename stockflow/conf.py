"""
Stockflow configuration.

Usage in settings.py:
    STOCKFLOW = {
        "SNAPSHOT_PROVIDER": "stockflow.adapters.orm.DjangoSnapshotProvider",
        "DEFAULT_MINIMUM": 10,
        "BLOCK_ON_WARNINGS": False,
        "REPORT_TTL_MINUTES": 30,
    }
"""

from dataclasses import dataclass, field
from typing import Any

from django.conf import settings


@dataclass
class StockflowSettings:
    """Stockflow configuration settings."""

    # Snapshot provider backend (dotted path)
    SNAPSHOT_PROVIDER: str = "stockflow.adapters.orm.DjangoSnapshotProvider"

    # Minimum threshold for SKUs without a stock record
    DEFAULT_MINIMUM: int = 0

    # Return conditions that require inspection
    DAMAGED_CONDITIONS: list[str] = field(default_factory=lambda: ["Damaged"])

    # Refuse commits while any applicable line is a warning
    BLOCK_ON_WARNINGS: bool = False

    # Validation report lifetime in minutes (0 = no expiration)
    REPORT_TTL_MINUTES: int = 0

    # Check category/channel against the lists below
    ENFORCE_CONTEXT: bool = True

    CATEGORIES: list[str] = field(default_factory=lambda: [
        "SU", "YA", "Chainstore", "Parco", "PNP", "Parco Food",
    ])
    CHANNELS: list[str] = field(default_factory=lambda: [
        "Amazon", "Takealot", "Chainstore", "PNP", "Parco", "Direct Sales",
    ])
    RETURN_REASONS: list[str] = field(default_factory=lambda: [
        "Defective", "Customer Return", "Damage in Transit",
        "Wrong Item", "Quality Issue", "Overstock",
    ])
    CONDITIONS: list[str] = field(default_factory=lambda: [
        "Good", "Damaged", "Refurbish",
    ])


def get_stockflow_settings() -> StockflowSettings:
    """Load settings from Django settings."""
    user_settings: dict[str, Any] = getattr(settings, "STOCKFLOW", {})
    return StockflowSettings(**{
        k: v for k, v in user_settings.items()
        if k in StockflowSettings.__dataclass_fields__
    })


class _LazySettings:
    """Lazy proxy that re-reads settings on every attribute access."""

    def __getattr__(self, name):
        return getattr(get_stockflow_settings(), name)


stockflow_settings = _LazySettings()
