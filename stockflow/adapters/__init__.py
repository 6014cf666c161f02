"""
Stockflow Adapters.

Implementations of the SnapshotProvider protocol, plus the loader that
picks the configured one.

Usage:
    from stockflow.adapters import get_snapshot_provider

    provider = get_snapshot_provider()
    provider.current_stock("SKU-001")

Settings:
    STOCKFLOW = {
        "SNAPSHOT_PROVIDER": "stockflow.adapters.orm.DjangoSnapshotProvider",
    }
"""

from __future__ import annotations

import logging
import threading

from django.core.exceptions import ImproperlyConfigured
from django.utils.module_loading import import_string

from stockflow.conf import stockflow_settings
from stockflow.protocols.snapshot import SnapshotProvider

logger = logging.getLogger(__name__)


# Cached provider instance
_lock = threading.Lock()
_provider: SnapshotProvider | None = None


def get_snapshot_provider() -> SnapshotProvider:
    """
    Return the configured snapshot provider.

    Returns:
        SnapshotProvider instance (one per process)

    Raises:
        ImproperlyConfigured: If SNAPSHOT_PROVIDER is empty or import fails
    """
    global _provider

    if _provider is None:
        with _lock:
            if _provider is None:  # double-checked
                provider_path = stockflow_settings.SNAPSHOT_PROVIDER

                if not provider_path:
                    raise ImproperlyConfigured(
                        "STOCKFLOW['SNAPSHOT_PROVIDER'] must be configured. "
                        "Example: 'stockflow.adapters.orm.DjangoSnapshotProvider'"
                    )

                try:
                    provider_class = import_string(provider_path)
                except ImportError as e:
                    raise ImproperlyConfigured(
                        f"Failed to import snapshot provider '{provider_path}': {e}"
                    ) from e

                _provider = provider_class()
                logger.debug("Loaded snapshot provider: %s", provider_path)

    return _provider


def reset_snapshot_provider() -> None:
    """Reset the cached provider. Useful for testing."""
    global _provider
    _provider = None


__all__ = [
    "get_snapshot_provider",
    "reset_snapshot_provider",
]
