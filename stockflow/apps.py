"""Django app configuration for Stockflow."""

from django.apps import AppConfig
from django.utils.translation import gettext_lazy as _


class StockflowConfig(AppConfig):
    """Configuration for Stockflow app."""

    default_auto_field = "django.db.models.BigAutoField"
    name = "stockflow"
    verbose_name = _("Stock Movements")
