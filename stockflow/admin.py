"""
Stockflow Admin.

Provides views for production debugging:
- CatalogItem: list + edit
- StockRecord: read-only except the minimum threshold
- Movement: read-only audit trail (timestamp, delta, kind, report, user)
"""

from django.contrib import admin
from django.utils.translation import gettext_lazy as _

from stockflow.models import CatalogItem, Movement, StockRecord


# =========================================================================
# CATALOG ADMIN
# =========================================================================

@admin.register(CatalogItem)
class CatalogItemAdmin(admin.ModelAdmin):
    """Catalog admin — editable. SKUs are immutable once created."""

    list_display = ['sku', 'name', 'category', 'is_active']
    list_filter = ['category', 'is_active']
    search_fields = ['sku', 'name']
    readonly_fields = ['created_at', 'updated_at']

    def get_readonly_fields(self, request, obj=None):
        if obj is not None:
            return [*self.readonly_fields, 'sku']
        return self.readonly_fields


# =========================================================================
# STOCK ADMIN (quantity read-only)
# =========================================================================

@admin.register(StockRecord)
class StockRecordAdmin(admin.ModelAdmin):
    """Stock admin. Quantity only changes through committed movements."""

    list_display = ['item', 'quantity_display', 'minimum', 'is_low_display', 'updated_at']
    list_filter = ['item__category']
    search_fields = ['item__sku', 'item__name']
    readonly_fields = ['item', '_quantity', 'updated_at']
    list_select_related = ['item']

    def has_add_permission(self, request):
        return False

    def has_delete_permission(self, request, obj=None):
        return False

    @admin.display(description=_('Quantity'))
    def quantity_display(self, obj):
        return obj.quantity

    @admin.display(description=_('Low'), boolean=True)
    def is_low_display(self, obj):
        return obj.is_low


# =========================================================================
# MOVEMENT ADMIN (read-only audit trail)
# =========================================================================

@admin.register(Movement)
class MovementAdmin(admin.ModelAdmin):
    """Movement admin — read-only. Immutable audit trail."""

    list_display = ['timestamp', 'stock', 'kind', 'delta', 'row', 'report_id', 'username']
    list_filter = ['kind', 'timestamp', 'category', 'channel']
    search_fields = ['report_id', 'username', 'stock__item__sku']
    readonly_fields = ['stock', 'delta', 'kind', 'report_id', 'row', 'username',
                       'reason', 'condition', 'category', 'channel',
                       'timestamp']
    date_hierarchy = 'timestamp'
    list_select_related = ['stock__item']

    def has_add_permission(self, request):
        return False

    def has_change_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        return False
