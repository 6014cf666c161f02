"""
CatalogItem model — products the engine can resolve SKUs against.
"""

from django.db import models
from django.utils.translation import gettext_lazy as _


class CatalogItem(models.Model):
    """
    One sellable product variant.

    The SKU is the immutable key that uploads refer to.
    """

    sku = models.CharField(
        max_length=64,
        unique=True,
        verbose_name=_('SKU'),
    )
    name = models.CharField(max_length=255, verbose_name=_('Name'))
    category = models.CharField(
        max_length=64,
        blank=True,
        default='',
        verbose_name=_('Category'),
    )
    is_active = models.BooleanField(default=True, verbose_name=_('Active'))

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = _('Catalog Item')
        verbose_name_plural = _('Catalog Items')
        ordering = ['sku']

    def __str__(self) -> str:
        return f"{self.sku} — {self.name}"
