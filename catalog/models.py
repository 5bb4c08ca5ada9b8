"""Catalog app models.

Defines the `Product` entity consumed by the cart and order apps. Product
CRUD lives outside this service; the order path only reads price and stock
and writes stock decrements.
"""

from decimal import Decimal

from django.db import models


class TimeStampedModel(models.Model):
    """Abstract base model adding created/updated timestamps."""

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        abstract = True


class Product(TimeStampedModel):
    """Sellable product with a single stock counter."""

    name = models.CharField(max_length=255)
    description = models.TextField(blank=True)
    price = models.DecimalField(max_digits=10, decimal_places=2, default=Decimal("0.00"))
    category = models.CharField(max_length=100, blank=True, db_index=True)
    stock = models.IntegerField(default=0)
    image_url = models.URLField(max_length=500, blank=True)

    class Meta:
        ordering = ["name"]
        constraints = [
            models.CheckConstraint(name="product_stock_non_negative", condition=models.Q(stock__gte=0)),
            models.CheckConstraint(name="product_price_non_negative", condition=models.Q(price__gte=0)),
        ]

    def __str__(self) -> str:  # pragma: no cover
        return self.name
