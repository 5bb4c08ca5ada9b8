"""Cart app models.

Each user owns at most one cart, created lazily on first add and kept
(empty) after checkout so it can be reused.
"""

from decimal import Decimal

from django.conf import settings
from django.db import models


class Cart(models.Model):
    """Shopping cart bound to a user."""

    user = models.OneToOneField(settings.AUTH_USER_MODEL, related_name="cart", on_delete=models.CASCADE)
    created_at = models.DateTimeField(auto_now_add=True)

    def __str__(self) -> str:  # pragma: no cover
        return f"Cart#{self.id} ({self.user_id})"


class CartItem(models.Model):
    """Line item in a shopping cart for a product and optional variant.

    `variant` is free text (e.g. "Size: M"); the empty string means no variant
    so that (cart, product, variant) stays unique at the database level.
    """

    cart = models.ForeignKey(Cart, related_name="items", on_delete=models.CASCADE)
    product = models.ForeignKey("catalog.Product", related_name="cart_items", on_delete=models.CASCADE)
    variant = models.CharField(max_length=100, blank=True, default="")
    quantity = models.PositiveIntegerField(default=1)
    # Captured when the line is first added; checkout never re-reads the product price.
    price = models.DecimalField(max_digits=10, decimal_places=2, default=Decimal("0.00"))
    added_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["id"]
        constraints = [
            models.UniqueConstraint(fields=["cart", "product", "variant"], name="unique_product_variant_per_cart"),
            models.CheckConstraint(name="cartitem_quantity_positive", condition=models.Q(quantity__gte=1)),
        ]

    def __str__(self) -> str:  # pragma: no cover
        return f"CartItem#{self.id} cart={self.cart_id} product={self.product_id} qty={self.quantity}"

    @property
    def line_total(self) -> Decimal:
        return (self.price or Decimal("0.00")) * Decimal(int(self.quantity))
