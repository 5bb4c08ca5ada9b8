"""Selectors for read-only cart queries, including the checkout snapshot."""

from dataclasses import dataclass
from decimal import Decimal
from typing import Optional, Tuple

from catalog.models import Product
from django.db import DEFAULT_DB_ALIAS
from django.db.models import DecimalField, F, Sum

from .models import Cart, CartItem

CENTS = Decimal("0.01")


@dataclass(frozen=True)
class SnapshotLine:
    """One cart line joined with the product's live stock."""

    cart_item_id: int
    product_id: int
    product_name: str
    variant: str
    quantity: int
    price: Decimal
    stock: int

    @property
    def line_total(self) -> Decimal:
        return self.price * Decimal(int(self.quantity))


@dataclass(frozen=True)
class CartSnapshot:
    """Cart contents as read immediately before stock validation."""

    cart_id: int
    lines: Tuple[SnapshotLine, ...]

    @property
    def is_empty(self) -> bool:
        return not self.lines

    @property
    def total(self) -> Decimal:
        return sum((line.line_total for line in self.lines), Decimal("0.00"))


def get_cart_for_user(*, user, using: str = DEFAULT_DB_ALIAS) -> Optional[Cart]:
    """Return the user's cart or None; never creates one."""

    return Cart.objects.using(using).filter(user_id=user.id).first()


def list_cart_items(*, cart: Optional[Cart]):
    if cart is None:
        return CartItem.objects.none()
    return cart.items.select_related("product").order_by("id")


def cart_totals(*, cart: Optional[Cart]):
    """Compute cart totals from captured line prices."""

    if cart is None:
        return {"subtotal": Decimal("0.00"), "total": Decimal("0.00")}
    agg = cart.items.aggregate(
        subtotal=Sum(F("price") * F("quantity"), output_field=DecimalField(max_digits=12, decimal_places=2))
    )
    # Some backends drop the scale on aggregates; money always has two places.
    subtotal = Decimal(str(agg.get("subtotal") or 0)).quantize(CENTS)
    return {"subtotal": subtotal, "total": subtotal}


def read_cart_snapshot(*, user, using: str = DEFAULT_DB_ALIAS, lock: bool = False) -> Optional[CartSnapshot]:
    """Load the user's cart lines with each product's current stock.

    Returns None when the user has no cart row, and a snapshot with no lines
    when the cart is empty. With `lock=True` (inside a transaction) the
    referenced product rows are locked in id order first, so a concurrent
    checkout of the same products waits instead of reading stale stock.
    """

    cart = get_cart_for_user(user=user, using=using)
    if cart is None:
        return None

    items = CartItem.objects.using(using).filter(cart_id=cart.id)
    if lock:
        product_ids = items.values_list("product_id", flat=True)
        list(
            Product.objects.using(using)
            .select_for_update()
            .filter(id__in=product_ids)
            .order_by("id")
            .values_list("id", flat=True)
        )

    lines = tuple(
        SnapshotLine(
            cart_item_id=item.id,
            product_id=item.product_id,
            product_name=item.product.name,
            variant=item.variant,
            quantity=int(item.quantity),
            price=item.price,
            stock=int(item.product.stock),
        )
        for item in items.select_related("product").order_by("id")
    )
    return CartSnapshot(cart_id=cart.id, lines=lines)
