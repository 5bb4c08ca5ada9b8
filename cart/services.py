"""Cart services: line item mutations for the user's single cart."""

import logging

from catalog.models import Product
from common.exceptions import InvalidInput, NotFoundError
from django.db import transaction
from django.db.models import F

from .models import Cart, CartItem
from .selectors import get_cart_for_user


class CartError(InvalidInput):
    """Raised for cart mutation failures."""

    default_detail = "Unable to update cart."


logger = logging.getLogger("storefront.cart")


def _normalize_variant(variant) -> str:
    return (variant or "").strip()


def _get_owned_item(*, user, item_id: int) -> CartItem:
    try:
        return CartItem.objects.select_for_update().get(id=item_id, cart__user_id=user.id)
    except CartItem.DoesNotExist:
        raise NotFoundError("Cart item not found")


@transaction.atomic
def add_item(*, user, product_id: int, quantity: int, variant: str = "") -> CartItem:
    """Add a product (and optional variant) to the user's cart.

    Creates the cart on first use. Re-adding the same product and variant
    increments the existing line; the captured price stays the one recorded
    when the line was created.
    """

    if quantity <= 0:
        raise CartError("Quantity must be positive")
    try:
        product = Product.objects.get(id=product_id)
    except Product.DoesNotExist:
        raise NotFoundError("Product not found")

    cart, _ = Cart.objects.get_or_create(user=user)
    variant = _normalize_variant(variant)
    item, created = CartItem.objects.select_for_update().get_or_create(
        cart=cart,
        product=product,
        variant=variant,
        defaults={"quantity": quantity, "price": product.price},
    )
    if not created:
        CartItem.objects.filter(id=item.id).update(quantity=F("quantity") + quantity)
        item.refresh_from_db(fields=["quantity"])

    logger.info(
        "cart.item_added" if created else "cart.item_incremented",
        extra={
            "event": "cart.item_added" if created else "cart.item_incremented",
            "cart_id": cart.id,
            "user_id": user.id,
            "product_id": product.id,
            "variant": variant,
            "quantity": int(item.quantity),
        },
    )
    return item


@transaction.atomic
def update_item_quantity(*, user, item_id: int, quantity: int) -> CartItem:
    """Set a cart line's quantity (must stay >= 1)."""

    if quantity <= 0:
        raise CartError("Quantity must be positive")
    item = _get_owned_item(user=user, item_id=item_id)
    item.quantity = quantity
    item.save(update_fields=["quantity"])
    logger.info(
        "cart.item_updated",
        extra={"event": "cart.item_updated", "cart_id": item.cart_id, "user_id": user.id, "quantity": quantity},
    )
    return item


@transaction.atomic
def remove_item(*, user, item_id: int) -> None:
    """Remove a line from the user's cart."""

    item = _get_owned_item(user=user, item_id=item_id)
    cart_id = item.cart_id
    item.delete()
    logger.info(
        "cart.item_removed",
        extra={"event": "cart.item_removed", "cart_id": cart_id, "user_id": user.id, "item_id": item_id},
    )


@transaction.atomic
def clear_cart(*, user) -> int:
    """Delete every line in the user's cart; the cart row itself is kept.

    Returns the number of lines removed (0 when the user has no cart).
    """

    cart = get_cart_for_user(user=user)
    if cart is None:
        return 0
    deleted, _ = CartItem.objects.filter(cart=cart).delete()
    logger.info("cart.cleared", extra={"event": "cart.cleared", "cart_id": cart.id, "user_id": user.id})
    return deleted
