"""Order services: checkout from the cart and the order lifecycle.

Checkout runs as one unit of work on the given database alias:
snapshot (with product rows locked) -> stock validation -> commit. The
commit writes the order header, its lines, the stock decrements and the
cart clear together; any failure rolls every write back.
"""

import logging
from typing import Dict, Optional

from cart.models import CartItem
from cart.selectors import CartSnapshot, read_cart_snapshot
from catalog.models import Product
from common.choices import OrderStatus, UserRole
from common.exceptions import ConflictError, InfrastructureError, InvalidInput, NotFoundError
from django.conf import settings
from django.db import DEFAULT_DB_ALIAS, DatabaseError, transaction
from django.db.models import F
from django.utils import timezone

from .models import Order, OrderItem

logger = logging.getLogger("storefront.orders")


class EmptyCart(InvalidInput):
    default_detail = "Cart is empty"
    default_code = "cart_empty"


class InsufficientStock(ConflictError):
    """Raised for the first product whose requested quantity exceeds stock."""

    default_code = "insufficient_stock"

    def __init__(self, product_id: int):
        super().__init__(f"Insufficient stock for product {product_id}", product_id=product_id)
        self.product_id = product_id


class OrderNotCancellable(ConflictError):
    default_detail = "Only pending orders can be cancelled"
    default_code = "not_cancellable"


class InvalidStatus(InvalidInput):
    default_detail = "Invalid status"
    default_code = "invalid_status"


def _quantities_by_product(lines) -> Dict[int, int]:
    """Sum quantities per product, keeping first-seen order."""
    totals: Dict[int, int] = {}
    for line in lines:
        totals[line.product_id] = totals.get(line.product_id, 0) + int(line.quantity)
    return totals


# Checkout


def validate_stock(snapshot: CartSnapshot) -> None:
    """Check every product's requested quantity against its snapshot stock.

    Lines for the same product (different variants) draw from one stock
    counter, so demand is summed per product. Raises `InsufficientStock` for
    the first offending product in cart order; has no side effects.
    """

    stock = {line.product_id: line.stock for line in snapshot.lines}
    for product_id, requested in _quantities_by_product(snapshot.lines).items():
        if requested > stock[product_id]:
            raise InsufficientStock(product_id)


def commit_order(*, user, snapshot: CartSnapshot, using: str = DEFAULT_DB_ALIAS) -> Order:
    """Persist the order for a validated snapshot, all or nothing.

    The total and line prices come from the prices captured in the cart.
    Stock is decremented with a conditional update (`stock >= quantity`), so
    a decrement that would go negative fails the whole commit instead of
    overselling.
    """

    with transaction.atomic(using=using):
        order = Order.objects.using(using).create(
            user=user,
            total=snapshot.total,
            status=Order.STATUS_PENDING,
        )
        OrderItem.objects.using(using).bulk_create(
            [
                OrderItem(order=order, product_id=line.product_id, quantity=line.quantity, price=line.price)
                for line in snapshot.lines
            ]
        )
        now = timezone.now()
        for product_id, quantity in _quantities_by_product(snapshot.lines).items():
            updated = (
                Product.objects.using(using)
                .filter(id=product_id, stock__gte=quantity)
                .update(stock=F("stock") - quantity, updated_at=now)
            )
            if updated != 1:
                raise InsufficientStock(product_id)
        CartItem.objects.using(using).filter(cart_id=snapshot.cart_id).delete()
    return order


def place_order(*, user, using: str = DEFAULT_DB_ALIAS) -> Order:
    """Turn the user's cart into a pending order.

    Raises `EmptyCart` when there is nothing to order, `InsufficientStock`
    when a product cannot cover the cart, and `InfrastructureError` when the
    store fails mid-way. Nothing is written in any failure case.
    """

    try:
        with transaction.atomic(using=using):
            snapshot = read_cart_snapshot(user=user, using=using, lock=True)
            if snapshot is None:
                raise EmptyCart("Cart is empty")
            if snapshot.is_empty:
                raise EmptyCart("Cart has no items")
            validate_stock(snapshot)
            order = commit_order(user=user, snapshot=snapshot, using=using)
    except EmptyCart as exc:
        logger.info(
            "checkout_rejected",
            extra={"event": "checkout_rejected", "user_id": user.id, "reason": exc.default_code},
        )
        raise
    except InsufficientStock as exc:
        logger.info(
            "checkout_rejected",
            extra={
                "event": "checkout_rejected",
                "user_id": user.id,
                "reason": exc.default_code,
                "product_id": exc.product_id,
            },
        )
        raise
    except DatabaseError as exc:
        logger.exception("checkout_failed", extra={"event": "checkout_failed", "user_id": user.id})
        raise InfrastructureError("Server error while creating order") from exc

    logger.info(
        "order_placed",
        extra={
            "event": "order_placed",
            "order_id": order.id,
            "user_id": user.id,
            "cart_id": snapshot.cart_id,
            "lines": len(snapshot.lines),
            "total": str(order.total),
        },
    )
    return order


# Lifecycle


def _orders_visible_to(user, using: str):
    qs = Order.objects.using(using)
    if getattr(user, "role", None) != UserRole.ADMIN:
        qs = qs.filter(user_id=user.id)
    return qs


def get_order_detail(*, user, order_id: int, using: str = DEFAULT_DB_ALIAS) -> Order:
    """Return an order with its lines for its owner or an admin.

    A missing order and another user's order raise the same `NotFoundError`
    so callers cannot probe for order ids they do not own.
    """

    try:
        return (
            _orders_visible_to(user, using)
            .select_related("user")
            .prefetch_related("items__product")
            .get(id=order_id)
        )
    except Order.DoesNotExist:
        raise NotFoundError("Order not found")


def list_orders_for_user(*, user, using: str = DEFAULT_DB_ALIAS):
    """Orders owned by `user`, newest first."""
    return Order.objects.using(using).filter(user_id=user.id).order_by("-created_at", "-id")


def list_all_orders(*, using: str = DEFAULT_DB_ALIAS):
    """Every order with its owner, newest first (admin view, unpaginated)."""
    return Order.objects.using(using).select_related("user").order_by("-created_at", "-id")


def update_order_status(
    *,
    order_id: int,
    status: str,
    tracking_number: Optional[str] = None,
    actor=None,
    using: str = DEFAULT_DB_ALIAS,
) -> Order:
    """Set an order's status and tracking number (administrative path).

    Any enumerated status is accepted from any current status. The tracking
    number is overwritten with the given value; blank or missing clears it.
    """

    if status not in OrderStatus.values:
        raise InvalidStatus()

    with transaction.atomic(using=using):
        try:
            order = Order.objects.using(using).select_for_update().get(id=order_id)
        except Order.DoesNotExist:
            raise NotFoundError("Order not found")
        prev = order.status
        order.status = status
        order.tracking_number = (tracking_number or "").strip() or None
        order.save(update_fields=["status", "tracking_number", "updated_at"])

    logger.info(
        "order_status_changed",
        extra={
            "event": "order_status_changed",
            "order_id": order.id,
            "user_id": order.user_id,
            "actor_id": getattr(actor, "id", None),
            "status_from": prev,
            "status_to": order.status,
            "tracking_number": order.tracking_number,
        },
    )
    return order


def restock_order(*, order: Order, using: str = DEFAULT_DB_ALIAS) -> None:
    """Add an order's quantities back to product stock."""

    now = timezone.now()
    for product_id, quantity in _quantities_by_product(order.items.using(using).all()).items():
        Product.objects.using(using).filter(id=product_id).update(stock=F("stock") + quantity, updated_at=now)


def cancel_order(
    *,
    user,
    order_id: int,
    restock: Optional[bool] = None,
    using: str = DEFAULT_DB_ALIAS,
) -> Order:
    """Cancel the caller's own order while it is still pending.

    Any other current status raises `OrderNotCancellable` and leaves the order
    untouched. Stock is returned only when `restock` is true, which defaults
    to the `ORDERS_RESTOCK_ON_CANCEL` setting.
    """

    if restock is None:
        restock = bool(getattr(settings, "ORDERS_RESTOCK_ON_CANCEL", False))

    with transaction.atomic(using=using):
        try:
            order = Order.objects.using(using).select_for_update().get(id=order_id, user_id=user.id)
        except Order.DoesNotExist:
            raise NotFoundError("Order not found")
        if order.status != Order.STATUS_PENDING:
            raise OrderNotCancellable()
        order.status = Order.STATUS_CANCELLED
        order.save(update_fields=["status", "updated_at"])
        if restock:
            restock_order(order=order, using=using)

    logger.info(
        "order_cancelled",
        extra={
            "event": "order_cancelled",
            "order_id": order.id,
            "user_id": user.id,
            "status_from": Order.STATUS_PENDING,
            "status_to": order.status,
            "restocked": restock,
        },
    )
    return order
