import logging
from decimal import Decimal
from unittest import mock

import pytest
from cart.models import Cart, CartItem
from cart.selectors import read_cart_snapshot
from cart.tests.factories import CartFactory, CartItemFactory, UserFactory
from catalog.models import Product
from catalog.tests.factories import ProductFactory
from common.exceptions import InfrastructureError
from django.db import DatabaseError
from django.db.models.query import QuerySet
from orders.models import Order, OrderItem
from orders.services import EmptyCart, InsufficientStock, commit_order, place_order, validate_stock


def _cart_with(user, *lines):
    cart = CartFactory(user=user)
    for product, quantity in lines:
        CartItemFactory(cart=cart, product=product, quantity=quantity, price=product.price)
    return cart


@pytest.mark.django_db
def test_place_order_writes_order_items_stock_and_clears_cart():
    user = UserFactory()
    a = ProductFactory(price=Decimal("10.00"), stock=5)
    b = ProductFactory(price=Decimal("5.00"), stock=3)
    cart = _cart_with(user, (a, 2), (b, 1))

    order = place_order(user=user)

    order.refresh_from_db()
    assert order.total == Decimal("25.00")
    assert order.status == Order.STATUS_PENDING
    assert order.user_id == user.id
    items = list(order.items.order_by("id"))
    assert [(i.product_id, i.quantity, i.price) for i in items] == [
        (a.id, 2, Decimal("10.00")),
        (b.id, 1, Decimal("5.00")),
    ]
    a.refresh_from_db()
    b.refresh_from_db()
    assert (a.stock, b.stock) == (3, 2)
    assert Cart.objects.filter(id=cart.id).exists()
    assert CartItem.objects.filter(cart=cart).count() == 0


@pytest.mark.django_db
def test_total_uses_captured_cart_price_not_live_price():
    user = UserFactory()
    product = ProductFactory(price=Decimal("10.00"), stock=5)
    _cart_with(user, (product, 2))
    Product.objects.filter(id=product.id).update(price=Decimal("50.00"))

    order = place_order(user=user)

    assert order.total == Decimal("20.00")
    assert order.items.get().price == Decimal("10.00")


@pytest.mark.django_db
def test_insufficient_stock_changes_nothing():
    user = UserFactory()
    a = ProductFactory(stock=5)
    b = ProductFactory(stock=0)
    cart = _cart_with(user, (a, 2), (b, 1))

    with pytest.raises(InsufficientStock) as exc:
        place_order(user=user)

    assert exc.value.product_id == b.id
    assert exc.value.message == f"Insufficient stock for product {b.id}"
    assert Order.objects.count() == 0
    assert OrderItem.objects.count() == 0
    a.refresh_from_db()
    b.refresh_from_db()
    assert (a.stock, b.stock) == (5, 0)
    assert CartItem.objects.filter(cart=cart).count() == 2


@pytest.mark.django_db
def test_first_offending_product_in_cart_order_is_reported():
    user = UserFactory()
    a = ProductFactory(stock=0)
    b = ProductFactory(stock=0)
    _cart_with(user, (b, 1), (a, 1))

    with pytest.raises(InsufficientStock) as exc:
        place_order(user=user)

    assert exc.value.product_id == b.id


@pytest.mark.django_db
def test_variant_lines_of_one_product_share_its_stock():
    user = UserFactory()
    product = ProductFactory(stock=3)
    cart = CartFactory(user=user)
    CartItemFactory(cart=cart, product=product, variant="Size: S", quantity=2)
    CartItemFactory(cart=cart, product=product, variant="Size: L", quantity=2)

    with pytest.raises(InsufficientStock):
        place_order(user=user)

    product.refresh_from_db()
    assert product.stock == 3


@pytest.mark.django_db
def test_exact_stock_is_enough_and_reaches_zero():
    user = UserFactory()
    product = ProductFactory(stock=2)
    _cart_with(user, (product, 2))

    place_order(user=user)

    product.refresh_from_db()
    assert product.stock == 0


@pytest.mark.django_db
def test_no_cart_and_empty_cart_are_rejected():
    user = UserFactory()
    with pytest.raises(EmptyCart) as exc:
        place_order(user=user)
    assert exc.value.message == "Cart is empty"

    CartFactory(user=user)
    with pytest.raises(EmptyCart) as exc:
        place_order(user=user)
    assert exc.value.message == "Cart has no items"
    assert Order.objects.count() == 0


@pytest.mark.django_db
def test_store_failure_mid_commit_rolls_everything_back():
    user = UserFactory()
    product = ProductFactory(stock=5)
    cart = _cart_with(user, (product, 2))

    # Fails on the cart clear, after the order, its items and the decrement were written.
    with mock.patch.object(QuerySet, "delete", side_effect=DatabaseError("connection lost")):
        with pytest.raises(InfrastructureError) as exc:
            place_order(user=user)

    assert exc.value.status_code == 500
    assert exc.value.message == "Server error while creating order"
    assert Order.objects.count() == 0
    assert OrderItem.objects.count() == 0
    product.refresh_from_db()
    assert product.stock == 5
    assert CartItem.objects.filter(cart=cart).count() == 1


@pytest.mark.django_db
def test_commit_refuses_to_oversell_when_stock_moved_after_snapshot():
    user = UserFactory()
    product = ProductFactory(stock=2)
    _cart_with(user, (product, 2))
    snapshot = read_cart_snapshot(user=user)
    validate_stock(snapshot)

    # A concurrent checkout takes one unit between validation and commit.
    Product.objects.filter(id=product.id).update(stock=1)

    with pytest.raises(InsufficientStock):
        commit_order(user=user, snapshot=snapshot)

    product.refresh_from_db()
    assert product.stock == 1
    assert Order.objects.count() == 0


@pytest.mark.django_db
def test_validate_stock_has_no_side_effects():
    user = UserFactory()
    product = ProductFactory(stock=1)
    _cart_with(user, (product, 1))
    snapshot = read_cart_snapshot(user=user)

    validate_stock(snapshot)

    product.refresh_from_db()
    assert product.stock == 1
    assert Order.objects.count() == 0


@pytest.mark.django_db
def test_successful_checkout_logs_order_placed(caplog):
    user = UserFactory()
    product = ProductFactory(stock=5)
    _cart_with(user, (product, 1))

    with caplog.at_level(logging.INFO, logger="storefront.orders"):
        order = place_order(user=user)

    (record,) = [r for r in caplog.records if r.msg == "order_placed"]
    assert record.order_id == order.id
    assert record.user_id == user.id


@pytest.mark.django_db
def test_rejected_checkout_logs_reason(caplog):
    user = UserFactory()
    product = ProductFactory(stock=0)
    _cart_with(user, (product, 1))

    with caplog.at_level(logging.INFO, logger="storefront.orders"):
        with pytest.raises(InsufficientStock):
            place_order(user=user)

    (record,) = [r for r in caplog.records if r.msg == "checkout_rejected"]
    assert record.reason == "insufficient_stock"
    assert record.product_id == product.id
