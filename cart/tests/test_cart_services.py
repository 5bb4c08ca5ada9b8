from decimal import Decimal

import pytest
from cart.models import Cart, CartItem
from cart.selectors import cart_totals, read_cart_snapshot
from cart.services import add_item, clear_cart, remove_item, update_item_quantity
from cart.tests.factories import CartFactory, CartItemFactory, UserFactory
from catalog.tests.factories import ProductFactory
from common.exceptions import NotFoundError


@pytest.mark.django_db
def test_add_item_creates_cart_and_captures_price():
    user = UserFactory()
    product = ProductFactory(price=Decimal("12.50"))

    item = add_item(user=user, product_id=product.id, quantity=2)

    assert Cart.objects.filter(user=user).count() == 1
    assert item.quantity == 2
    assert item.price == Decimal("12.50")
    assert item.variant == ""


@pytest.mark.django_db
def test_re_adding_same_product_and_variant_increments_quantity():
    user = UserFactory()
    product = ProductFactory()

    add_item(user=user, product_id=product.id, quantity=2, variant="Size: M")
    item = add_item(user=user, product_id=product.id, quantity=3, variant="Size: M")

    assert item.quantity == 5
    assert CartItem.objects.filter(cart__user=user).count() == 1


@pytest.mark.django_db
def test_re_adding_keeps_first_captured_price():
    user = UserFactory()
    product = ProductFactory(price=Decimal("10.00"))
    add_item(user=user, product_id=product.id, quantity=1)

    product.price = Decimal("99.00")
    product.save(update_fields=["price", "updated_at"])
    item = add_item(user=user, product_id=product.id, quantity=1)

    assert item.price == Decimal("10.00")


@pytest.mark.django_db
def test_different_variants_are_separate_lines():
    user = UserFactory()
    product = ProductFactory()

    add_item(user=user, product_id=product.id, quantity=1, variant="Size: S")
    add_item(user=user, product_id=product.id, quantity=1, variant="Size: L")
    add_item(user=user, product_id=product.id, quantity=1)

    assert CartItem.objects.filter(cart__user=user).count() == 3


@pytest.mark.django_db
def test_missing_and_blank_variant_are_the_same_line():
    user = UserFactory()
    product = ProductFactory()

    add_item(user=user, product_id=product.id, quantity=1, variant=None)
    item = add_item(user=user, product_id=product.id, quantity=1, variant="  ")

    assert item.quantity == 2


@pytest.mark.django_db
def test_add_unknown_product_raises_not_found():
    user = UserFactory()
    with pytest.raises(NotFoundError):
        add_item(user=user, product_id=999999, quantity=1)
    assert not Cart.objects.filter(user=user).exists()


@pytest.mark.django_db
def test_update_and_remove_only_touch_own_lines():
    owner = UserFactory()
    other = UserFactory()
    item = CartItemFactory(cart=CartFactory(user=owner), quantity=1)

    with pytest.raises(NotFoundError):
        update_item_quantity(user=other, item_id=item.id, quantity=4)
    with pytest.raises(NotFoundError):
        remove_item(user=other, item_id=item.id)

    updated = update_item_quantity(user=owner, item_id=item.id, quantity=4)
    assert updated.quantity == 4
    remove_item(user=owner, item_id=item.id)
    assert not CartItem.objects.filter(id=item.id).exists()


@pytest.mark.django_db
def test_clear_cart_keeps_cart_row():
    user = UserFactory()
    cart = CartFactory(user=user)
    CartItemFactory.create_batch(2, cart=cart)

    assert clear_cart(user=user) == 2
    assert Cart.objects.filter(id=cart.id).exists()
    assert cart.items.count() == 0
    assert clear_cart(user=UserFactory()) == 0


@pytest.mark.django_db
def test_cart_totals_use_captured_prices():
    cart = CartFactory()
    CartItemFactory(cart=cart, quantity=2, price=Decimal("10.00"))
    CartItemFactory(cart=cart, quantity=1, price=Decimal("5.00"))

    totals = cart_totals(cart=cart)

    assert totals["subtotal"] == Decimal("25.00")
    assert totals["total"] == Decimal("25.00")


@pytest.mark.django_db
def test_snapshot_distinguishes_no_cart_from_empty_cart():
    user = UserFactory()
    assert read_cart_snapshot(user=user) is None

    CartFactory(user=user)
    snapshot = read_cart_snapshot(user=user)
    assert snapshot is not None
    assert snapshot.is_empty
    assert snapshot.total == Decimal("0.00")


@pytest.mark.django_db
def test_snapshot_joins_live_stock_in_line_order():
    user = UserFactory()
    cart = CartFactory(user=user)
    a = ProductFactory(stock=5)
    b = ProductFactory(stock=0)
    first = CartItemFactory(cart=cart, product=a, quantity=2, price=Decimal("10.00"))
    second = CartItemFactory(cart=cart, product=b, quantity=1, price=Decimal("5.00"))

    snapshot = read_cart_snapshot(user=user, lock=True)

    assert [line.cart_item_id for line in snapshot.lines] == [first.id, second.id]
    assert [line.stock for line in snapshot.lines] == [5, 0]
    assert snapshot.lines[0].product_name == a.name
    assert snapshot.total == Decimal("25.00")


@pytest.mark.django_db
def test_cart_totals_always_carry_two_decimal_places():
    cart = CartFactory()
    CartItemFactory(cart=cart, quantity=2, price=Decimal("10.00"))

    totals = cart_totals(cart=cart)

    assert str(totals["subtotal"]) == "20.00"
    assert str(totals["total"]) == "20.00"
