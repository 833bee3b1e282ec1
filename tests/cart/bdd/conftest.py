"""Shared BDD fixtures and step definitions for the shopping cart."""

import pytest
from protean.exceptions import ValidationError
from pytest_bdd import given, parsers, then

from storefront.cart.cart import ShoppingCart
from storefront.cart.events import (
    CartCleared,
    CartCouponApplied,
    CartCouponRemoved,
    CartItemAdded,
    CartItemRemoved,
    CartQuantityUpdated,
)
from storefront.catalogue.product import Product

# Map event name strings to classes for dynamic lookup in Then steps
_CART_EVENT_CLASSES = {
    "CartItemAdded": CartItemAdded,
    "CartQuantityUpdated": CartQuantityUpdated,
    "CartItemRemoved": CartItemRemoved,
    "CartCleared": CartCleared,
    "CartCouponApplied": CartCouponApplied,
    "CartCouponRemoved": CartCouponRemoved,
}


@pytest.fixture()
def error():
    """Container for captured validation errors."""
    return {"exc": None}


# ---------------------------------------------------------------------------
# Given steps
# ---------------------------------------------------------------------------
@given("a shopper's cart", target_fixture="cart")
def shopper_cart():
    cart = ShoppingCart.create(session_id="sess-001")
    cart._events.clear()
    return cart


@given(parsers.cfparse('a product "{name}" priced {price:d} with {stock:d} in stock'), target_fixture="product")
def product_in_stock(name, price, stock):
    return Product.create(
        name=name,
        description=f"{name} for testing.",
        price=price,
        category="rings",
        material="Gold",
        stock=stock,
    )


@given(parsers.cfparse("the cart holds {qty:d} of the product"), target_fixture="cart")
def cart_with_product(cart, product, qty):
    cart.add_item(product, qty)
    cart._events.clear()
    return cart


@given(parsers.cfparse('the coupon "{code}" is on the cart'), target_fixture="cart")
def cart_with_coupon(cart, code):
    cart.apply_coupon(code)
    cart._events.clear()
    return cart


# ---------------------------------------------------------------------------
# Then steps
# ---------------------------------------------------------------------------
@then(parsers.cfparse("the cart subtotal is {amount:d}"))
def cart_subtotal_is(cart, amount):
    assert cart.subtotal == amount


@then(parsers.cfparse("the cart discount is {amount:d}"))
def cart_discount_is(cart, amount):
    assert cart.discount == amount


@then(parsers.cfparse("the cart shipping is {amount:d}"))
def cart_shipping_is(cart, amount):
    assert cart.shipping == amount


@then(parsers.cfparse("the cart total is {amount:d}"))
def cart_total_is(cart, amount):
    assert cart.total == amount


@then(parsers.cfparse("the cart has {count:d} line"))
@then(parsers.cfparse("the cart has {count:d} lines"))
def cart_has_n_lines(cart, count):
    assert len(cart.items) == count


@then("the cart has no coupon")
def cart_has_no_coupon(cart):
    assert cart.coupon_code is None


@then(parsers.cfparse('the cart coupon is "{code}"'))
def cart_coupon_is(cart, code):
    assert cart.coupon_code == code


@then("the cart action fails with a validation error")
def cart_action_fails(error):
    assert error["exc"] is not None, "Expected a validation error but none was raised"
    assert isinstance(error["exc"], ValidationError)


@then(parsers.cfparse("a {event_type} cart event is raised"))
def cart_event_raised(cart, event_type):
    event_cls = _CART_EVENT_CLASSES[event_type]
    assert any(
        isinstance(e, event_cls) for e in cart._events
    ), f"No {event_type} event found. Events: {[type(e).__name__ for e in cart._events]}"
