"""Shared BDD fixtures and step definitions for the shopping cart."""

import pytest
from pytest_bdd import given, parsers, then, when


@pytest.fixture()
def context():
    """Holds the product and results shared between steps of a scenario."""
    return {}


# ---------------------------------------------------------------------------
# Given steps
# ---------------------------------------------------------------------------
@given("an empty cart", target_fixture="cart_store")
def empty_cart(store):
    assert store.cart is None
    return store


@given(parsers.cfparse("{quantity:d} of a product priced {price:f} is added"))
@when(parsers.cfparse("{quantity:d} of a product priced {price:f} is added"))
def add_product(cart_store, context, make_product, quantity, price):
    context["product"] = make_product(price=price)
    cart_store.add_item(context["product"], quantity)


# ---------------------------------------------------------------------------
# When steps
# ---------------------------------------------------------------------------
@when(parsers.cfparse("the quantity of the product is set to {quantity:d}"))
def set_quantity(cart_store, context, quantity):
    cart_store.update_quantity(context["product"].id, quantity)


# ---------------------------------------------------------------------------
# Then steps
# ---------------------------------------------------------------------------
@then(parsers.cfparse("the {field:w} is {amount:f}"))
def amount_is(cart_store, field, amount):
    assert getattr(cart_store.state(), field) == pytest.approx(amount)


@then(parsers.cfparse("the cart has {count:d} line item"))
@then(parsers.cfparse("the cart has {count:d} line items"))
def line_item_count(cart_store, count):
    assert len(cart_store.state().items) == count
