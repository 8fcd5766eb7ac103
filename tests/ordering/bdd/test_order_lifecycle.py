"""BDD tests for the order lifecycle."""

from decimal import Decimal

import pytest
from protean import current_domain
from pytest_bdd import given, parsers, scenarios, then, when

from ordering.cart.management import get_or_create_cart
from ordering.order.cancellation import CancelOrder
from ordering.order.fulfillment import UpdateOrderStatus
from ordering.order.queries import get_order, has_user_purchased_product
from shared.exceptions import StorefrontError

scenarios("features/order_lifecycle.feature")


@pytest.fixture
def products():
    return {}


@pytest.fixture
def outcome():
    return {}


# ---------------------------------------------------------------------------
# Given steps
# ---------------------------------------------------------------------------
@given(parsers.cfparse('a product "{name}" priced {price} with {stock:d} in stock'))
def _(products, make_product, name, price, stock):
    products[name] = make_product(price=price, stock=stock, name=name)


@given(parsers.cfparse('the customer has {quantity:d} "{name}" in the cart'))
def _(user, products, add_to_cart, name, quantity):
    add_to_cart(user, products[name], quantity)


@given("the customer placed the order", target_fixture="order")
def _(user, place_order):
    return place_order(user)


@given(parsers.cfparse('the order is marked "{status}"'), target_fixture="order")
@when(parsers.cfparse('the order is marked "{status}"'), target_fixture="order")
def _(order, status):
    return current_domain.process(UpdateOrderStatus(order_id=order.id, new_status=status), asynchronous=False)


# ---------------------------------------------------------------------------
# When steps
# ---------------------------------------------------------------------------
@when("the customer places the order", target_fixture="order")
def _(user, place_order):
    return place_order(user)


@when("the customer cancels the order", target_fixture="order")
def _(user, order, outcome):
    try:
        return current_domain.process(CancelOrder(order_id=order.id, **user.owner), asynchronous=False)
    except StorefrontError as exc:
        outcome["error"] = exc
        return order


# ---------------------------------------------------------------------------
# Then steps
# ---------------------------------------------------------------------------
@then(parsers.cfparse("the order totals are subtotal {subtotal}, shipping {shipping} and total {total}"))
def _(order, subtotal, shipping, total):
    assert order.subtotal == Decimal(subtotal)
    assert order.shipping_cost == Decimal(shipping)
    assert order.total_amount == Decimal(total)


@then(parsers.cfparse('the order status is "{status}"'))
def _(user, order, status):
    assert get_order(order.id, user).status == status


@then(parsers.cfparse('the payment status is "{status}"'))
def _(user, order, status):
    assert get_order(order.id, user).payment_status == status


@then(parsers.cfparse('"{name}" has {stock:d} in stock'))
def _(products, stock_of, name, stock):
    assert stock_of(products[name]) == stock


@then("the customer's cart is empty")
def _(user):
    assert get_or_create_cart(user).items == []


@then(parsers.cfparse('the customer has purchased "{name}"'))
def _(user, products, name):
    assert has_user_purchased_product(user.user_id, products[name])


@then(parsers.cfparse('the request fails with "{error}"'))
def _(outcome, error):
    assert type(outcome["error"]).__name__ == error
