"""Application tests for customer order cancellation."""

from decimal import Decimal

import pytest
from protean import current_domain

from ordering.order.cancellation import CancelOrder
from ordering.order.fulfillment import UpdateOrderStatus
from payments.invoice.retrieval import get_invoice
from shared.exceptions import Forbidden, InvalidTransition, NotFound, StorefrontError


def _cancel(order_id, owner, **kwargs):
    return current_domain.process(CancelOrder(order_id=order_id, **owner.owner, **kwargs), asynchronous=False)


def _advance(order_id, status):
    return current_domain.process(UpdateOrderStatus(order_id=order_id, new_status=status), asynchronous=False)


class TestCancelOrder:
    def test_cancel_processing_order(self, user, placed_order):
        order = _cancel(placed_order.id, user)
        assert order.status == "Cancelled"
        assert order.payment_status == "Refunded"
        assert order.cancellation_reason == "Cancelled by customer"
        assert order.cancelled_by == "user:1"

    def test_custom_reason(self, user, placed_order):
        order = _cancel(placed_order.id, user, reason="Found it cheaper")
        assert order.cancellation_reason == "Found it cheaper"

    def test_stock_is_restored(self, user, make_product, add_to_cart, place_order, stock_of):
        first = make_product(stock=5)
        second = make_product(stock=8)
        add_to_cart(user, first, 2)
        add_to_cart(user, second, 3)
        order = place_order(user)
        assert (stock_of(first), stock_of(second)) == (3, 5)

        _cancel(order.id, user)

        assert (stock_of(first), stock_of(second)) == (5, 8)

    def test_invoice_is_left_untouched(self, user, placed_order):
        before = get_invoice(placed_order.id, user)
        _cancel(placed_order.id, user)
        after = get_invoice(placed_order.id, user)
        assert after == before
        assert after.total_amount == Decimal("35.00")

    def test_guest_can_cancel_own_order(self, guest, make_product, add_to_cart, place_order):
        add_to_cart(guest, make_product(), 1)
        order = place_order(guest)
        assert _cancel(order.id, guest).status == "Cancelled"


class TestCancelOrderFailures:
    def test_unknown_order(self, user):
        with pytest.raises(NotFound):
            _cancel("no-such-order", user)

    def test_order_of_someone_else(self, other_user, placed_order):
        with pytest.raises(Forbidden):
            _cancel(placed_order.id, other_user)

    def test_guest_cannot_cancel_a_user_order(self, guest, placed_order):
        with pytest.raises(Forbidden):
            _cancel(placed_order.id, guest)

    def test_delivered_order(self, user, placed_order, stock_of):
        _advance(placed_order.id, "Shipped")
        _advance(placed_order.id, "Delivered")
        product_id = placed_order.lines[0].product_id
        stock_before = stock_of(product_id)

        with pytest.raises(InvalidTransition):
            _cancel(placed_order.id, user)

        assert stock_of(product_id) == stock_before

    def test_shipped_order(self, user, placed_order):
        _advance(placed_order.id, "Shipped")
        with pytest.raises(InvalidTransition):
            _cancel(placed_order.id, user)

    def test_cancelling_twice_restores_stock_once(self, user, placed_order, stock_of):
        _cancel(placed_order.id, user)
        product_id = placed_order.lines[0].product_id
        stock_after_first = stock_of(product_id)

        with pytest.raises(InvalidTransition):
            _cancel(placed_order.id, user)

        assert stock_of(product_id) == stock_after_first

    def test_blank_reason_is_rejected(self, user, placed_order):
        with pytest.raises(StorefrontError) as exc:
            _cancel(placed_order.id, user, reason="   ")
        assert "reason" in exc.value.messages
