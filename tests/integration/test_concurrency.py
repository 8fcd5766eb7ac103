"""Concurrent checkouts and redemptions against the shared database.

Each worker pushes its own domain context and runs a full unit of work on its
own connection, so the outcome depends only on the conditional updates and
unique indexes inside the transactions.
"""

from concurrent.futures import ThreadPoolExecutor
from threading import Barrier

import pytest
from protean import current_domain

from ordering.order.order import Order
from promotions.coupon.coupon import Coupon, CouponRedemption
from promotions.coupon.usage import mark_coupon_used
from shared.domain import storefront
from shared.exceptions import CouponFailure, InsufficientStock, InvalidCoupon, UsageLimitExceeded
from shared.identity import UserIdentity


def _run_concurrently(*calls):
    """Start every call at the same moment; return each result or raised error."""
    barrier = Barrier(len(calls))

    def _attempt(call):
        with storefront.domain_context():
            barrier.wait()
            try:
                return call()
            except Exception as exc:
                return exc

    with ThreadPoolExecutor(max_workers=len(calls)) as pool:
        return list(pool.map(_attempt, calls))


def test_coupon_with_single_use_is_redeemed_once(make_coupon):
    coupon = make_coupon(code="LAST-ONE", max_usage_count=1)

    outcomes = _run_concurrently(
        lambda: mark_coupon_used(1, coupon.id),
        lambda: mark_coupon_used(2, coupon.id),
    )

    assert [o for o in outcomes if isinstance(o, int)] == [1]
    assert sum(isinstance(o, UsageLimitExceeded) for o in outcomes) == 1
    assert current_domain.repository_for(Coupon).get(coupon.id).usage_count == 1


def test_capped_public_coupon_is_redeemed_once_per_customer(make_coupon):
    coupon = make_coupon(code="ONE-EACH", max_usage_count=10)

    outcomes = _run_concurrently(
        lambda: mark_coupon_used(7, coupon.id),
        lambda: mark_coupon_used(7, coupon.id),
    )

    rejected = [o for o in outcomes if isinstance(o, InvalidCoupon)]
    assert len(rejected) == 1
    assert rejected[0].reason == CouponFailure.ALREADY_USED
    assert current_domain.repository_for(Coupon).get(coupon.id).usage_count == 1
    assert current_domain.repository_for(CouponRedemption).query.all().total == 1


def test_last_unit_of_stock_is_sold_once(make_product, make_address, add_to_cart, place_order, stock_of):
    product_id = make_product(stock=1, name="Last Vase")
    buyers = [UserIdentity(user_id=11), UserIdentity(user_id=12)]
    addresses = {}
    for buyer in buyers:
        add_to_cart(buyer, product_id, 1)
        addresses[buyer.user_id] = make_address(buyer)

    outcomes = _run_concurrently(
        *[lambda b=buyer: place_order(b, shipping_address_id=addresses[b.user_id]) for buyer in buyers]
    )

    failures = [o for o in outcomes if isinstance(o, Exception)]
    assert len(failures) == 1
    assert isinstance(failures[0], InsufficientStock)
    assert stock_of(product_id) == 0
    assert current_domain.repository_for(Order).query.all().total == 1


@pytest.mark.parametrize("stock, buyers", [(3, 5)])
def test_stock_never_goes_negative(make_product, make_address, add_to_cart, place_order, stock_of, stock, buyers):
    product_id = make_product(stock=stock)
    identities = [UserIdentity(user_id=100 + n) for n in range(buyers)]
    addresses = {}
    for identity in identities:
        add_to_cart(identity, product_id, 1)
        addresses[identity.user_id] = make_address(identity)

    outcomes = _run_concurrently(
        *[lambda i=identity: place_order(i, shipping_address_id=addresses[i.user_id]) for identity in identities]
    )

    placed = [o for o in outcomes if not isinstance(o, Exception)]
    assert len(placed) == stock
    assert all(isinstance(o, InsufficientStock) for o in outcomes if isinstance(o, Exception))
    assert stock_of(product_id) == 0
