"""Coupon redemption: moves the usage counters exactly once per order.

Both counters are changed with conditional ``UPDATE`` statements. A zero row
count means a concurrent checkout got there first, so the caller's unit of
work must be rolled back.
"""

from protean import UnitOfWork
from protean.utils.globals import current_domain

from promotions.coupon.coupon import Coupon, CouponRedemption
from promotions.coupon.events import CouponRedeemed
from promotions.domain import logger
from shared.exceptions import CouponFailure, InvalidCoupon, UsageLimitExceeded


def mark_used(user_id: int | None, coupon_id, order_id=None) -> Coupon:
    """Record one redemption of ``coupon_id`` in the active unit of work.

    Raises ``UsageLimitExceeded`` when the global cap is already reached and
    ``InvalidCoupon`` when a targeted coupon is not (or no longer) available
    to ``user_id``.
    """
    coupons = current_domain.repository_for(Coupon)
    redemptions = current_domain.repository_for(CouponRedemption)

    if not coupons.increment_usage(coupon_id):
        coupons.get_coupon(coupon_id)
        logger.info("coupon_usage_limit_reached", coupon_id=coupon_id, user_id=user_id)
        raise UsageLimitExceeded()

    coupon = coupons.get_coupon(coupon_id)
    capped_public = False
    if coupon.is_targeted:
        if user_id is None:
            raise InvalidCoupon(CouponFailure.NOT_ASSIGNED, "This coupon is not assigned to you")
        if not coupons.consume_assignment(coupon_id, user_id, order_id):
            if coupon.assignment_for(user_id) is not None:
                raise InvalidCoupon(CouponFailure.ALREADY_USED, "You have already used this coupon")
            raise InvalidCoupon(CouponFailure.NOT_ASSIGNED, "This coupon is not assigned to you")
    elif coupon.is_capped and user_id is not None:
        if redemptions.has_redeemed(user_id, coupon_id):
            raise InvalidCoupon(CouponFailure.ALREADY_USED, "You have already used this coupon")
        capped_public = True

    redemptions.record(coupon_id, user_id, order_id, capped_public=capped_public)

    coupon.raise_(
        CouponRedeemed(
            coupon_id=coupon.id,
            code=coupon.code,
            user_id=user_id,
            order_id=order_id,
            usage_count=coupon.usage_count,
        )
    )
    coupons.add(coupon)
    logger.info("coupon_redeemed", code=coupon.code, user_id=user_id, order_id=order_id)
    return coupon


def mark_coupon_used(user_id: int | None, coupon_id, order_id=None) -> int:
    """Redeem ``coupon_id`` in a transaction of its own; returns the new usage count."""
    with UnitOfWork():
        return mark_used(user_id, coupon_id, order_id).usage_count
