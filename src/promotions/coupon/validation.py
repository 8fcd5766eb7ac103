"""Coupon validation: decides whether a code applies to an order amount.

Validation is read-only. Passing validation reserves nothing; the usage
counters are only moved by ``mark_used`` inside the order's transaction,
where the conditional updates settle any race between two checkouts.
"""

from datetime import datetime
from decimal import Decimal

import structlog
from protean.utils.globals import current_domain
from pydantic import BaseModel

from promotions.coupon.coupon import Coupon, CouponRedemption
from shared.config import get_settings
from shared.database import as_utc, utc_now
from shared.exceptions import CouponFailure, InvalidCoupon, UsageLimitExceeded
from shared.money import ZERO, format_money, to_money

logger = structlog.get_logger(__name__)

MESSAGES = {
    CouponFailure.NOT_FOUND: "Coupon code not found",
    CouponFailure.INACTIVE: "This coupon is no longer active",
    CouponFailure.EXPIRED: "This coupon has expired",
    CouponFailure.USAGE_EXCEEDED: "This coupon has reached its maximum usage limit",
    CouponFailure.NOT_ASSIGNED: "This coupon is not assigned to you",
    CouponFailure.ALREADY_USED: "You have already used this coupon",
}
SUCCESS_MESSAGE = "Coupon applied successfully"


class CouponValidation(BaseModel):
    model_config = {"frozen": True, "arbitrary_types_allowed": True}

    valid: bool
    message: str
    reason: CouponFailure | None = None
    discount_amount: Decimal = ZERO
    coupon: Coupon | None = None

    @classmethod
    def rejected(cls, reason: CouponFailure, message: str | None = None, coupon: Coupon | None = None):
        return cls(valid=False, reason=reason, message=message or MESSAGES[reason], coupon=coupon)

    def raise_if_invalid(self) -> "CouponValidation":
        if not self.valid:
            if self.reason == CouponFailure.USAGE_EXCEEDED:
                raise UsageLimitExceeded(self.message)
            raise InvalidCoupon(self.reason, self.message)
        return self


class CouponValidator:
    def __init__(self, now: datetime | None = None):
        self.now = now or utc_now()
        self.currency_symbol = get_settings().currency_symbol
        self.coupons = current_domain.repository_for(Coupon)

    def validate(self, code: str, order_amount) -> CouponValidation:
        """Check a code for anyone, guest checkout included."""
        coupon = self.coupons.by_code(code)
        if coupon is None:
            return CouponValidation.rejected(CouponFailure.NOT_FOUND)
        return self._check_terms(coupon, to_money(order_amount), enforce_cap=False)

    def validate_for_user(self, user_id: int, code: str, order_amount) -> CouponValidation:
        """Check a code for a registered customer, honouring assignments and usage caps."""
        coupon = self.coupons.by_code(code)
        if coupon is None:
            return CouponValidation.rejected(CouponFailure.NOT_FOUND)

        if coupon.is_targeted:
            assignment = coupon.assignment_for(user_id)
            if assignment is None:
                return CouponValidation.rejected(CouponFailure.NOT_ASSIGNED, coupon=coupon)
            if assignment.is_used:
                return CouponValidation.rejected(CouponFailure.ALREADY_USED, coupon=coupon)
        elif coupon.is_capped and current_domain.repository_for(CouponRedemption).has_redeemed(user_id, coupon.id):
            return CouponValidation.rejected(CouponFailure.ALREADY_USED, coupon=coupon)

        return self._check_terms(coupon, to_money(order_amount), enforce_cap=True)

    def _check_terms(self, coupon: Coupon, order_amount: Decimal, enforce_cap: bool) -> CouponValidation:
        if not coupon.is_active:
            return CouponValidation.rejected(CouponFailure.INACTIVE, coupon=coupon)

        start_date, end_date = as_utc(coupon.start_date), as_utc(coupon.end_date)
        if self.now < start_date:
            return CouponValidation.rejected(
                CouponFailure.NOT_YET_ACTIVE,
                f"This coupon is valid from {start_date:%Y.%m.%d}",
                coupon=coupon,
            )

        if self.now > end_date:
            return CouponValidation.rejected(CouponFailure.EXPIRED, coupon=coupon)

        if coupon.minimum_order_amount is not None and order_amount < coupon.minimum_order_amount:
            return CouponValidation.rejected(
                CouponFailure.BELOW_MINIMUM,
                f"Minimum order amount is {format_money(coupon.minimum_order_amount, self.currency_symbol)}",
                coupon=coupon,
            )

        if enforce_cap and coupon.usage_exhausted:
            return CouponValidation.rejected(CouponFailure.USAGE_EXCEEDED, coupon=coupon)

        discount = coupon.discount_for(order_amount)
        logger.debug("coupon_validated", code=coupon.code, order_amount=str(order_amount), discount=str(discount))
        return CouponValidation(valid=True, message=SUCCESS_MESSAGE, discount_amount=discount, coupon=coupon)


def validate(code: str, order_amount) -> CouponValidation:
    return CouponValidator().validate(code, order_amount)


def validate_for_user(user_id: int, code: str, order_amount) -> CouponValidation:
    return CouponValidator().validate_for_user(user_id, code, order_amount)
