"""Coupon aggregate, its per-customer assignment ledger and redemption log.

A coupon with no ``UserCoupon`` rows is public: anyone may apply it. Once it
has at least one assignment it becomes targeted and only assigned customers
with an unused assignment may redeem it.
"""

import decimal
from datetime import UTC, datetime
from enum import Enum

from protean import Index, Q
from protean.fields import (
    Boolean,
    DateTime,
    Decimal,
    HasMany,
    Identifier,
    Integer,
    String,
)

from promotions.coupon.events import CouponAssigned, CouponCreated, CouponUnassigned
from promotions.domain import promotions
from shared.exceptions import StorefrontError
from shared.money import ZERO, to_money


class DiscountType(Enum):
    PERCENTAGE = "Percentage"
    FIXED_AMOUNT = "FixedAmount"


@promotions.entity(part_of="Coupon", indexes=[Index("coupon_id", "user_id", unique=True, name="uq_user_coupon")])
class UserCoupon:
    """Assignment of a targeted coupon to one customer."""

    user_id = Integer(required=True, min_value=1)
    is_used = Boolean(default=False)
    assigned_date = DateTime()
    used_date = DateTime()
    order_id = Identifier()


@promotions.aggregate
class Coupon:
    code = String(required=True, unique=True, max_length=50)
    description = String(max_length=500, default="")
    discount_type = String(required=True, choices=DiscountType)
    discount_value = Decimal(required=True, min_value=0, precision=12, scale=2)
    minimum_order_amount = Decimal(min_value=0, precision=12, scale=2)
    start_date = DateTime(required=True)
    end_date = DateTime(required=True)
    is_active = Boolean(default=True)
    max_usage_count = Integer(min_value=1)
    usage_count = Integer(min_value=0, default=0)
    assignments = HasMany(UserCoupon)
    created_at = DateTime()

    @classmethod
    def create(
        cls,
        code,
        discount_type,
        discount_value,
        start_date,
        end_date,
        description="",
        minimum_order_amount=None,
        max_usage_count=None,
        is_active=True,
    ):
        discount_type = DiscountType(discount_type)
        discount_value = to_money(discount_value)

        errors = {}
        if end_date <= start_date:
            errors["end_date"] = ["End date must be after start date"]
        if discount_value <= 0:
            errors["discount_value"] = ["Discount value must be greater than zero"]
        elif discount_type == DiscountType.PERCENTAGE and discount_value > 100:
            errors["discount_value"] = ["Percentage discount cannot exceed 100"]
        if max_usage_count is not None and max_usage_count < 1:
            errors["max_usage_count"] = ["Maximum usage count must be at least 1"]
        if errors:
            raise StorefrontError(errors)

        coupon = cls(
            code=code.strip().upper(),
            description=description,
            discount_type=discount_type.value,
            discount_value=discount_value,
            minimum_order_amount=(
                to_money(minimum_order_amount) if minimum_order_amount is not None else None
            ),
            start_date=start_date,
            end_date=end_date,
            is_active=is_active,
            max_usage_count=max_usage_count,
            usage_count=0,
            created_at=datetime.now(UTC),
        )
        coupon.raise_(
            CouponCreated(
                coupon_id=coupon.id,
                code=coupon.code,
                discount_type=coupon.discount_type,
                discount_value=str(coupon.discount_value),
            )
        )
        return coupon

    @property
    def is_capped(self) -> bool:
        return self.max_usage_count is not None

    @property
    def is_targeted(self) -> bool:
        return bool(self.assignments)

    @property
    def usage_exhausted(self) -> bool:
        return self.is_capped and self.usage_count >= self.max_usage_count

    def assignment_for(self, user_id) -> UserCoupon | None:
        return next((a for a in self.assignments if a.user_id == user_id), None)

    def discount_for(self, order_amount) -> decimal.Decimal:
        """Discount granted on ``order_amount``, never more than the amount itself."""
        order_amount = to_money(order_amount)
        if DiscountType(self.discount_type) == DiscountType.PERCENTAGE:
            discount = order_amount * self.discount_value / decimal.Decimal(100)
        else:
            discount = self.discount_value
        return to_money(max(ZERO, min(discount, order_amount)))

    def assign(self, user_id: int, email: str | None = None) -> bool:
        """Hand the coupon to ``user_id``; False when they already hold it."""
        if self.assignment_for(user_id) is not None:
            return False
        self.add_assignments(UserCoupon(user_id=user_id, is_used=False, assigned_date=datetime.now(UTC)))
        self.raise_(CouponAssigned(coupon_id=self.id, code=self.code, user_id=user_id, email=email))
        return True

    def unassign(self, user_id: int) -> bool:
        """Withdraw an unused assignment; used ones stay on record."""
        assignment = self.assignment_for(user_id)
        if assignment is None or assignment.is_used:
            return False
        self.remove_assignments(assignment)
        self.raise_(CouponUnassigned(coupon_id=self.id, user_id=user_id))
        return True


@promotions.aggregate(
    indexes=[
        Index(
            "coupon_id",
            "user_id",
            unique=True,
            where=Q(capped_public=True),
            name="uq_capped_public_redemption",
        )
    ]
)
class CouponRedemption:
    """One row per successful redemption; drives the once-per-user rule for public coupons.

    ``capped_public`` marks a registered customer's redemption of a public
    coupon with a usage cap. The partial unique index allows one such row per
    customer and coupon, so two concurrent checkouts cannot both pass.
    """

    coupon_id = Identifier(required=True)
    user_id = Integer(min_value=1)
    order_id = Identifier()
    capped_public = Boolean(default=False)
    redeemed_at = DateTime()
