"""Application tests for coupon validation."""

from datetime import timedelta
from decimal import Decimal

import pytest

from promotions.coupon.usage import mark_coupon_used
from promotions.coupon.validation import validate, validate_for_user
from shared.database import utc_now
from shared.exceptions import CouponFailure, InvalidCoupon, UsageLimitExceeded


class TestValidate:
    def test_valid_percentage_coupon(self, make_coupon):
        make_coupon(code="TWENTY", discount_type="Percentage", discount_value="20")

        result = validate("TWENTY", Decimal("100"))

        assert result.valid
        assert result.message == "Coupon applied successfully"
        assert result.discount_amount == Decimal("20.00")
        assert result.coupon.code == "TWENTY"

    def test_code_is_case_insensitive(self, make_coupon):
        make_coupon(code="Summer")
        assert validate("  summer ", Decimal("10")).valid

    def test_fixed_amount_is_clamped(self, make_coupon):
        make_coupon(code="FIFTEEN", discount_type="FixedAmount", discount_value="15")
        assert validate("FIFTEEN", Decimal("10")).discount_amount == Decimal("10.00")

    def test_unknown_code(self):
        result = validate("GHOST", Decimal("10"))
        assert not result.valid
        assert result.reason == CouponFailure.NOT_FOUND
        assert result.message == "Coupon code not found"

    def test_inactive(self, make_coupon):
        make_coupon(code="OFF", is_active=False)
        result = validate("OFF", Decimal("10"))
        assert result.reason == CouponFailure.INACTIVE
        assert result.message == "This coupon is no longer active"

    def test_not_yet_active(self, make_coupon):
        start = utc_now() + timedelta(days=3)
        make_coupon(code="SOON", start_date=start, end_date=start + timedelta(days=3))
        result = validate("SOON", Decimal("10"))
        assert result.reason == CouponFailure.NOT_YET_ACTIVE
        assert result.message == f"This coupon is valid from {start:%Y.%m.%d}"

    def test_expired(self, make_coupon):
        end = utc_now() - timedelta(days=1)
        make_coupon(code="OLD", start_date=end - timedelta(days=10), end_date=end)
        result = validate("OLD", Decimal("10"))
        assert result.reason == CouponFailure.EXPIRED
        assert result.message == "This coupon has expired"

    def test_below_minimum(self, make_coupon):
        make_coupon(code="BIG", minimum_order_amount=Decimal("75"))
        result = validate("BIG", Decimal("74.99"))
        assert result.reason == CouponFailure.BELOW_MINIMUM
        assert result.message == "Minimum order amount is €75.00"

    def test_minimum_is_inclusive(self, make_coupon):
        make_coupon(code="BIG", minimum_order_amount=Decimal("75"))
        assert validate("BIG", Decimal("75")).valid

    def test_checks_short_circuit_in_order(self, make_coupon):
        end = utc_now() - timedelta(days=1)
        make_coupon(
            code="MESSY",
            is_active=False,
            start_date=end - timedelta(days=10),
            end_date=end,
            minimum_order_amount=Decimal("500"),
        )
        assert validate("MESSY", Decimal("1")).reason == CouponFailure.INACTIVE

    def test_raise_if_invalid(self):
        with pytest.raises(InvalidCoupon) as exc:
            validate("GHOST", Decimal("1")).raise_if_invalid()
        assert exc.value.messages == {"coupon_code": ["Coupon code not found"]}


class TestValidateForUser:
    def test_public_coupon_needs_no_assignment(self, make_coupon):
        make_coupon(code="EVERYONE")
        assert validate_for_user(5, "EVERYONE", Decimal("10")).valid

    def test_assigned_coupon(self, make_coupon):
        make_coupon(code="VIP", user_ids=[5])
        assert validate_for_user(5, "VIP", Decimal("10")).valid

    def test_not_assigned(self, make_coupon):
        make_coupon(code="VIP", user_ids=[5])
        result = validate_for_user(6, "VIP", Decimal("10"))
        assert result.reason == CouponFailure.NOT_ASSIGNED
        assert result.message == "This coupon is not assigned to you"

    def test_already_used(self, make_coupon):
        coupon = make_coupon(code="VIP", user_ids=[5])
        mark_coupon_used(5, coupon.id)
        result = validate_for_user(5, "VIP", Decimal("10"))
        assert result.reason == CouponFailure.ALREADY_USED
        assert result.message == "You have already used this coupon"

    def test_capped_public_coupon_is_once_per_user(self, make_coupon):
        coupon = make_coupon(code="LIMITED", max_usage_count=10)
        mark_coupon_used(5, coupon.id)

        assert validate_for_user(5, "LIMITED", Decimal("10")).reason == CouponFailure.ALREADY_USED
        assert validate_for_user(6, "LIMITED", Decimal("10")).valid

    def test_uncapped_public_coupon_can_be_reused(self, make_coupon):
        coupon = make_coupon(code="FOREVER")
        mark_coupon_used(5, coupon.id)
        assert validate_for_user(5, "FOREVER", Decimal("10")).valid

    def test_exhausted_coupon(self, make_coupon):
        coupon = make_coupon(code="ONE", max_usage_count=1)
        mark_coupon_used(5, coupon.id)

        result = validate_for_user(6, "ONE", Decimal("10"))

        assert result.reason == CouponFailure.USAGE_EXCEEDED
        with pytest.raises(UsageLimitExceeded):
            result.raise_if_invalid()

    def test_validation_does_not_consume(self, make_coupon):
        make_coupon(code="VIP", user_ids=[5], max_usage_count=1)
        validate_for_user(5, "VIP", Decimal("10"))
        result = validate_for_user(5, "VIP", Decimal("10"))
        assert result.valid
        assert result.coupon.usage_count == 0
