"""Domain events for the Coupon aggregate."""

from protean.fields import Identifier, Integer, String

from promotions.domain import promotions


@promotions.event(part_of="Coupon")
class CouponCreated:
    __version__ = 1

    coupon_id = Identifier(required=True)
    code = String(required=True)
    discount_type = String(required=True)
    discount_value = String(required=True)


@promotions.event(part_of="Coupon")
class CouponAssigned:
    """A targeted coupon was handed to a customer."""

    __version__ = 1

    coupon_id = Identifier(required=True)
    code = String(required=True)
    user_id = Integer(required=True)
    email = String()


@promotions.event(part_of="Coupon")
class CouponUnassigned:
    __version__ = 1

    coupon_id = Identifier(required=True)
    user_id = Integer(required=True)


@promotions.event(part_of="Coupon")
class CouponRedeemed:
    __version__ = 1

    coupon_id = Identifier(required=True)
    code = String(required=True)
    user_id = Integer()
    order_id = Identifier()
    usage_count = Integer(required=True)
