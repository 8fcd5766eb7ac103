"""Domain events for the Order aggregate."""

from protean.fields import Decimal, Identifier, Integer, String

from ordering.domain import ordering


@ordering.event(part_of="Order")
class OrderPlaced:
    """A cart was converted into a durable order."""

    __version__ = 1

    order_id = Identifier(required=True)
    order_number = String(required=True)
    user_id = Integer()
    session_token = String()
    contact_email = String()
    subtotal = Decimal(required=True)
    shipping_cost = Decimal(required=True)
    discount = Decimal(required=True)
    total_amount = Decimal(required=True)
    coupon_code = String()
    line_count = Integer(required=True)


@ordering.event(part_of="Order")
class OrderShipped:
    __version__ = 1

    order_id = Identifier(required=True)
    order_number = String(required=True)
    previous_status = String(required=True)
    new_status = String(required=True)
    payment_status = String(required=True)


@ordering.event(part_of="Order")
class OrderDelivered:
    __version__ = 1

    order_id = Identifier(required=True)
    order_number = String(required=True)
    previous_status = String(required=True)
    new_status = String(required=True)
    payment_status = String(required=True)


@ordering.event(part_of="Order")
class OrderCancelled:
    """A processing order was cancelled and its stock handed back."""

    __version__ = 1

    order_id = Identifier(required=True)
    order_number = String(required=True)
    previous_status = String(required=True)
    new_status = String(required=True)
    payment_status = String(required=True)
    reason = String(required=True)
    cancelled_by = String(required=True)

