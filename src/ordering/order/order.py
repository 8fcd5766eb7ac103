"""Order aggregate: a frozen snapshot of a purchase and its fulfillment state.

State Machine:
    PROCESSING → SHIPPED → DELIVERED
    PROCESSING → CANCELLED

Lines and addresses are copied at placement time and never change; later
catalogue or address edits do not reach an existing order. Only the status
fields, timestamps, notes and cancellation details move after placement.
"""

import uuid
from datetime import UTC, datetime
from enum import Enum

from protean.exceptions import ValidationError
from protean.fields import (
    Boolean,
    DateTime,
    Decimal,
    HasMany,
    Identifier,
    Integer,
    String,
    Text,
    ValueObject,
)

from ordering.domain import ordering
from ordering.order.events import (
    OrderCancelled,
    OrderDelivered,
    OrderPlaced,
    OrderShipped,
)
from shared.exceptions import InvalidTransition, StorefrontError
from shared.identity import GuestIdentity, UserIdentity, owns
from shared.money import ZERO, to_money


class OrderStatus(Enum):
    PROCESSING = "Processing"
    SHIPPED = "Shipped"
    DELIVERED = "Delivered"
    CANCELLED = "Cancelled"


class PaymentStatus(Enum):
    PENDING = "Pending"
    PAID = "Paid"
    REFUNDED = "Refunded"


class PaymentMethod(Enum):
    CREDIT_CARD = "CreditCard"
    DEBIT_CARD = "DebitCard"
    BANK_TRANSFER = "BankTransfer"
    CASH = "Cash"


_VALID_TRANSITIONS = {
    OrderStatus.PROCESSING: {OrderStatus.SHIPPED, OrderStatus.CANCELLED},
    OrderStatus.SHIPPED: {OrderStatus.DELIVERED},
    OrderStatus.DELIVERED: set(),  # Terminal
    OrderStatus.CANCELLED: set(),  # Terminal
}


def generate_order_number(now: datetime | None = None) -> str:
    now = now or datetime.now(UTC)
    return f"ORD-{now:%Y%m%d}-{uuid.uuid4().hex[:8].upper()}"


# ---------------------------------------------------------------------------
# Value Objects
# ---------------------------------------------------------------------------
@ordering.value_object(part_of="Order")
class AddressSnapshot:
    """A delivery or billing address as it was when the order was placed."""

    first_name = String(required=True, max_length=100)
    last_name = String(required=True, max_length=100)
    address_line1 = String(required=True, max_length=200)
    address_line2 = String(max_length=200)
    city = String(required=True, max_length=100)
    postal_code = String(required=True, max_length=20)
    country = String(required=True, max_length=100)
    phone_number = String(max_length=20, default="")

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()


# ---------------------------------------------------------------------------
# Entities
# ---------------------------------------------------------------------------
@ordering.entity(part_of="Order")
class OrderLine:
    """Purchased product as it was at checkout. Deliberately not joined to the catalogue."""

    product_id = Identifier(required=True)
    product_name = String(required=True, max_length=200)
    product_image_url = String(max_length=500, default="")
    quantity = Integer(required=True, min_value=1)
    unit_price = Decimal(required=True, min_value=0, precision=12, scale=2)
    line_total = Decimal(required=True, min_value=0, precision=12, scale=2)

    @classmethod
    def snapshot(cls, product_id, product_name, product_image_url, quantity, unit_price):
        unit_price = to_money(unit_price)
        return cls(
            product_id=product_id,
            product_name=product_name,
            product_image_url=product_image_url or "",
            quantity=quantity,
            unit_price=unit_price,
            line_total=to_money(unit_price * quantity),
        )


# ---------------------------------------------------------------------------
# Aggregate Root
# ---------------------------------------------------------------------------
@ordering.aggregate
class Order:
    order_number = String(required=True, unique=True, max_length=30)
    user_id = Integer(min_value=1)
    session_token = String(max_length=255)
    is_guest_order = Boolean(default=False)
    status = String(choices=OrderStatus, default=OrderStatus.PROCESSING.value)
    payment_status = String(choices=PaymentStatus, default=PaymentStatus.PENDING.value)
    payment_method = String(required=True, choices=PaymentMethod)
    subtotal = Decimal(required=True, min_value=0, precision=12, scale=2)
    shipping_cost = Decimal(required=True, min_value=0, precision=12, scale=2)
    discount = Decimal(min_value=0, precision=12, scale=2, default=ZERO)
    total_amount = Decimal(required=True, min_value=0, precision=12, scale=2)
    coupon_code = String(max_length=50)
    shipping_address_id = Identifier(required=True)
    billing_address_id = Identifier(required=True)
    shipping_address = ValueObject(AddressSnapshot, required=True)
    billing_address = ValueObject(AddressSnapshot, required=True)
    contact_email = String(required=True, max_length=255)
    notes = Text()
    cancellation_reason = Text()
    cancelled_by = String(max_length=100)
    lines = HasMany(OrderLine)
    order_date = DateTime()
    shipped_at = DateTime()
    delivered_at = DateTime()
    updated_at = DateTime()

    # -------------------------------------------------------------------
    # Factory
    # -------------------------------------------------------------------
    @classmethod
    def place(
        cls,
        owner: UserIdentity | GuestIdentity,
        lines: list[OrderLine],
        shipping_address,
        billing_address,
        payment_method: PaymentMethod,
        shipping_cost,
        contact_email: str,
        discount=ZERO,
        coupon_code=None,
        notes=None,
    ):
        """Build a PROCESSING order from line snapshots and two address records."""
        if not lines:
            raise StorefrontError({"lines": ["An order needs at least one line"]})
        if not contact_email:
            raise ValidationError({"contact_email": ["A contact e-mail is required"]})

        subtotal = to_money(sum((line.line_total for line in lines), ZERO))
        shipping_cost = to_money(shipping_cost)
        discount = to_money(discount)
        now = datetime.now(UTC)
        order = cls(
            order_number=generate_order_number(now),
            **owner.owner,
            is_guest_order=isinstance(owner, GuestIdentity),
            status=OrderStatus.PROCESSING.value,
            payment_status=PaymentStatus.PENDING.value,
            payment_method=PaymentMethod(payment_method).value,
            subtotal=subtotal,
            shipping_cost=shipping_cost,
            discount=discount,
            total_amount=to_money(subtotal + shipping_cost - discount),
            coupon_code=coupon_code,
            shipping_address_id=shipping_address.id,
            billing_address_id=billing_address.id,
            shipping_address=AddressSnapshot(**shipping_address.snapshot()),
            billing_address=AddressSnapshot(**billing_address.snapshot()),
            contact_email=contact_email,
            notes=notes,
            order_date=now,
            updated_at=now,
        )
        order.add_lines(list(lines))
        order.raise_(
            OrderPlaced(
                order_id=order.id,
                order_number=order.order_number,
                user_id=order.user_id,
                session_token=order.session_token,
                contact_email=order.contact_email,
                subtotal=order.subtotal,
                shipping_cost=order.shipping_cost,
                discount=order.discount,
                total_amount=order.total_amount,
                coupon_code=order.coupon_code,
                line_count=len(lines),
            )
        )
        return order

    # -------------------------------------------------------------------
    # Queries
    # -------------------------------------------------------------------
    def belongs_to(self, owner: UserIdentity | GuestIdentity) -> bool:
        return owns(owner, self.user_id, self.session_token)

    def contains_product(self, product_id) -> bool:
        return any(str(line.product_id) == str(product_id) for line in self.lines)

    @property
    def current_status(self) -> OrderStatus:
        return OrderStatus(self.status)

    # -------------------------------------------------------------------
    # State machine
    # -------------------------------------------------------------------
    def _assert_can_transition(self, target_status: OrderStatus) -> None:
        current = self.current_status
        if target_status not in _VALID_TRANSITIONS.get(current, set()):
            raise InvalidTransition({"status": [f"Cannot transition from {current.value} to {target_status.value}"]})

    def _event_fields(self, previous: OrderStatus) -> dict:
        return {
            "order_id": self.id,
            "order_number": self.order_number,
            "previous_status": previous.value,
            "new_status": self.status,
            "payment_status": self.payment_status,
        }

    def ship(self) -> None:
        self._assert_can_transition(OrderStatus.SHIPPED)
        previous = self.current_status
        now = datetime.now(UTC)
        self.status = OrderStatus.SHIPPED.value
        self.shipped_at = now
        self.updated_at = now
        self.raise_(OrderShipped(**self._event_fields(previous)))

    def deliver(self) -> None:
        self._assert_can_transition(OrderStatus.DELIVERED)
        previous = self.current_status
        now = datetime.now(UTC)
        self.status = OrderStatus.DELIVERED.value
        self.payment_status = PaymentStatus.PAID.value
        self.delivered_at = now
        self.updated_at = now
        self.raise_(OrderDelivered(**self._event_fields(previous)))

    def cancel(self, reason: str, cancelled_by: str) -> None:
        """Cancel a processing order. Stock is restored by the caller."""
        if not reason or not reason.strip():
            raise StorefrontError({"reason": ["A cancellation reason is required"]})
        self._assert_can_transition(OrderStatus.CANCELLED)

        previous = self.current_status
        self.status = OrderStatus.CANCELLED.value
        self.payment_status = PaymentStatus.REFUNDED.value
        self.cancellation_reason = reason.strip()
        self.cancelled_by = cancelled_by
        self.updated_at = datetime.now(UTC)
        self.raise_(
            OrderCancelled(
                **self._event_fields(previous),
                reason=self.cancellation_reason,
                cancelled_by=cancelled_by,
            )
        )
