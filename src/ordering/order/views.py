"""Read models returned by the order operations."""

import math
from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, computed_field

from ordering.order.order import Order
from payments.invoice.views import InvoiceSummary


class OrderLineView(BaseModel):
    model_config = {"frozen": True}

    id: str
    product_id: str
    product_name: str
    product_image_url: str
    quantity: int
    unit_price: Decimal
    line_total: Decimal


class AddressView(BaseModel):
    model_config = {"frozen": True}

    address_id: str
    first_name: str
    last_name: str
    address_line1: str
    address_line2: str | None = None
    city: str
    postal_code: str
    country: str
    phone_number: str = ""

    @classmethod
    def from_snapshot(cls, address_id, snapshot) -> "AddressView":
        return cls(
            address_id=address_id,
            first_name=snapshot.first_name,
            last_name=snapshot.last_name,
            address_line1=snapshot.address_line1,
            address_line2=snapshot.address_line2,
            city=snapshot.city,
            postal_code=snapshot.postal_code,
            country=snapshot.country,
            phone_number=snapshot.phone_number or "",
        )


class OrderView(BaseModel):
    model_config = {"frozen": True}

    id: str
    order_number: str
    user_id: int | None = None
    is_guest_order: bool
    status: str
    payment_status: str
    payment_method: str
    subtotal: Decimal
    shipping_cost: Decimal
    discount: Decimal
    total_amount: Decimal
    coupon_code: str | None = None
    contact_email: str
    notes: str | None = None
    cancellation_reason: str | None = None
    cancelled_by: str | None = None
    order_date: datetime
    shipped_at: datetime | None = None
    delivered_at: datetime | None = None
    shipping_address: AddressView
    billing_address: AddressView
    lines: list[OrderLineView]
    invoice: InvoiceSummary | None = None

    @classmethod
    def from_order(cls, order: Order, invoice=None) -> "OrderView":
        return cls(
            id=order.id,
            order_number=order.order_number,
            user_id=order.user_id,
            is_guest_order=order.is_guest_order,
            status=order.status,
            payment_status=order.payment_status,
            payment_method=order.payment_method,
            subtotal=order.subtotal,
            shipping_cost=order.shipping_cost,
            discount=order.discount,
            total_amount=order.total_amount,
            coupon_code=order.coupon_code,
            contact_email=order.contact_email,
            notes=order.notes,
            cancellation_reason=order.cancellation_reason,
            cancelled_by=order.cancelled_by,
            order_date=order.order_date,
            shipped_at=order.shipped_at,
            delivered_at=order.delivered_at,
            shipping_address=AddressView.from_snapshot(order.shipping_address_id, order.shipping_address),
            billing_address=AddressView.from_snapshot(order.billing_address_id, order.billing_address),
            lines=[
                OrderLineView(
                    id=line.id,
                    product_id=line.product_id,
                    product_name=line.product_name,
                    product_image_url=line.product_image_url or "",
                    quantity=line.quantity,
                    unit_price=line.unit_price,
                    line_total=line.line_total,
                )
                for line in order.lines
            ],
            invoice=InvoiceSummary.from_invoice(invoice) if invoice is not None else None,
        )


class PaginatedOrders(BaseModel):
    model_config = {"frozen": True}

    items: list[OrderView]
    total_count: int
    page: int
    page_size: int

    @computed_field
    @property
    def total_pages(self) -> int:
        return math.ceil(self.total_count / self.page_size) if self.page_size else 0
