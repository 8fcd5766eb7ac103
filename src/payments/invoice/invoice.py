"""Invoice aggregate: an immutable billing record derived once per order.

An invoice copies the order's amounts and lines at the moment it is issued.
It is never updated afterwards, not even when the order is cancelled.
"""

import uuid
from datetime import UTC, datetime

from protean.exceptions import ObjectNotFoundError
from protean.fields import DateTime, Decimal, HasMany, Identifier, Integer, String

from payments.domain import payments
from payments.invoice.events import InvoiceGenerated
from shared.money import to_money


def generate_invoice_number(now: datetime | None = None) -> str:
    now = now or datetime.now(UTC)
    return f"INV-{now:%Y%m%d}-{uuid.uuid4().hex[:8].upper()}"


@payments.entity(part_of="Invoice")
class InvoiceLineItem:
    description = String(required=True, max_length=500)
    quantity = Integer(required=True, min_value=1)
    unit_price = Decimal(required=True, min_value=0, precision=12, scale=2)
    total = Decimal(required=True, min_value=0, precision=12, scale=2)


@payments.aggregate
class Invoice:
    invoice_number = String(required=True, unique=True, max_length=30)
    order_id = Identifier(required=True, unique=True)
    issue_date = DateTime()
    subtotal = Decimal(required=True, min_value=0, precision=12, scale=2)
    shipping_cost = Decimal(required=True, min_value=0, precision=12, scale=2)
    discount = Decimal(required=True, min_value=0, precision=12, scale=2)
    total_amount = Decimal(required=True, min_value=0, precision=12, scale=2)
    pdf_url = String(max_length=500, default="")
    line_items = HasMany(InvoiceLineItem)

    @classmethod
    def derive(cls, order):
        """Build the invoice for ``order`` from its frozen lines and amounts."""
        now = datetime.now(UTC)
        invoice = cls(
            invoice_number=generate_invoice_number(now),
            order_id=order.id,
            issue_date=now,
            subtotal=to_money(order.subtotal),
            shipping_cost=to_money(order.shipping_cost),
            discount=to_money(order.discount),
            total_amount=to_money(order.total_amount),
            pdf_url="",
        )
        invoice.add_line_items(
            [
                InvoiceLineItem(
                    description=line.product_name,
                    quantity=line.quantity,
                    unit_price=line.unit_price,
                    total=line.line_total,
                )
                for line in order.lines
            ]
        )
        invoice.raise_(
            InvoiceGenerated(
                invoice_id=invoice.id,
                order_id=invoice.order_id,
                invoice_number=invoice.invoice_number,
                total_amount=invoice.total_amount,
            )
        )
        return invoice


@payments.repository(part_of=Invoice)
class InvoiceRepository:
    def for_order(self, order_id) -> Invoice | None:
        try:
            return self.find_by(order_id=order_id)
        except ObjectNotFoundError:
            return None
