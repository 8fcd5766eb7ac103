"""Read models for invoices."""

from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel


class InvoiceSummary(BaseModel):
    model_config = {"frozen": True}

    id: str
    invoice_number: str
    issue_date: datetime
    total_amount: Decimal
    pdf_url: str = ""

    @classmethod
    def from_invoice(cls, invoice) -> "InvoiceSummary":
        return cls(
            id=invoice.id,
            invoice_number=invoice.invoice_number,
            issue_date=invoice.issue_date,
            total_amount=invoice.total_amount,
            pdf_url=invoice.pdf_url or "",
        )


class InvoiceLineItemView(BaseModel):
    model_config = {"frozen": True}

    description: str
    quantity: int
    unit_price: Decimal
    total: Decimal


class InvoiceView(InvoiceSummary):
    order_id: str
    subtotal: Decimal
    shipping_cost: Decimal
    discount: Decimal
    line_items: list[InvoiceLineItemView]

    @classmethod
    def from_invoice(cls, invoice) -> "InvoiceView":
        return cls(
            id=invoice.id,
            invoice_number=invoice.invoice_number,
            issue_date=invoice.issue_date,
            total_amount=invoice.total_amount,
            pdf_url=invoice.pdf_url or "",
            order_id=invoice.order_id,
            subtotal=invoice.subtotal,
            shipping_cost=invoice.shipping_cost,
            discount=invoice.discount,
            line_items=[
                InvoiceLineItemView(
                    description=item.description,
                    quantity=item.quantity,
                    unit_price=item.unit_price,
                    total=item.total,
                )
                for item in invoice.line_items
            ],
        )
