"""Plain-text document renderer for development and testing.

Produces a readable text rendition of the invoice instead of a PDF and keeps
a record of every render so tests can assert on it.
"""

from payments.renderer.port import DocumentRendererPort
from shared.config import get_settings
from shared.money import format_money


class FakeDocumentRenderer(DocumentRendererPort):
    content_type = "text/plain"

    def __init__(self) -> None:
        self.rendered: list[dict] = []
        self.should_succeed: bool = True

    def configure(self, should_succeed: bool) -> None:
        self.should_succeed = should_succeed

    def render(self, order, invoice) -> bytes:
        if not self.should_succeed:
            raise RuntimeError("Document rendering failed")
        if not order.lines:
            raise ValueError("Order must contain at least one item")

        symbol = get_settings().currency_symbol
        address = order.billing_address
        lines = [
            "INVOICE",
            f"Invoice #: {invoice.invoice_number}",
            f"Order #: {order.order_number}",
            f"Date: {invoice.issue_date:%Y-%m-%d}",
            f"Status: {order.status}",
            "",
            "Bill to:",
            f"{address.first_name} {address.last_name}",
            address.address_line1,
        ]
        if address.address_line2:
            lines.append(address.address_line2)
        lines += [f"{address.postal_code} {address.city}", address.country, ""]

        for item in invoice.line_items:
            lines.append(
                f"{item.description}  x{item.quantity}  "
                f"{format_money(item.unit_price, symbol)}  {format_money(item.total, symbol)}"
            )
        lines += [
            "",
            f"Subtotal: {format_money(invoice.subtotal, symbol)}",
            f"Shipping: {format_money(invoice.shipping_cost, symbol)}",
        ]
        if invoice.discount:
            lines.append(f"Discount: -{format_money(invoice.discount, symbol)}")
        lines.append(f"Total: {format_money(invoice.total_amount, symbol)}")

        self.rendered.append({"invoice_number": invoice.invoice_number, "order_number": order.order_number})
        return "\n".join(lines).encode("utf-8")

    def reset(self) -> None:
        self.rendered.clear()
        self.should_succeed = True
