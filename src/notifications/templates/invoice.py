"""Invoice template: sent once the invoice for an order exists."""

from notifications.types import NotificationType, RecipientType


class InvoiceTemplate:
    notification_type = NotificationType.INVOICE.value
    recipient_type = RecipientType.CUSTOMER.value

    @staticmethod
    def render(context: dict) -> dict:
        invoice_number = context.get("invoice_number", "N/A")
        order_number = context.get("order_number", "N/A")
        return {
            "subject": f"Invoice {invoice_number} - Order {order_number}",
            "body": (
                f"Hi {context.get('customer_name', 'there')},\n\n"
                f"Please find the details of invoice {invoice_number} for order {order_number} below.\n\n"
                f"Issue date: {context.get('issue_date', 'N/A')}\n"
                f"Subtotal: {context.get('subtotal', '0.00')}\n"
                f"Shipping: {context.get('shipping_cost', '0.00')}\n"
                f"Discount: {context.get('discount', '0.00')}\n"
                f"Total: {context.get('total_amount', '0.00')}\n"
            ),
        }
