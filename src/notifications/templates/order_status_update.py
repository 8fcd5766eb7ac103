"""Order status update template: sent on every status transition."""

from notifications.types import NotificationType, RecipientType

_STATUS_MESSAGES = {
    "Shipped": "Good news! Your order is on its way.",
    "Delivered": "Your order has been delivered. Enjoy!",
    "Cancelled": "Your order has been cancelled and your payment will be refunded.",
}


class OrderStatusUpdateTemplate:
    notification_type = NotificationType.ORDER_STATUS_UPDATE.value
    recipient_type = RecipientType.CUSTOMER.value

    @staticmethod
    def render(context: dict) -> dict:
        order_number = context.get("order_number", "N/A")
        status = context.get("status", "Unknown")
        message = _STATUS_MESSAGES.get(status, f"Your order status is now {status}.")
        body = f"Hi {context.get('customer_name', 'there')},\n\n{message}\n\nOrder: {order_number}\nStatus: {status}\n"
        if context.get("reason"):
            body += f"Reason: {context['reason']}\n"
        return {"subject": f"Order Status Update - {order_number}", "body": body}
