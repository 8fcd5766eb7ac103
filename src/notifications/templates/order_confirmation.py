"""Order confirmation template: sent when an order is placed."""

from notifications.types import NotificationType, RecipientType


class OrderConfirmationTemplate:
    notification_type = NotificationType.ORDER_CONFIRMATION.value
    recipient_type = RecipientType.CUSTOMER.value

    @staticmethod
    def render(context: dict) -> dict:
        order_number = context.get("order_number", "N/A")
        store_name = context.get("store_name", "our store")
        lines = "\n".join(
            f"  {line['quantity']} x {line['product_name']} @ {line['unit_price']} = {line['line_total']}"
            for line in context.get("lines", [])
        )
        discount = context.get("discount")
        body = (
            f"Hi {context.get('customer_name', 'there')},\n\n"
            f"Thank you for your order #{order_number}.\n\n"
            f"{lines}\n\n"
            f"Subtotal: {context.get('subtotal', '0.00')}\n"
            f"Shipping: {context.get('shipping_cost', '0.00')}\n"
        )
        if discount:
            body += f"Discount ({context.get('coupon_code', '')}): -{discount}\n"
        body += (
            f"Total: {context.get('total_amount', '0.00')}\n\n"
            f"Payment method: {context.get('payment_method', 'N/A')}\n\n"
            "We'll let you know as soon as your order ships.\n\n"
            f"Thank you for shopping with {store_name}!"
        )
        return {"subject": f"Order Confirmation - {order_number}", "body": body}
