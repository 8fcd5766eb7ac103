"""Low stock alert template: internal notification to administrators."""

from notifications.types import NotificationType, RecipientType


class LowStockAlertTemplate:
    notification_type = NotificationType.LOW_STOCK_ALERT.value
    recipient_type = RecipientType.INTERNAL.value

    @staticmethod
    def render(context: dict) -> dict:
        product_name = context.get("product_name", "N/A")
        return {
            "subject": f"Low Stock Alert - {product_name}",
            "body": (
                f"Low stock alert for: {product_name}\n\n"
                f"Product ID: {context.get('product_id', 'N/A')}\n"
                f"Current Stock: {context.get('stock_quantity', 0)}\n"
                f"Threshold: {context.get('threshold', 0)}\n\n"
                "Please restock this product soon."
            ),
        }
