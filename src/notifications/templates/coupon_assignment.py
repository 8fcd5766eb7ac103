"""Coupon assignment template: sent when a coupon is handed to a customer."""

from notifications.types import NotificationType, RecipientType


class CouponAssignmentTemplate:
    notification_type = NotificationType.COUPON_ASSIGNMENT.value
    recipient_type = RecipientType.CUSTOMER.value

    @staticmethod
    def render(context: dict) -> dict:
        code = context.get("code", "N/A")
        body = (
            "You have received a new coupon!\n\n"
            f"Code: {code}\n"
            f"Discount: {context.get('discount', 'N/A')}\n"
        )
        if context.get("description"):
            body += f"{context['description']}\n"
        if context.get("minimum_order_amount"):
            body += f"Minimum order amount: {context['minimum_order_amount']}\n"
        body += f"Valid from {context.get('start_date', 'N/A')} until {context.get('end_date', 'N/A')}\n"
        return {"subject": f"You've received a coupon: {code}", "body": body}
