"""Template registry: maps NotificationType to template classes."""

from notifications.templates.coupon_assignment import CouponAssignmentTemplate
from notifications.templates.invoice import InvoiceTemplate
from notifications.templates.low_stock_alert import LowStockAlertTemplate
from notifications.templates.order_confirmation import OrderConfirmationTemplate
from notifications.templates.order_status_update import OrderStatusUpdateTemplate
from notifications.types import NotificationType

TEMPLATE_REGISTRY: dict[str, type] = {
    NotificationType.ORDER_CONFIRMATION.value: OrderConfirmationTemplate,
    NotificationType.ORDER_STATUS_UPDATE.value: OrderStatusUpdateTemplate,
    NotificationType.INVOICE.value: InvoiceTemplate,
    NotificationType.LOW_STOCK_ALERT.value: LowStockAlertTemplate,
    NotificationType.COUPON_ASSIGNMENT.value: CouponAssignmentTemplate,
}


def get_template(notification_type: str):
    """Look up a template class by notification type string."""
    template_cls = TEMPLATE_REGISTRY.get(notification_type)
    if template_cls is None:
        raise ValueError(f"No template registered for notification type: {notification_type}")
    return template_cls
