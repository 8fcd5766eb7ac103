"""Notification kinds sent by the storefront."""

from enum import Enum


class NotificationType(Enum):
    ORDER_CONFIRMATION = "OrderConfirmation"
    ORDER_STATUS_UPDATE = "OrderStatusUpdate"
    INVOICE = "Invoice"
    LOW_STOCK_ALERT = "LowStockAlert"
    COUPON_ASSIGNMENT = "CouponAssignment"


class RecipientType(Enum):
    CUSTOMER = "Customer"
    INTERNAL = "Internal"
