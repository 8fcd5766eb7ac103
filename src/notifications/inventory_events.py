"""Notifications reacts to Product events: low stock alerts for the back office."""

from protean.utils.mixins import handle

from catalogue.product.events import LowStockDetected
from catalogue.product.product import Product
from notifications.domain import logger, notifications
from notifications.notifier import OrderNotifier


@notifications.event_handler(part_of=Product)
class InventoryEventsHandler:
    @handle(LowStockDetected)
    def on_low_stock_detected(self, event: LowStockDetected) -> None:
        try:
            OrderNotifier().send_low_stock_alert(
                event.product_id,
                event.product_name,
                event.stock_quantity,
                threshold=event.threshold,
            )
        except Exception:
            logger.exception("notification_handler_failed", event="LowStockDetected", product_id=event.product_id)
