"""Notifications reacts to Order events: confirmation and status e-mails."""

from protean.utils.mixins import handle

from notifications.domain import logger, notifications
from notifications.notifier import OrderNotifier
from ordering.order.events import OrderCancelled, OrderDelivered, OrderPlaced, OrderShipped
from ordering.order.order import Order
from ordering.order.queries import get_order


@notifications.event_handler(part_of=Order)
class OrderingEventsHandler:
    """Sends the customer e-mails for an order's lifecycle."""

    @handle(OrderPlaced)
    def on_order_placed(self, event: OrderPlaced) -> None:
        try:
            OrderNotifier().send_order_confirmation(get_order(event.order_id, is_admin=True))
        except Exception:
            logger.exception("notification_handler_failed", event="OrderPlaced", order_id=event.order_id)

    @handle(OrderShipped)
    def on_order_shipped(self, event: OrderShipped) -> None:
        self._status_update(event)

    @handle(OrderDelivered)
    def on_order_delivered(self, event: OrderDelivered) -> None:
        self._status_update(event)

    @handle(OrderCancelled)
    def on_order_cancelled(self, event: OrderCancelled) -> None:
        self._status_update(event)

    def _status_update(self, event) -> None:
        try:
            OrderNotifier().send_order_status_update(get_order(event.order_id, is_admin=True), event.new_status)
        except Exception:
            logger.exception(
                "notification_handler_failed",
                event=event.__class__.__name__,
                order_id=event.order_id,
            )
