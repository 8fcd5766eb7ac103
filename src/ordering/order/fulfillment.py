"""Order fulfillment: back-office status updates.

Shipping and delivering are only allowed once the order has an invoice.
"""

from protean import handle
from protean.fields import Identifier, String
from protean.utils.globals import current_domain

from ordering.domain import logger, ordering
from ordering.order.cancellation import restock
from ordering.order.order import Order, OrderStatus
from ordering.order.views import OrderView
from shared.exceptions import InvalidState, InvalidTransition

ADMIN_CANCELLATION_REASON = "Cancelled by administrator"


@ordering.command(part_of="Order")
class UpdateOrderStatus:
    order_id = Identifier(required=True)
    new_status = String(required=True, choices=OrderStatus)
    reason = String(max_length=500)
    changed_by = String(max_length=100, default="admin")


@ordering.command_handler(part_of=Order)
class UpdateOrderStatusHandler:
    @handle(UpdateOrderStatus)
    def update_order_status(self, command: UpdateOrderStatus) -> OrderView:
        repo = current_domain.repository_for(Order)
        order = repo.get_order(command.order_id, lock=True)
        invoice = repo.invoice_for(order.id)

        match OrderStatus(command.new_status):
            case OrderStatus.SHIPPED | OrderStatus.DELIVERED if invoice is None:
                raise InvalidState(
                    {
                        "status": [
                            "Cannot ship or deliver order without generating an invoice first"
                        ]
                    }
                )
            case OrderStatus.SHIPPED:
                order.ship()
            case OrderStatus.DELIVERED:
                order.deliver()
            case OrderStatus.CANCELLED:
                order.cancel(command.reason or ADMIN_CANCELLATION_REASON, cancelled_by=command.changed_by)
                restock(order)
            case _:
                raise InvalidTransition(
                    {"status": [f"Cannot transition from {order.status} to {command.new_status}"]}
                )

        repo.add(order)
        logger.info(
            "order_status_updated",
            order_id=order.id,
            status=order.status,
            payment_status=order.payment_status,
        )
        return OrderView.from_order(order, invoice)
