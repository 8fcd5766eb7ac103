"""Order cancellation: command and handler."""

from protean import handle
from protean.fields import Identifier, Integer, String
from protean.utils.globals import current_domain

from catalogue.product.product import Product
from ordering.domain import logger, ordering
from ordering.order.order import Order
from ordering.order.views import OrderView
from shared.exceptions import Forbidden, NotFound
from shared.identity import identity_of

DEFAULT_REASON = "Cancelled by customer"


@ordering.command(part_of="Order")
class CancelOrder:
    order_id = Identifier(required=True)
    user_id = Integer(min_value=1)
    session_token = String(max_length=255)
    reason = String(min_length=1, max_length=500, default=DEFAULT_REASON)


def restock(order: Order) -> None:
    """Put every line's quantity back into stock."""
    products = current_domain.repository_for(Product)
    for line in order.lines:
        try:
            products.increment_stock(line.product_id, line.quantity, order_reference=order.order_number)
        except NotFound:
            logger.warning("restock_skipped_missing_product", order_id=order.id, product_id=line.product_id)


@ordering.command_handler(part_of=Order)
class CancelOrderHandler:
    @handle(CancelOrder)
    def cancel_order(self, command: CancelOrder) -> OrderView:
        owner = identity_of(command)
        repo = current_domain.repository_for(Order)
        order = repo.get_order(command.order_id, lock=True)
        if not order.belongs_to(owner):
            raise Forbidden({"order_id": ["You don't have permission to cancel this order"]})

        order.cancel(command.reason, cancelled_by=str(owner))
        repo.add(order)
        restock(order)

        logger.info("order_cancelled", order_id=order.id, cancelled_by=order.cancelled_by)
        return OrderView.from_order(order, repo.invoice_for(order.id))
