"""Order read operations for customers and the back office."""

from typing import Annotated

from protean.utils.globals import current_domain
from pydantic import Field, validate_call

from ordering.order.order import Order, OrderStatus
from ordering.order.views import OrderView, PaginatedOrders
from shared.exceptions import Forbidden
from shared.identity import GuestIdentity, UserIdentity


def get_order(order_id, owner: UserIdentity | GuestIdentity | None = None, is_admin: bool = False) -> OrderView:
    """Return an order to its owner, or to an administrator."""
    repo = current_domain.repository_for(Order)
    order = repo.get_order(order_id)
    if not is_admin and (owner is None or not order.belongs_to(owner)):
        raise Forbidden({"order_id": ["You don't have permission to view this order"]})
    return OrderView.from_order(order, repo.invoice_for(order.id))


def list_user_orders(owner: UserIdentity | GuestIdentity) -> list[OrderView]:
    """The owner's orders, newest first."""
    repo = current_domain.repository_for(Order)
    return [OrderView.from_order(o, repo.invoice_for(o.id)) for o in repo.for_owner(owner)]


@validate_call
def list_orders(
    status: OrderStatus | None = None,
    page: Annotated[int, Field(ge=1)] = 1,
    page_size: Annotated[int, Field(ge=1, le=100)] = 20,
) -> PaginatedOrders:
    repo = current_domain.repository_for(Order)
    orders, total = repo.page(status, page, page_size)
    return PaginatedOrders(
        items=[OrderView.from_order(o, repo.invoice_for(o.id)) for o in orders],
        total_count=total,
        page=page,
        page_size=page_size,
    )


def has_user_purchased_product(user_id: int, product_id) -> bool:
    """True once an order of ``user_id`` containing ``product_id`` has been delivered."""
    return current_domain.repository_for(Order).has_delivered_product(user_id, product_id)
