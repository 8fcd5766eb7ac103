"""Persistence access for orders."""

from protean.exceptions import ObjectNotFoundError
from protean.utils.globals import current_domain
from sqlalchemy import select

from ordering.domain import ordering
from ordering.order.order import Order, OrderStatus
from payments.invoice.invoice import Invoice
from shared.exceptions import NotFound
from shared.identity import GuestIdentity, UserIdentity

# Upper bound for "all orders of one owner" reads
MAX_OWNER_ORDERS = 1000


@ordering.repository(part_of=Order)
class OrderRepository:
    def get_order(self, order_id, lock: bool = False) -> Order:
        if lock:
            # Row lock on PostgreSQL; SQLite writers are already serialised
            model = self._dao.database_model_cls
            self._dao._get_session().execute(select(model.id).where(model.id == order_id).with_for_update())
        try:
            return self.get(order_id)
        except ObjectNotFoundError:
            raise NotFound({"order_id": ["Order not found"]}) from None

    def invoice_for(self, order_id) -> Invoice | None:
        return current_domain.repository_for(Invoice).for_order(order_id)

    def for_owner(self, owner: UserIdentity | GuestIdentity) -> list[Order]:
        return (
            self.query.filter(**owner.owner)
            .order_by(["-order_date", "-id"])
            .limit(MAX_OWNER_ORDERS)
            .all()
            .items
        )

    def page(self, status: OrderStatus | None, page: int, page_size: int) -> tuple[list[Order], int]:
        query = self.query
        if status is not None:
            query = query.filter(status=status.value)
        result = query.order_by(["-order_date", "-id"]).offset((page - 1) * page_size).limit(page_size).all()
        return result.items, result.total

    def has_delivered_product(self, user_id: int, product_id) -> bool:
        delivered = (
            self.query.filter(user_id=user_id, status=OrderStatus.DELIVERED.value)
            .limit(MAX_OWNER_ORDERS)
            .all()
            .items
        )
        return any(order.contains_product(product_id) for order in delivered)
