"""Persistence access for shopping carts."""

from protean.exceptions import ObjectNotFoundError, ValidationError
from protean.utils.globals import current_domain
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError

from ordering.cart.cart import CartItem, ShoppingCart
from ordering.domain import logger, ordering
from shared.identity import GuestIdentity, UserIdentity


@ordering.repository(part_of=ShoppingCart)
class CartRepository:
    def for_owner(self, owner: UserIdentity | GuestIdentity, lock: bool = False) -> ShoppingCart | None:
        if lock:
            # Row lock on PostgreSQL; SQLite writers are already serialised
            model = self._dao.database_model_cls
            session = self._dao._get_session()
            session.execute(select(model.id).filter_by(**owner.owner).with_for_update())
        try:
            return self.find_by(**owner.owner)
        except ObjectNotFoundError:
            return None

    def get_or_create(self, owner: UserIdentity | GuestIdentity, lock: bool = False) -> ShoppingCart:
        cart = self.for_owner(owner, lock=lock)
        if cart is not None:
            return cart

        cart = ShoppingCart.create(owner)
        session = self._dao._get_session()
        try:
            with session.begin_nested():
                self.add(cart)
                self._dao._flush()
        except (IntegrityError, ValidationError):
            # Created concurrently by another request for the same owner
            logger.debug("cart_created_concurrently", owner=str(owner))
            return self.for_owner(owner, lock=lock)

        logger.debug("cart_created", cart_id=cart.id, owner=str(owner))
        return cart

    def for_item(self, item_id) -> ShoppingCart | None:
        items = current_domain.repository_for(CartItem)._dao.query.filter(id=item_id).all()
        if not items.items:
            return None
        try:
            return self.get(items.first.shopping_cart_id)
        except ObjectNotFoundError:
            return None

    def delete(self, cart: ShoppingCart) -> None:
        """Remove ``cart`` and its lines for good."""
        if cart.items:
            cart.remove_items(list(cart.items))
        self.add(cart)
        self._dao.delete(cart)
