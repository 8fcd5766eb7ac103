"""Cart management: retrieval, clearing, and guest cart merging."""

from protean import UnitOfWork, handle
from protean.fields import Integer, String
from protean.utils.globals import current_domain

from catalogue.product.product import Product
from ordering.cart.cart import ShoppingCart
from ordering.cart.views import CartView
from ordering.domain import logger, ordering
from shared.identity import GuestIdentity, UserIdentity, identity_of


@ordering.command(part_of="ShoppingCart")
class ClearCart:
    user_id = Integer(min_value=1)
    session_token = String(max_length=255)


@ordering.command(part_of="ShoppingCart")
class MergeGuestCart:
    """Fold a guest session's cart into a registered user's cart after sign-in."""

    user_id = Integer(required=True, min_value=1)
    session_token = String(required=True, max_length=255)


@ordering.command_handler(part_of=ShoppingCart)
class ManageCartHandler:
    @handle(ClearCart)
    def clear_cart(self, command: ClearCart) -> None:
        repo = current_domain.repository_for(ShoppingCart)
        cart = repo.for_owner(identity_of(command))
        if cart is not None and cart.clear():
            repo.add(cart)

    @handle(MergeGuestCart)
    def merge_guest_cart(self, command: MergeGuestCart) -> CartView:
        """Move the guest cart's lines into the user's cart, then delete the guest cart.

        Quantities for a product present in both carts are summed and clamped
        to current stock; the surplus is dropped. Missing guest cart: no-op.
        """
        repo = current_domain.repository_for(ShoppingCart)
        user_cart = repo.get_or_create(UserIdentity(user_id=command.user_id), lock=True)
        guest_cart = repo.for_owner(GuestIdentity(session_token=command.session_token), lock=True)
        if guest_cart is None:
            return CartView.from_cart(user_cart)

        products = current_domain.repository_for(Product).get_many(item.product_id for item in guest_cart.items)
        dropped = user_cart.merge_from(guest_cart, products)
        repo.add(user_cart)
        repo.delete(guest_cart)
        if dropped:
            logger.info(
                "cart_merge_clamped",
                cart_id=user_cart.id,
                user_id=command.user_id,
                units_dropped=dropped,
            )
        return CartView.from_cart(user_cart)


def get_or_create_cart(owner: UserIdentity | GuestIdentity) -> CartView:
    """Return the caller's cart, creating an empty one on first use."""
    with UnitOfWork():
        cart = current_domain.repository_for(ShoppingCart).get_or_create(owner)
        return CartView.from_cart(cart)
