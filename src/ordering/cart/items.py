"""Cart item management: commands and handler."""

from protean import handle
from protean.fields import Identifier, Integer, String
from protean.utils.globals import current_domain

from catalogue.product.product import Product
from ordering.cart.cart import ShoppingCart
from ordering.cart.views import CartView
from ordering.domain import ordering
from shared.exceptions import Forbidden, NotFound
from shared.identity import GuestIdentity, UserIdentity, identity_of, owns


@ordering.command(part_of="ShoppingCart")
class AddToCart:
    user_id = Integer(min_value=1)
    session_token = String(max_length=255)
    product_id = Identifier(required=True)
    quantity = Integer(min_value=1, default=1)


@ordering.command(part_of="ShoppingCart")
class UpdateCartQuantity:
    cart_item_id = Identifier(required=True)
    quantity = Integer(required=True, min_value=1)
    # Optional caller; when given, the line must be in the caller's cart
    user_id = Integer(min_value=1)
    session_token = String(max_length=255)


@ordering.command(part_of="ShoppingCart")
class RemoveFromCart:
    cart_item_id = Identifier(required=True)


def _caller(command) -> UserIdentity | GuestIdentity | None:
    if command.user_id is None and not command.session_token:
        return None
    return identity_of(command)


@ordering.command_handler(part_of=ShoppingCart)
class ManageCartItemsHandler:
    @handle(AddToCart)
    def add_to_cart(self, command: AddToCart) -> CartView:
        product = current_domain.repository_for(Product).get_product(command.product_id)
        repo = current_domain.repository_for(ShoppingCart)
        cart = repo.get_or_create(identity_of(command))
        cart.add_item(product, command.quantity)
        repo.add(cart)
        return CartView.from_cart(cart)

    @handle(UpdateCartQuantity)
    def update_cart_quantity(self, command: UpdateCartQuantity) -> CartView:
        repo = current_domain.repository_for(ShoppingCart)
        cart = repo.for_item(command.cart_item_id)
        if cart is None:
            raise NotFound({"cart_item_id": ["Cart item not found"]})
        caller = _caller(command)
        if caller is not None and not owns(caller, cart.user_id, cart.session_token):
            raise Forbidden({"cart_item_id": ["Cart item does not belong to you"]})

        item = cart.item(command.cart_item_id)
        product = current_domain.repository_for(Product).get_product(item.product_id, active_only=False)
        cart.update_item_quantity(command.cart_item_id, command.quantity, product)
        repo.add(cart)
        return CartView.from_cart(cart)

    @handle(RemoveFromCart)
    def remove_from_cart(self, command: RemoveFromCart) -> None:
        repo = current_domain.repository_for(ShoppingCart)
        cart = repo.for_item(command.cart_item_id)
        if cart is not None and cart.remove_item(command.cart_item_id):
            repo.add(cart)
