"""Read models returned by the cart operations."""

from decimal import Decimal

from protean.utils.globals import current_domain
from pydantic import BaseModel

from catalogue.product.product import Product
from ordering.cart.cart import CartItem, ShoppingCart
from shared.money import to_money


class CartItemView(BaseModel):
    model_config = {"frozen": True}

    id: str
    product_id: str
    product_name: str
    product_image_url: str
    price: Decimal
    quantity: int
    total_price: Decimal
    stock_quantity: int

    @classmethod
    def from_item(cls, item: CartItem, product: Product) -> "CartItemView":
        return cls(
            id=item.id,
            product_id=item.product_id,
            product_name=product.name,
            product_image_url=product.image_url or "",
            price=to_money(item.unit_price),
            quantity=item.quantity,
            total_price=item.line_total,
            stock_quantity=product.stock_quantity,
        )


class CartView(BaseModel):
    model_config = {"frozen": True}

    id: str
    user_id: int | None = None
    session_token: str | None = None
    items: list[CartItemView]
    subtotal: Decimal
    total_items: int

    @classmethod
    def from_cart(cls, cart: ShoppingCart) -> "CartView":
        products = current_domain.repository_for(Product).get_many(item.product_id for item in cart.items)
        return cls(
            id=cart.id,
            user_id=cart.user_id,
            session_token=cart.session_token,
            items=[CartItemView.from_item(i, products[str(i.product_id)]) for i in cart.items],
            subtotal=cart.subtotal,
            total_items=cart.total_items,
        )
