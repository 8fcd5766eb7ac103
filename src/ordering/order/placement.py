"""Order placement: converts the caller's cart into an order and its invoice.

Everything below happens in a single unit of work: the order and its frozen
lines are written, stock is taken with conditional updates, the cart is
emptied, the coupon is redeemed and the invoice is derived. Any failure
rolls all of it back. Confirmation and invoice e-mails go out from the event
handlers once the unit of work commits.
"""

from decimal import Decimal

from protean import handle
from protean.exceptions import ValidationError
from protean.fields import Identifier, Integer, String
from protean.utils.globals import current_domain
from pydantic import EmailStr, TypeAdapter
from pydantic import ValidationError as PydanticValidationError

from catalogue.product.product import Product
from identity.address.address import Address
from ordering.cart.cart import ShoppingCart
from ordering.domain import logger, ordering
from ordering.order.order import Order, OrderLine, PaymentMethod
from ordering.order.views import OrderView
from payments.invoice.generation import derive_invoice
from promotions.coupon.usage import mark_used
from promotions.coupon.validation import CouponValidator
from shared.config import Settings, get_settings
from shared.exceptions import EmptyCart, InsufficientStock, NotFound
from shared.identity import UserIdentity, identity_of
from shared.money import ZERO, to_money

_EMAIL = TypeAdapter(EmailStr)


@ordering.command(part_of="Order")
class PlaceOrder:
    user_id = Integer(min_value=1)
    session_token = String(max_length=255)
    shipping_address_id = Identifier(required=True)
    # Defaults to the shipping address
    billing_address_id = Identifier()
    payment_method = String(required=True, choices=PaymentMethod)
    coupon_code = String(max_length=50)
    notes = String(max_length=1000)
    # Falls back to the shipping address's e-mail
    contact_email = String(max_length=255)


def calculate_shipping(subtotal: Decimal, settings: Settings | None = None) -> Decimal:
    """Flat fee below the free-shipping threshold, free at or above it."""
    settings = settings or get_settings()
    if subtotal >= settings.free_shipping_threshold:
        return ZERO
    return to_money(settings.flat_shipping_fee)


@ordering.command_handler(part_of=Order)
class PlaceOrderHandler:
    @handle(PlaceOrder)
    def place_order(self, command: PlaceOrder) -> OrderView:
        owner = identity_of(command)

        carts = current_domain.repository_for(ShoppingCart)
        cart = carts.for_owner(owner, lock=True)
        if cart is None or cart.is_empty:
            raise EmptyCart()

        addresses = current_domain.repository_for(Address)
        shipping_address = addresses.get_address(command.shipping_address_id, owner, field="shipping_address_id")
        billing_address = shipping_address
        if command.billing_address_id is not None:
            billing_address = addresses.get_address(command.billing_address_id, owner, field="billing_address_id")

        contact_email = command.contact_email or shipping_address.email
        if not contact_email:
            raise ValidationError({"contact_email": ["A contact e-mail is required"]})
        try:
            _EMAIL.validate_python(contact_email)
        except PydanticValidationError:
            raise ValidationError({"contact_email": ["Enter a valid e-mail address"]}) from None

        products = current_domain.repository_for(Product)
        catalogue = products.get_many(item.product_id for item in cart.items)
        lines = []
        for item in cart.items:
            product = catalogue.get(str(item.product_id))
            if product is None:
                raise NotFound({"product_id": ["Product not found"]})
            if not product.has_stock_for(item.quantity):
                raise InsufficientStock(product.name, requested=item.quantity, available=product.stock_quantity)
            lines.append(
                OrderLine.snapshot(
                    product_id=item.product_id,
                    product_name=product.name,
                    product_image_url=product.image_url,
                    quantity=item.quantity,
                    unit_price=item.unit_price,
                )
            )
        subtotal = to_money(sum((line.line_total for line in lines), ZERO))
        shipping_cost = calculate_shipping(subtotal)

        coupon = None
        discount = ZERO
        if command.coupon_code:
            validator = CouponValidator()
            if isinstance(owner, UserIdentity):
                validation = validator.validate_for_user(owner.user_id, command.coupon_code, subtotal)
            else:
                validation = validator.validate(command.coupon_code, subtotal)
            validation.raise_if_invalid()
            coupon = validation.coupon
            discount = validation.discount_amount

        order = Order.place(
            owner,
            lines=lines,
            shipping_address=shipping_address,
            billing_address=billing_address,
            payment_method=command.payment_method,
            shipping_cost=shipping_cost,
            contact_email=contact_email,
            discount=discount,
            coupon_code=coupon.code if coupon else None,
            notes=command.notes,
        )
        current_domain.repository_for(Order).add(order)

        for line in order.lines:
            products.decrement_stock(line.product_id, line.quantity, order_reference=order.order_number)

        cart.clear()
        carts.add(cart)

        if coupon is not None:
            user_id = owner.user_id if isinstance(owner, UserIdentity) else None
            mark_used(user_id, coupon.id, order.id)

        invoice = derive_invoice(order)

        logger.info(
            "order_placed",
            order_id=order.id,
            order_number=order.order_number,
            owner=str(owner),
            total_amount=str(order.total_amount),
            coupon_code=order.coupon_code,
        )
        return OrderView.from_order(order, invoice)
