"""Shopping Cart aggregate: the lines a customer or guest intends to buy.

Each cart belongs to exactly one identity: a registered user or a guest
session token. Adding or resizing a line is always checked against the
product's live stock, but nothing is reserved until checkout.
"""

import decimal
from datetime import UTC, datetime

from protean import Index, invariant
from protean.exceptions import ValidationError
from protean.fields import DateTime, Decimal, HasMany, Identifier, Integer, String

from catalogue.product.product import Product
from ordering.cart.events import (
    CartCleared,
    CartItemAdded,
    CartItemRemoved,
    CartQuantityUpdated,
    CartsMerged,
)
from ordering.domain import ordering
from shared.exceptions import InsufficientStock, NotFound
from shared.identity import GuestIdentity, UserIdentity
from shared.money import ZERO, to_money


@ordering.entity(part_of="ShoppingCart", indexes=[Index("shopping_cart_id", "product_id", unique=True)])
class CartItem:
    product_id = Identifier(required=True)
    quantity = Integer(required=True, min_value=1)
    unit_price = Decimal(required=True, min_value=0, precision=12, scale=2)
    added_at = DateTime()

    @property
    def line_total(self) -> decimal.Decimal:
        return to_money(self.unit_price * self.quantity)


@ordering.aggregate
class ShoppingCart:
    user_id = Integer(unique=True, min_value=1)
    session_token = String(unique=True, max_length=255)
    items = HasMany(CartItem)
    created_at = DateTime()
    updated_at = DateTime()

    @invariant.post
    def cart_must_have_exactly_one_owner(self):
        if (self.user_id is None) == (not self.session_token):
            raise ValidationError({"owner": ["A cart belongs to a user or to a guest session"]})

    # -------------------------------------------------------------------
    # Factory
    # -------------------------------------------------------------------
    @classmethod
    def create(cls, owner: UserIdentity | GuestIdentity):
        now = datetime.now(UTC)
        return cls(**owner.owner, created_at=now, updated_at=now)

    # -------------------------------------------------------------------
    # Queries
    # -------------------------------------------------------------------
    @property
    def subtotal(self) -> decimal.Decimal:
        return to_money(sum((item.line_total for item in self.items), ZERO))

    @property
    def total_items(self) -> int:
        return sum(item.quantity for item in self.items)

    @property
    def is_empty(self) -> bool:
        return not self.items

    def item_for_product(self, product_id) -> CartItem | None:
        return next((i for i in self.items if str(i.product_id) == str(product_id)), None)

    def item(self, item_id) -> CartItem | None:
        return next((i for i in self.items if str(i.id) == str(item_id)), None)

    # -------------------------------------------------------------------
    # Item management
    # -------------------------------------------------------------------
    def add_item(self, product: Product, quantity: int) -> CartItem:
        """Add ``quantity`` of ``product``, summing with an existing line.

        The combined quantity must fit in current stock. The line's price is
        refreshed from the catalogue on every call.
        """
        existing = self.item_for_product(product.id)
        new_quantity = quantity + (existing.quantity if existing else 0)
        if not product.has_stock_for(new_quantity):
            raise InsufficientStock(product.name, requested=new_quantity, available=product.stock_quantity)

        now = datetime.now(UTC)
        if existing:
            existing.quantity = new_quantity
            existing.unit_price = product.price
            item = existing
        else:
            item = CartItem(
                product_id=product.id,
                quantity=quantity,
                unit_price=product.price,
                added_at=now,
            )
            self.add_items(item)

        self.updated_at = now
        self.raise_(
            CartItemAdded(
                cart_id=self.id,
                product_id=product.id,
                quantity=quantity,
                line_quantity=new_quantity,
            )
        )
        return item

    def update_item_quantity(self, item_id, quantity: int, product: Product) -> CartItem:
        item = self.item(item_id)
        if item is None:
            raise NotFound({"cart_item_id": ["Cart item not found"]})

        if not product.has_stock_for(quantity):
            raise InsufficientStock(product.name, requested=quantity, available=product.stock_quantity)

        previous_quantity = item.quantity
        item.quantity = quantity
        self.updated_at = datetime.now(UTC)
        self.raise_(
            CartQuantityUpdated(
                cart_id=self.id,
                item_id=item.id,
                previous_quantity=previous_quantity,
                new_quantity=quantity,
            )
        )
        return item

    def remove_item(self, item_id) -> bool:
        """Remove a line; removing a line that is not there is a no-op."""
        item = self.item(item_id)
        if item is None:
            return False

        self.remove_items(item)
        self.updated_at = datetime.now(UTC)
        self.raise_(CartItemRemoved(cart_id=self.id, item_id=item.id, product_id=item.product_id))
        return True

    def clear(self) -> int:
        removed = len(self.items)
        if removed:
            self.remove_items(list(self.items))
            self.updated_at = datetime.now(UTC)
            self.raise_(CartCleared(cart_id=self.id, items_removed=removed))
        return removed

    # -------------------------------------------------------------------
    # Cart merging (guest → authenticated)
    # -------------------------------------------------------------------
    def merge_from(self, guest_cart: "ShoppingCart", products: dict[str, Product]) -> int:
        """Fold ``guest_cart``'s lines into this cart and return the units dropped.

        A product already in this cart has its quantities summed and clamped
        to the product's current stock; other lines move across as they are.
        The guest cart is left empty.
        """
        dropped = 0
        merged = 0
        for guest_item in list(guest_cart.items):
            existing = self.item_for_product(guest_item.product_id)
            if existing is None:
                self.add_items(
                    CartItem(
                        product_id=guest_item.product_id,
                        quantity=guest_item.quantity,
                        unit_price=guest_item.unit_price,
                        added_at=guest_item.added_at,
                    )
                )
            else:
                product = products[str(guest_item.product_id)]
                wanted = existing.quantity + guest_item.quantity
                kept = min(wanted, product.stock_quantity)
                # Never shrink what the user already had in their own cart
                kept = max(kept, existing.quantity)
                dropped += wanted - kept
                existing.quantity = kept
                existing.unit_price = product.price
            merged += 1

        guest_cart.clear()
        self.updated_at = datetime.now(UTC)
        self.raise_(
            CartsMerged(
                cart_id=self.id,
                user_id=self.user_id,
                items_merged_count=merged,
                units_dropped=dropped,
            )
        )
        return dropped
