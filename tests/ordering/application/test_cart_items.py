"""Application tests for cart item commands."""

import pytest
from protean import current_domain
from protean.exceptions import ValidationError

from ordering.cart.items import AddToCart, RemoveFromCart, UpdateCartQuantity
from ordering.cart.management import ClearCart, get_or_create_cart
from shared.exceptions import Forbidden, InsufficientStock, NotFound


def _update(cart_item_id, quantity, owner=None):
    caller = owner.owner if owner is not None else {}
    return current_domain.process(
        UpdateCartQuantity(cart_item_id=cart_item_id, quantity=quantity, **caller),
        asynchronous=False,
    )


def _remove(cart_item_id):
    current_domain.process(RemoveFromCart(cart_item_id=cart_item_id), asynchronous=False)


def _clear(owner):
    current_domain.process(ClearCart(**owner.owner), asynchronous=False)


class TestGetOrCreateCart:
    def test_creates_empty_cart_on_first_access(self, user):
        cart = get_or_create_cart(user)
        assert cart.user_id == user.user_id
        assert cart.items == []

    def test_returns_same_cart_afterwards(self, user):
        assert get_or_create_cart(user).id == get_or_create_cart(user).id

    def test_guest_and_user_carts_are_separate(self, user, guest):
        assert get_or_create_cart(user).id != get_or_create_cart(guest).id


class TestAddToCart:
    def test_add_item(self, user, make_product, add_to_cart):
        product_id = make_product(price="12.50", stock=5)
        cart = add_to_cart(user, product_id, 2)

        assert cart.total_items == 2
        assert cart.subtotal == 25
        assert cart.items[0].product_id == product_id
        assert cart.items[0].stock_quantity == 5

    def test_adding_twice_sums_on_one_line(self, guest, make_product, add_to_cart):
        product_id = make_product(stock=5)
        add_to_cart(guest, product_id, 2)
        cart = add_to_cart(guest, product_id, 3)

        assert len(cart.items) == 1
        assert cart.items[0].quantity == 5

    def test_summed_quantity_above_stock_is_rejected(self, user, make_product, add_to_cart):
        product_id = make_product(stock=3)
        add_to_cart(user, product_id, 2)

        with pytest.raises(InsufficientStock):
            add_to_cart(user, product_id, 2)

        assert get_or_create_cart(user).items[0].quantity == 2

    def test_unknown_product(self, user, add_to_cart):
        with pytest.raises(NotFound):
            add_to_cart(user, "no-such-product")

    def test_inactive_product(self, user, make_product, add_to_cart):
        with pytest.raises(NotFound):
            add_to_cart(user, make_product(active=False))

    def test_quantity_must_be_positive(self, user, make_product):
        with pytest.raises(ValidationError):
            AddToCart(**user.owner, product_id=make_product(), quantity=0)

    def test_caller_must_be_a_user_or_a_guest(self, make_product):
        with pytest.raises(ValidationError) as exc:
            current_domain.process(AddToCart(product_id=make_product(), quantity=1), asynchronous=False)
        assert "owner" in exc.value.messages


class TestUpdateQuantity:
    def test_update(self, user, make_product, add_to_cart):
        item_id = add_to_cart(user, make_product(stock=10), 1).items[0].id
        cart = _update(item_id, 4)
        assert cart.items[0].quantity == 4

    def test_update_above_stock(self, user, make_product, add_to_cart):
        item_id = add_to_cart(user, make_product(stock=2), 1).items[0].id
        with pytest.raises(InsufficientStock):
            _update(item_id, 3)
        assert get_or_create_cart(user).items[0].quantity == 1

    def test_zero_is_not_a_removal(self):
        with pytest.raises(ValidationError):
            UpdateCartQuantity(cart_item_id="item-1", quantity=0)

    def test_unknown_line(self):
        with pytest.raises(NotFound):
            _update("no-such-line", 1)

    def test_line_of_another_identity(self, user, other_user, make_product, add_to_cart):
        item_id = add_to_cart(user, make_product(), 1).items[0].id
        with pytest.raises(Forbidden):
            _update(item_id, 2, owner=other_user)

    def test_line_of_the_caller(self, guest, make_product, add_to_cart):
        item_id = add_to_cart(guest, make_product(), 1).items[0].id
        assert _update(item_id, 2, owner=guest).total_items == 2


class TestRemoveAndClear:
    def test_remove_is_idempotent(self, user, make_product, add_to_cart):
        item_id = add_to_cart(user, make_product(), 1).items[0].id

        _remove(item_id)
        _remove(item_id)

        assert get_or_create_cart(user).items == []

    def test_clear_is_idempotent(self, user, make_product, add_to_cart):
        add_to_cart(user, make_product(), 1)
        add_to_cart(user, make_product(), 2)

        _clear(user)
        _clear(user)

        assert get_or_create_cart(user).total_items == 0

    def test_clearing_a_cart_that_never_existed(self, guest):
        _clear(guest)
        assert get_or_create_cart(guest).items == []
