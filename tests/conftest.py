import os
from datetime import timedelta
from decimal import Decimal
from pathlib import Path

import pytest
from faker import Faker

ADMIN_EMAIL = "admin@storefront.local"

ADDRESS = {
    "first_name": "Ada",
    "last_name": "Lovelace",
    "address_line1": "12 Analytical St",
    "address_line2": None,
    "city": "London",
    "postal_code": "N1 9GU",
    "country": "United Kingdom",
    "phone_number": "",
}


def pytest_addoption(parser):
    parser.addoption(
        "--env",
        action="store",
        default="test",
        help="Config environment to run tests on",
    )


def pytest_sessionstart(session):
    """Pytest hook to run before collecting tests.

    Fetch and activate the domain by pushing the associated domain_context. The activated domain can then be referred to elsewhere as `current_domain`
    """
    os.environ["PROTEAN_ENV"] = session.config.option.env

    from app import bootstrap

    storefront = bootstrap()
    storefront.domain_context().push()


def pytest_collection_modifyitems(config, items):
    """Automatically mark tests based on their directory location."""
    for item in items:
        test_path = Path(item.fspath)

        if "/domain/" in str(test_path):
            item.add_marker(pytest.mark.domain)
        elif "/application/" in str(test_path):
            item.add_marker(pytest.mark.application)
        elif "/integration/" in str(test_path):
            item.add_marker(pytest.mark.integration)
            # Integration tests are often slower
            if not any(m.name == "fast" for m in item.iter_markers()):
                item.add_marker(pytest.mark.slow)


@pytest.fixture(scope="session", autouse=True)
def setup_db(request):
    from shared.database import drop_db, setup_db
    from shared.domain import storefront

    setup_db(storefront)

    yield

    drop_db(storefront)


@pytest.fixture(autouse=True)
def run_around_tests():
    """Fixture to automatically cleanup infrastructure after every test"""
    from shared.config import configure

    configure(admin_emails=[ADMIN_EMAIL])

    yield

    from protean import current_domain

    from notifications.channel import reset_channels
    from payments.renderer import reset_renderer
    from shared.config import reset_settings

    # Clear all databases
    for _, provider in current_domain.providers.items():
        provider._data_reset()

    # Drain event stores
    current_domain.event_store.store._data_reset()

    reset_channels()
    reset_renderer()
    reset_settings()


@pytest.fixture(scope="session")
def fake():
    Faker.seed(1234)
    return Faker()


@pytest.fixture
def outbox():
    """The fake e-mail adapter's sent messages."""
    from notifications.channel import get_channel

    return get_channel().sent_emails


@pytest.fixture
def user():
    from shared.identity import UserIdentity

    return UserIdentity(user_id=1)


@pytest.fixture
def other_user():
    from shared.identity import UserIdentity

    return UserIdentity(user_id=2)


@pytest.fixture
def guest(fake):
    from shared.identity import GuestIdentity

    return GuestIdentity(session_token=fake.uuid4())


@pytest.fixture
def make_product(fake):
    from protean import current_domain

    from catalogue.product.product import Product

    def _make(price="10.00", stock=100, name=None, active=True):
        product = Product.create(
            name=name or fake.unique.catch_phrase()[:60],
            price=Decimal(price),
            stock_quantity=stock,
            description=fake.sentence(),
            image_url=fake.image_url(),
        )
        product.is_active = active
        current_domain.repository_for(Product).add(product)
        return product.id

    return _make


@pytest.fixture
def stock_of():
    from protean import current_domain

    from catalogue.product.product import Product

    def _stock(product_id):
        return current_domain.repository_for(Product).current_stock(product_id)

    return _stock


@pytest.fixture
def make_address(fake):
    from protean import current_domain

    from identity.address.address import Address

    def _make(owner, email=None):
        address = current_domain.repository_for(Address).add_for(
            owner,
            first_name=fake.first_name(),
            last_name=fake.last_name(),
            address_line1=fake.street_address(),
            city=fake.city(),
            postal_code=fake.postcode(),
            country=fake.country(),
            phone_number=fake.numerify("+## ### ### ###"),
            email=fake.unique.email() if email is None else email,
        )
        return address.id

    return _make


@pytest.fixture
def make_coupon():
    from protean import current_domain

    from promotions.coupon.management import CreateCoupon
    from shared.database import utc_now

    def _make(code=None, discount_type="Percentage", discount_value="10", **kwargs):
        now = utc_now()
        kwargs.setdefault("start_date", now - timedelta(days=1))
        kwargs.setdefault("end_date", now + timedelta(days=30))
        return current_domain.process(
            CreateCoupon(
                code=code,
                discount_type=discount_type,
                discount_value=Decimal(discount_value),
                **kwargs,
            ),
            asynchronous=False,
        )

    return _make


@pytest.fixture
def new_order():
    """Build an unsaved order: 2 x 10.00 + 1 x 5.00 unless told otherwise."""
    from identity.address.address import Address
    from ordering.order.order import Order, OrderLine, PaymentMethod
    from shared.identity import UserIdentity

    def _make(owner=None, lines=None, shipping_cost="10", discount="0", coupon_code=None):
        owner = owner or UserIdentity(user_id=1)
        address = Address(**owner.owner, **ADDRESS, email="ada@example.com")
        return Order.place(
            owner,
            lines=lines
            or [
                OrderLine.snapshot("notebook", "Notebook", "", 2, Decimal("10.00")),
                OrderLine.snapshot("pen", "Pen", "", 1, Decimal("5.00")),
            ],
            shipping_address=address,
            billing_address=address,
            payment_method=PaymentMethod.CREDIT_CARD,
            shipping_cost=Decimal(shipping_cost),
            contact_email=address.email,
            discount=Decimal(discount),
            coupon_code=coupon_code,
        )

    return _make


@pytest.fixture
def add_to_cart():
    from protean import current_domain

    from ordering.cart.items import AddToCart

    def _add(owner, product_id, quantity=1):
        return current_domain.process(
            AddToCart(**owner.owner, product_id=product_id, quantity=quantity),
            asynchronous=False,
        )

    return _add


@pytest.fixture
def place_order(make_address):
    """Place an order for ``owner``, creating a shipping address unless one is given."""
    from protean import current_domain

    from ordering.order.placement import PlaceOrder

    def _place(owner, shipping_address_id=None, payment_method="CreditCard", **kwargs):
        if shipping_address_id is None:
            shipping_address_id = make_address(owner)
        return current_domain.process(
            PlaceOrder(
                **owner.owner,
                shipping_address_id=shipping_address_id,
                payment_method=payment_method,
                **kwargs,
            ),
            asynchronous=False,
        )

    return _place


@pytest.fixture
def placed_order(user, make_product, add_to_cart, place_order):
    """A processing order for ``user``: 2 x 10.00 + 1 x 5.00."""
    add_to_cart(user, make_product(price="10.00", stock=10), 2)
    add_to_cart(user, make_product(price="5.00", stock=10), 1)
    return place_order(user)
