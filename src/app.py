"""Storefront core application wiring.

Call :func:`bootstrap` once per process before using any operation: it
registers every element on the storefront domain, initialises it and tunes
the database engines. ``PROTEAN_ENV`` selects the configuration overlay and
must be set before the first import of a domain module.

    from app import bootstrap
    storefront = bootstrap()
    with storefront.domain_context():
        ...
"""

import structlog
from protean.domain import Domain

from shared.database import configure_providers, setup_db
from shared.domain import storefront
from shared.logging import current_env

logger = structlog.get_logger(__name__)

# Modules holding domain elements; importing them registers the elements
ELEMENT_MODULES = (
    "catalogue.product.product",
    "catalogue.product.events",
    "catalogue.product.stock",
    "identity.address.address",
    "ordering.cart.cart",
    "ordering.cart.events",
    "ordering.cart.repository",
    "ordering.cart.items",
    "ordering.cart.management",
    "ordering.order.order",
    "ordering.order.events",
    "ordering.order.repository",
    "ordering.order.placement",
    "ordering.order.cancellation",
    "ordering.order.fulfillment",
    "promotions.coupon.coupon",
    "promotions.coupon.events",
    "promotions.coupon.repository",
    "promotions.coupon.management",
    "payments.invoice.invoice",
    "payments.invoice.events",
    "payments.invoice.generation",
    "notifications.ordering_events",
    "notifications.payment_events",
    "notifications.inventory_events",
    "notifications.promotion_events",
)

_initialised = False


def bootstrap(create_schema: bool = False) -> Domain:
    global _initialised
    if not _initialised:
        for module in ELEMENT_MODULES:
            __import__(module)
        storefront.init(traverse=False)
        with storefront.domain_context():
            configure_providers(storefront)
        _initialised = True

    if create_schema:
        setup_db(storefront)

    logger.info("storefront_ready", env=current_env())
    return storefront
