"""Storefront domain: the composition root shared by every bounded context.

Catalogue, identity, ordering, promotions, payments and notifications all
register their elements on this one domain. Placing an order touches the
product, coupon, cart and order aggregates in a single transaction, and a
unit of work spans the providers of exactly one domain.

Configuration comes from ``src/domain.toml``; ``PROTEAN_ENV`` selects the
``[test]`` or ``[production]`` overlay and must be set before this module is
imported.
"""

from protean.domain import Domain

from shared.logging import configure_logging, get_logger

# Configure logging for the application
configure_logging()

logger = get_logger(__name__)

# Domain Composition Root
storefront = Domain(name="storefront")
