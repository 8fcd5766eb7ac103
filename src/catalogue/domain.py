"""Catalogue bounded context: products, prices and stock counts.

Read-mostly records consulted by the cart and order flows. Stock is only
changed through the conditional updates in ``catalogue.product.stock`` so it
can never go negative under concurrent checkouts.
"""

import structlog

from shared.domain import storefront

catalogue = storefront

logger = structlog.get_logger(__name__)
