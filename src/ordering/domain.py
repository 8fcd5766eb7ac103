"""Ordering bounded context: shopping carts, checkout, and the order lifecycle."""

import structlog

from shared.domain import storefront

ordering = storefront

logger = structlog.get_logger(__name__)
