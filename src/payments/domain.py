"""Payments bounded context: invoices derived from placed orders and their rendering.

Payment capture itself happens outside this service; an order's payment
status is only moved by the order lifecycle.
"""

import structlog

from shared.domain import storefront

payments = storefront

logger = structlog.get_logger(__name__)
