"""Promotions bounded context: coupons, their assignment to customers, and redemption."""

import structlog

from shared.domain import storefront

promotions = storefront

logger = structlog.get_logger(__name__)
