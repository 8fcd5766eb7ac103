"""Notifications bounded context: customer and back-office e-mails.

Reacts to the events committed by the ordering, payments, catalogue and
promotions contexts and sends the matching e-mail. A failed send is logged
and never reaches the operation that raised the event.
"""

import structlog

from shared.domain import storefront

notifications = storefront

logger = structlog.get_logger(__name__)
