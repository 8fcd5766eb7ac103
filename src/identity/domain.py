"""Identity bounded context: the address book consulted at checkout.

Accounts, authentication and password handling live outside this service;
orders only need to resolve an address id and check it belongs to the
caller.
"""

import structlog

from shared.domain import storefront

identity = storefront

logger = structlog.get_logger(__name__)
