"""Business errors raised by the storefront core.

Every error carries a ``messages`` dict of ``{field: [message, ...]}`` so a
caller can render a user-facing message without parsing strings. All of them
are expected outcomes; anything else escaping a unit of work is an
infrastructure failure and rolls the whole operation back.
"""

from enum import Enum

from protean.exceptions import ProteanExceptionWithMessage


class StorefrontError(ProteanExceptionWithMessage):
    """Base class for expected, recoverable business failures."""

    default_field = "error"

    def __init__(self, messages: dict[str, list[str]] | str):
        if isinstance(messages, str):
            messages = {self.default_field: [messages]}
        super().__init__(messages)

    @property
    def message(self) -> str:
        return "; ".join(msg for msgs in self.messages.values() for msg in msgs)


class NotFound(StorefrontError):
    default_field = "id"


class Forbidden(StorefrontError):
    default_field = "owner"


class InvalidState(StorefrontError):
    default_field = "status"


class InvalidTransition(InvalidState):
    pass


class EmptyCart(StorefrontError):
    default_field = "cart"

    def __init__(self, messages: dict[str, list[str]] | str = "Cart is empty"):
        super().__init__(messages)


class InsufficientStock(StorefrontError):
    default_field = "quantity"

    def __init__(self, product_name: str, requested: int | None = None, available: int | None = None):
        self.product_name = product_name
        self.requested = requested
        self.available = available
        super().__init__({"quantity": [f"Insufficient stock for product: {product_name}"]})


class AlreadyExists(StorefrontError):
    pass


class CouponFailure(Enum):
    NOT_FOUND = "not_found"
    INACTIVE = "inactive"
    NOT_YET_ACTIVE = "not_yet_active"
    EXPIRED = "expired"
    BELOW_MINIMUM = "below_minimum"
    USAGE_EXCEEDED = "usage_exceeded"
    NOT_ASSIGNED = "not_assigned"
    ALREADY_USED = "already_used"


class InvalidCoupon(StorefrontError):
    default_field = "coupon_code"

    def __init__(self, reason: CouponFailure, message: str):
        self.reason = reason
        super().__init__({"coupon_code": [message]})


class UsageLimitExceeded(InvalidCoupon):
    def __init__(self, message: str = "This coupon has reached its maximum usage limit"):
        super().__init__(CouponFailure.USAGE_EXCEEDED, message)
