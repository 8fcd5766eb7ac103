"""Domain events for the Product aggregate."""

from protean.fields import Identifier, Integer, String

from catalogue.domain import catalogue


@catalogue.event(part_of="Product")
class StockDecremented:
    """Stock was taken out for an order."""

    __version__ = 1

    product_id = Identifier(required=True)
    quantity = Integer(required=True)
    order_reference = String()


@catalogue.event(part_of="Product")
class StockRestored:
    """Stock was put back, e.g. after a cancellation."""

    __version__ = 1

    product_id = Identifier(required=True)
    quantity = Integer(required=True)
    order_reference = String()


@catalogue.event(part_of="Product")
class LowStockDetected:
    """A product dropped to or below the low-stock threshold but is not sold out."""

    __version__ = 1

    product_id = Identifier(required=True)
    product_name = String(required=True)
    stock_quantity = Integer(required=True)
    threshold = Integer(required=True)
