"""Domain events for the Invoice aggregate."""

from protean.fields import Decimal, Identifier, String

from payments.domain import payments


@payments.event(part_of="Invoice")
class InvoiceGenerated:
    """An invoice was derived for an order."""

    __version__ = 1

    invoice_id = Identifier(required=True)
    order_id = Identifier(required=True)
    invoice_number = String(required=True)
    total_amount = Decimal(required=True)
