"""Notifications reacts to Invoice events: the invoice e-mail."""

from protean.utils.mixins import handle

from notifications.domain import logger, notifications
from notifications.notifier import OrderNotifier
from ordering.order.queries import get_order
from payments.invoice.events import InvoiceGenerated
from payments.invoice.invoice import Invoice
from payments.invoice.retrieval import get_invoice


@notifications.event_handler(part_of=Invoice)
class PaymentEventsHandler:
    @handle(InvoiceGenerated)
    def on_invoice_generated(self, event: InvoiceGenerated) -> None:
        try:
            order = get_order(event.order_id, is_admin=True)
            invoice = get_invoice(event.order_id, is_admin=True)
            OrderNotifier().send_invoice(order, invoice)
        except Exception:
            logger.exception("notification_handler_failed", event="InvoiceGenerated", order_id=event.order_id)
