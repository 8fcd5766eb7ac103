"""Invoice generation: at most one invoice per order."""

from protean import handle
from protean.exceptions import ValidationError
from protean.fields import Identifier
from protean.utils.globals import current_domain
from sqlalchemy.exc import IntegrityError

from ordering.order.order import Order
from payments.domain import logger, payments
from payments.invoice.invoice import Invoice
from payments.invoice.views import InvoiceView
from shared.exceptions import AlreadyExists


def derive_invoice(order) -> Invoice:
    """Create ``order``'s invoice in the active unit of work.

    The unique ``order_id`` column settles concurrent attempts; the loser gets
    ``AlreadyExists`` and the existing invoice is left as it was.
    """
    repo = current_domain.repository_for(Invoice)
    if repo.for_order(order.id) is not None:
        raise AlreadyExists({"order_id": ["Invoice already exists for this order"]})

    invoice = Invoice.derive(order)
    try:
        with repo._dao._get_session().begin_nested():
            repo.add(invoice)
            repo._dao._flush()
    except (IntegrityError, ValidationError) as exc:
        raise AlreadyExists({"order_id": ["Invoice already exists for this order"]}) from exc

    logger.info(
        "invoice_generated",
        invoice_number=invoice.invoice_number,
        order_id=order.id,
        total_amount=str(invoice.total_amount),
    )
    return invoice


@payments.command(part_of="Invoice")
class GenerateInvoice:
    order_id = Identifier(required=True)


@payments.command_handler(part_of=Invoice)
class GenerateInvoiceHandler:
    @handle(GenerateInvoice)
    def generate_invoice(self, command: GenerateInvoice) -> InvoiceView:
        order = current_domain.repository_for(Order).get_order(command.order_id)
        return InvoiceView.from_invoice(derive_invoice(order))
