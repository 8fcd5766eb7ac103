"""Invoice lookup and on-demand rendering."""

from protean.utils.globals import current_domain

from ordering.order.order import Order
from ordering.order.views import OrderView
from payments.domain import logger
from payments.invoice.invoice import Invoice
from payments.invoice.views import InvoiceView
from payments.renderer import get_renderer
from shared.exceptions import Forbidden, NotFound
from shared.identity import GuestIdentity, UserIdentity


def _load(order_id, owner, is_admin: bool) -> tuple[Invoice, Order]:
    invoice = current_domain.repository_for(Invoice).for_order(order_id)
    if invoice is None:
        raise NotFound({"order_id": ["Invoice not found"]})
    order = current_domain.repository_for(Order).get_order(order_id)
    if not is_admin and (owner is None or not order.belongs_to(owner)):
        raise Forbidden({"order_id": ["You don't have permission to view this invoice"]})
    return invoice, order


def get_invoice(
    order_id,
    owner: UserIdentity | GuestIdentity | None = None,
    is_admin: bool = False,
) -> InvoiceView:
    invoice, _ = _load(order_id, owner, is_admin)
    return InvoiceView.from_invoice(invoice)


def render_invoice(
    order_id,
    owner: UserIdentity | GuestIdentity | None = None,
    is_admin: bool = False,
) -> bytes:
    """Render the order's invoice through the configured document renderer."""
    invoice, order = _load(order_id, owner, is_admin)
    invoice_view = InvoiceView.from_invoice(invoice)
    order_view = OrderView.from_order(order, invoice)

    document = get_renderer().render(order_view, invoice_view)
    logger.info("invoice_rendered", invoice_number=invoice_view.invoice_number, size=len(document))
    return document
