"""Order notifier: renders a template and hands it to the e-mail channel.

Every ``send_*`` method returns whether the message went out. Delivery
problems are logged and reported as ``False``; they never raise.
"""

from notifications.channel import get_channel
from notifications.channel.email_port import EmailPort
from notifications.domain import logger
from notifications.templates import get_template
from notifications.types import NotificationType
from shared.config import Settings, get_settings
from shared.money import format_money


class OrderNotifier:
    def __init__(self, channel: EmailPort | None = None, settings: Settings | None = None):
        self.channel = channel or get_channel()
        self.settings = settings or get_settings()

    def _money(self, value) -> str:
        return format_money(value, self.settings.currency_symbol)

    @staticmethod
    def _customer_name(order) -> str:
        address = order.billing_address
        return f"{address.first_name} {address.last_name}".strip() or "there"

    def _dispatch(self, notification_type: NotificationType, to, context: dict) -> bool:
        if not to:
            logger.warning("notification_skipped_no_recipient", notification_type=notification_type.value)
            return False

        content = get_template(notification_type.value).render(context)
        try:
            result = self.channel.send(to=to, subject=content["subject"], body=content["body"])
        except Exception:
            logger.exception("notification_send_error", notification_type=notification_type.value, to=to)
            return False

        if result.get("status") != "sent":
            logger.warning(
                "notification_send_failed",
                notification_type=notification_type.value,
                to=to,
                error=result.get("error"),
            )
            return False

        logger.info(
            "notification_sent",
            notification_type=notification_type.value,
            message_id=result.get("message_id"),
        )
        return True

    def send_order_confirmation(self, order) -> bool:
        context = {
            "store_name": self.settings.store_name,
            "customer_name": self._customer_name(order),
            "order_number": order.order_number,
            "lines": [
                {
                    "product_name": line.product_name,
                    "quantity": line.quantity,
                    "unit_price": self._money(line.unit_price),
                    "line_total": self._money(line.line_total),
                }
                for line in order.lines
            ],
            "subtotal": self._money(order.subtotal),
            "shipping_cost": self._money(order.shipping_cost),
            "discount": self._money(order.discount) if order.discount else None,
            "coupon_code": order.coupon_code,
            "total_amount": self._money(order.total_amount),
            "payment_method": order.payment_method,
        }
        return self._dispatch(NotificationType.ORDER_CONFIRMATION, order.contact_email, context)

    def send_order_status_update(self, order, new_status: str) -> bool:
        context = {
            "customer_name": self._customer_name(order),
            "order_number": order.order_number,
            "status": new_status,
            "reason": order.cancellation_reason,
        }
        return self._dispatch(NotificationType.ORDER_STATUS_UPDATE, order.contact_email, context)

    def send_invoice(self, order, invoice) -> bool:
        context = {
            "customer_name": self._customer_name(order),
            "order_number": order.order_number,
            "invoice_number": invoice.invoice_number,
            "issue_date": f"{invoice.issue_date:%B %d, %Y}",
            "subtotal": self._money(order.subtotal),
            "shipping_cost": self._money(order.shipping_cost),
            "discount": self._money(order.discount),
            "total_amount": self._money(invoice.total_amount),
        }
        return self._dispatch(NotificationType.INVOICE, order.contact_email, context)

    def send_low_stock_alert(self, product_id, product_name: str, stock_quantity: int, threshold: int | None = None) -> bool:
        context = {
            "product_id": product_id,
            "product_name": product_name,
            "stock_quantity": stock_quantity,
            "threshold": threshold if threshold is not None else self.settings.low_stock_threshold,
        }
        return self._dispatch(NotificationType.LOW_STOCK_ALERT, list(self.settings.admin_emails), context)

    def send_coupon_assignment(self, email: str, coupon) -> bool:
        if coupon.discount_type == "Percentage":
            discount = f"{coupon.discount_value.normalize():f}%"
        else:
            discount = self._money(coupon.discount_value)
        context = {
            "code": coupon.code,
            "description": coupon.description,
            "discount": discount,
            "minimum_order_amount": (
                self._money(coupon.minimum_order_amount) if coupon.minimum_order_amount is not None else None
            ),
            "start_date": f"{coupon.start_date:%Y.%m.%d}",
            "end_date": f"{coupon.end_date:%Y.%m.%d}",
        }
        return self._dispatch(NotificationType.COUPON_ASSIGNMENT, email, context)
