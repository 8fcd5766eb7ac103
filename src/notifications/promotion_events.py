"""Notifications reacts to Coupon events: tells a customer about a coupon handed to them."""

from protean.utils.globals import current_domain
from protean.utils.mixins import handle

from notifications.domain import logger, notifications
from notifications.notifier import OrderNotifier
from promotions.coupon.coupon import Coupon
from promotions.coupon.events import CouponAssigned
from promotions.coupon.management import CouponView


@notifications.event_handler(part_of=Coupon)
class PromotionEventsHandler:
    @handle(CouponAssigned)
    def on_coupon_assigned(self, event: CouponAssigned) -> None:
        if not event.email:
            return
        try:
            coupon = current_domain.repository_for(Coupon).get_coupon(event.coupon_id)
            OrderNotifier().send_coupon_assignment(event.email, CouponView.from_coupon(coupon))
        except Exception:
            logger.exception("notification_handler_failed", event="CouponAssigned", coupon_id=event.coupon_id)
