"""Persistence access for coupons, assignments and redemptions.

The usage counter and an assignment's ``is_used`` flag only move through
conditional ``UPDATE`` statements on the unit of work's session. A zero row
count means a concurrent checkout got there first.
"""

from protean import Q
from protean.exceptions import ObjectNotFoundError, ValidationError
from protean.utils.globals import current_domain
from sqlalchemy import or_, update
from sqlalchemy.exc import IntegrityError

from promotions.coupon.coupon import Coupon, CouponRedemption, UserCoupon
from promotions.domain import logger, promotions
from shared.database import utc_now
from shared.exceptions import CouponFailure, InvalidCoupon, NotFound


def normalize_code(code: str) -> str:
    return code.strip().upper()


@promotions.repository(part_of=Coupon)
class CouponRepository:
    def by_code(self, code: str) -> Coupon | None:
        try:
            return self.find_by(code=normalize_code(code))
        except ObjectNotFoundError:
            return None

    def get_coupon(self, coupon_id) -> Coupon:
        try:
            return self.get(coupon_id)
        except ObjectNotFoundError:
            raise NotFound({"coupon_id": ["Coupon not found"]}) from None

    def code_exists(self, code: str) -> bool:
        return self.exists(Q(code=normalize_code(code)))

    def active(self) -> list[Coupon]:
        return self.query.filter(is_active=True).order_by("created_at").limit(None).all().items

    def assignments_of(self, user_id: int) -> list[UserCoupon]:
        dao = current_domain.repository_for(UserCoupon)._dao
        return dao.query.filter(user_id=user_id).order_by("assigned_date").limit(None).all().items

    def increment_usage(self, coupon_id) -> bool:
        """Add one use unless the cap is already reached."""
        model = self._dao.database_model_cls
        result = self._dao._get_session().execute(
            update(model)
            .where(
                model.id == coupon_id,
                or_(model.max_usage_count.is_(None), model.usage_count < model.max_usage_count),
            )
            .values(usage_count=model.usage_count + 1)
            .execution_options(synchronize_session="fetch")
        )
        return result.rowcount == 1

    def consume_assignment(self, coupon_id, user_id: int, order_id=None) -> bool:
        """Flip ``user_id``'s assignment to used, unless it already is."""
        model = current_domain.repository_for(UserCoupon)._dao.database_model_cls
        result = self._dao._get_session().execute(
            update(model)
            .where(
                model.coupon_id == coupon_id,
                model.user_id == user_id,
                model.is_used.is_(False),
            )
            .values(is_used=True, used_date=utc_now(), order_id=order_id)
            .execution_options(synchronize_session="fetch")
        )
        return result.rowcount == 1


@promotions.repository(part_of=CouponRedemption)
class RedemptionLog:
    def has_redeemed(self, user_id: int, coupon_id) -> bool:
        return self.exists(Q(coupon_id=coupon_id, user_id=user_id))

    def redeemed_coupon_ids(self, user_id: int) -> set[str]:
        redemptions = self.query.filter(user_id=user_id).limit(None).all().items
        return {str(r.coupon_id) for r in redemptions}

    def record(self, coupon_id, user_id: int | None, order_id=None, capped_public: bool = False) -> CouponRedemption:
        """Write one redemption row.

        For a capped public coupon the ``uq_capped_public_redemption`` index
        rejects a second row for the same customer, even when two checkouts
        passed the read check at the same time.
        """
        redemption = CouponRedemption(
            coupon_id=coupon_id,
            user_id=user_id,
            order_id=order_id,
            capped_public=capped_public,
            redeemed_at=utc_now(),
        )
        try:
            with self._dao._get_session().begin_nested():
                self.add(redemption)
                self._dao._flush()
        except (IntegrityError, ValidationError) as exc:
            logger.info("coupon_redemption_rejected", coupon_id=coupon_id, user_id=user_id)
            raise InvalidCoupon(CouponFailure.ALREADY_USED, "You have already used this coupon") from exc
        return redemption
