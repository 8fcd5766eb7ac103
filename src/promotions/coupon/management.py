"""Coupon administration: creation, assignment to customers, and per-customer listing."""

from datetime import datetime
from decimal import Decimal

from protean import handle
from protean.exceptions import ValidationError
from protean.fields import Boolean, DateTime, Dict, Identifier, Integer, List, String
from protean.fields import Decimal as DecimalField
from protean.utils.globals import current_domain
from pydantic import BaseModel
from sqlalchemy.exc import IntegrityError

from promotions.coupon.codes import generate_formatted_code
from promotions.coupon.coupon import Coupon, CouponRedemption, DiscountType
from promotions.coupon.repository import CouponRepository
from promotions.domain import logger, promotions
from shared.config import get_settings
from shared.exceptions import AlreadyExists


@promotions.command(part_of="Coupon")
class CreateCoupon:
    """Create a coupon. Without ``code`` a random ``XXXX-XXXX`` code is generated."""

    code = String(max_length=50)
    description = String(max_length=500, default="")
    discount_type = String(required=True, choices=DiscountType)
    discount_value = DecimalField(required=True, min_value=0)
    minimum_order_amount = DecimalField(min_value=0)
    start_date = DateTime(required=True)
    end_date = DateTime(required=True)
    max_usage_count = Integer(min_value=1)
    is_active = Boolean(default=True)
    user_ids = List(content_type=Integer)
    # user_id (as a string key) -> e-mail address for the assignment notice
    recipients = Dict()


@promotions.command(part_of="Coupon")
class AssignCouponToUsers:
    coupon_id = Identifier(required=True)
    user_ids = List(content_type=Integer)
    recipients = Dict()


@promotions.command(part_of="Coupon")
class UpdateCouponAssignments:
    """Replace the assignment list; assignments already used are always kept."""

    coupon_id = Identifier(required=True)
    user_ids = List(content_type=Integer)
    recipients = Dict()


class CouponView(BaseModel):
    model_config = {"frozen": True}

    id: str
    code: str
    description: str
    discount_type: str
    discount_value: Decimal
    minimum_order_amount: Decimal | None
    start_date: datetime
    end_date: datetime
    is_active: bool
    max_usage_count: int | None
    usage_count: int

    @classmethod
    def from_coupon(cls, coupon: Coupon) -> "CouponView":
        return cls(
            id=coupon.id,
            code=coupon.code,
            description=coupon.description or "",
            discount_type=coupon.discount_type,
            discount_value=coupon.discount_value,
            minimum_order_amount=coupon.minimum_order_amount,
            start_date=coupon.start_date,
            end_date=coupon.end_date,
            is_active=coupon.is_active,
            max_usage_count=coupon.max_usage_count,
            usage_count=coupon.usage_count,
        )


class UserCouponView(BaseModel):
    model_config = {"frozen": True}

    assignment_id: str | None = None
    user_id: int
    coupon: CouponView
    is_used: bool
    is_public: bool
    assigned_date: datetime
    used_date: datetime | None = None
    order_id: str | None = None


def _recipient(recipients: dict, user_id: int) -> str | None:
    return recipients.get(str(user_id)) or recipients.get(user_id)


@promotions.command_handler(part_of=Coupon)
class ManageCouponsHandler:
    @handle(CreateCoupon)
    def create_coupon(self, command: CreateCoupon) -> CouponView:
        repo: CouponRepository = current_domain.repository_for(Coupon)
        if command.code:
            if repo.code_exists(command.code):
                raise AlreadyExists({"code": ["Coupon code already exists"]})
            code = command.code
        else:
            code = self._unique_code(repo)

        coupon = Coupon.create(
            code=code,
            discount_type=command.discount_type,
            discount_value=command.discount_value,
            start_date=command.start_date,
            end_date=command.end_date,
            description=command.description or "",
            minimum_order_amount=command.minimum_order_amount,
            max_usage_count=command.max_usage_count,
            is_active=command.is_active,
        )
        for user_id in dict.fromkeys(command.user_ids):
            coupon.assign(user_id, _recipient(command.recipients, user_id))

        try:
            with repo._dao._get_session().begin_nested():
                repo.add(coupon)
                repo._dao._flush()
        except (IntegrityError, ValidationError) as exc:
            raise AlreadyExists({"code": ["Coupon code already exists"]}) from exc

        logger.info("coupon_created", coupon_id=coupon.id, code=coupon.code)
        return CouponView.from_coupon(coupon)

    @handle(AssignCouponToUsers)
    def assign_to_users(self, command: AssignCouponToUsers) -> list[int]:
        """Assign the coupon to every listed user not yet holding it; returns the new user ids."""
        repo = current_domain.repository_for(Coupon)
        coupon = repo.get_coupon(command.coupon_id)
        added = [
            user_id
            for user_id in dict.fromkeys(command.user_ids)
            if coupon.assign(user_id, _recipient(command.recipients, user_id))
        ]
        repo.add(coupon)
        return added

    @handle(UpdateCouponAssignments)
    def update_assignments(self, command: UpdateCouponAssignments) -> list[int]:
        repo = current_domain.repository_for(Coupon)
        coupon = repo.get_coupon(command.coupon_id)
        wanted = set(command.user_ids)

        for assignment in list(coupon.assignments):
            if assignment.user_id not in wanted:
                coupon.unassign(assignment.user_id)

        added = [
            user_id
            for user_id in dict.fromkeys(command.user_ids)
            if coupon.assign(user_id, _recipient(command.recipients, user_id))
        ]
        repo.add(coupon)
        logger.info("coupon_assignments_updated", coupon_id=coupon.id, added=added)
        return added

    def _unique_code(self, repo: CouponRepository) -> str:
        attempts = get_settings().coupon_code_attempts
        for _ in range(attempts):
            code = generate_formatted_code()
            if not repo.code_exists(code):
                return code
        raise AlreadyExists({"code": [f"Could not generate a unique coupon code in {attempts} attempts"]})


def list_user_coupons(user_id: int) -> list[UserCouponView]:
    """Coupons assigned to ``user_id`` followed by every active public coupon."""
    repo: CouponRepository = current_domain.repository_for(Coupon)
    views = []
    for assignment in repo.assignments_of(user_id):
        coupon = repo.get_coupon(assignment.coupon_id)
        views.append(
            UserCouponView(
                assignment_id=assignment.id,
                user_id=user_id,
                coupon=CouponView.from_coupon(coupon),
                is_used=assignment.is_used,
                is_public=False,
                assigned_date=assignment.assigned_date,
                used_date=assignment.used_date,
                order_id=assignment.order_id,
            )
        )

    redeemed = current_domain.repository_for(CouponRedemption).redeemed_coupon_ids(user_id)
    for coupon in repo.active():
        if coupon.is_targeted:
            continue
        views.append(
            UserCouponView(
                user_id=user_id,
                coupon=CouponView.from_coupon(coupon),
                is_used=coupon.is_capped and str(coupon.id) in redeemed,
                is_public=True,
                assigned_date=coupon.start_date,
            )
        )
    return views
