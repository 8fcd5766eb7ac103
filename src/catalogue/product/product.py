"""Product aggregate: price and stock count as seen by checkout."""

from datetime import UTC, datetime

from protean.exceptions import ValidationError
from protean.fields import Boolean, DateTime, Decimal, Integer, String, Text

from catalogue.domain import catalogue
from shared.money import to_money


@catalogue.aggregate
class Product:
    name = String(required=True, max_length=200)
    description = Text(default="")
    image_url = String(max_length=500, default="")
    price = Decimal(required=True, min_value=0, precision=12, scale=2)
    stock_quantity = Integer(required=True, min_value=0, default=0)
    is_active = Boolean(default=True)
    created_at = DateTime(auto_now_add=True)
    updated_at = DateTime(auto_now=True)

    @classmethod
    def create(cls, name, price, stock_quantity=0, description="", image_url=""):
        if stock_quantity < 0:
            raise ValidationError({"stock_quantity": ["Stock quantity cannot be negative"]})
        now = datetime.now(UTC)
        return cls(
            name=name,
            price=to_money(price),
            stock_quantity=stock_quantity,
            description=description,
            image_url=image_url,
            is_active=True,
            created_at=now,
            updated_at=now,
        )

    def has_stock_for(self, quantity: int) -> bool:
        return self.stock_quantity >= quantity
