"""Catalogue store access: product lookups and race-free stock changes.

Stock is never read-compared-written. ``decrement_stock`` issues a single
conditional ``UPDATE ... WHERE stock_quantity >= :qty`` on the unit of work's
session; when no row matches, somebody else took the last units first and the
caller's transaction is aborted with ``InsufficientStock``.
"""

from protean import Q
from protean.exceptions import ObjectNotFoundError
from sqlalchemy import update

from catalogue.domain import catalogue, logger
from catalogue.product.events import LowStockDetected, StockDecremented, StockRestored
from catalogue.product.product import Product
from shared.config import get_settings
from shared.exceptions import InsufficientStock, NotFound


@catalogue.repository(part_of=Product)
class ProductRepository:
    def get_product(self, product_id, active_only: bool = True) -> Product:
        try:
            product = self.get(product_id)
        except ObjectNotFoundError:
            raise NotFound({"product_id": ["Product not found"]}) from None
        if active_only and not product.is_active:
            raise NotFound({"product_id": ["Product not found"]})
        return product

    def get_many(self, product_ids) -> dict[str, Product]:
        ids = list({str(product_id) for product_id in product_ids})
        if not ids:
            return {}
        products = self.query.filter(Q(id__in=ids)).limit(len(ids)).all().items
        return {product.id: product for product in products}

    def current_stock(self, product_id) -> int:
        return self.get_product(product_id, active_only=False).stock_quantity

    def _conditional_update(self, *criteria, delta: int) -> int:
        model = self._dao.database_model_cls
        session = self._dao._get_session()
        result = session.execute(
            update(model)
            .where(*criteria)
            .values(stock_quantity=model.stock_quantity + delta)
            .execution_options(synchronize_session="fetch")
        )
        return result.rowcount

    def decrement_stock(self, product_id, quantity: int, order_reference: str | None = None) -> int:
        """Atomically take ``quantity`` units out of stock and return what is left."""
        if quantity < 1:
            raise ValueError("Quantity must be at least 1")

        model = self._dao.database_model_cls
        matched = self._conditional_update(
            model.id == product_id,
            model.stock_quantity >= quantity,
            delta=-quantity,
        )
        product = self.get_product(product_id, active_only=False)
        if matched == 0:
            logger.info(
                "stock_decrement_rejected",
                product_id=product_id,
                requested=quantity,
                available=product.stock_quantity,
            )
            raise InsufficientStock(product.name, requested=quantity, available=product.stock_quantity)

        product.raise_(StockDecremented(product_id=product.id, quantity=quantity, order_reference=order_reference))
        self._check_low_stock(product)
        self.add(product)
        return product.stock_quantity

    def increment_stock(self, product_id, quantity: int, order_reference: str | None = None) -> int:
        if quantity < 1:
            raise ValueError("Quantity must be at least 1")

        model = self._dao.database_model_cls
        if self._conditional_update(model.id == product_id, delta=quantity) == 0:
            raise NotFound({"product_id": ["Product not found"]})

        product = self.get_product(product_id, active_only=False)
        product.raise_(StockRestored(product_id=product.id, quantity=quantity, order_reference=order_reference))
        self.add(product)
        return product.stock_quantity

    def _check_low_stock(self, product: Product) -> None:
        threshold = get_settings().low_stock_threshold
        if 0 < product.stock_quantity <= threshold:
            product.raise_(
                LowStockDetected(
                    product_id=product.id,
                    product_name=product.name,
                    stock_quantity=product.stock_quantity,
                    threshold=threshold,
                )
            )
