# storefront/services/stock_service.py
import logging
import warnings
from typing import Iterable, List, Sequence

from ..errors import OrphanedLineWarning, ValidationError
from ..models.cart import CartLine
from ..models.order import UnavailabilityReport
from ..models.product import Product, StockUpdate
from .availability import check_availability

logger = logging.getLogger(__name__)


def _warn_orphaned(product_id: int) -> None:
    message = f"Cart line references missing product {product_id}; skipped"
    logger.warning(message)
    warnings.warn(message, OrphanedLineWarning, stacklevel=3)


def apply_stock_decrement(lines: Iterable[CartLine], products: Iterable[Product]) -> List[Product]:
    """Return updated copies of the products the lines touch.

    Quantities floor at zero and in_stock follows quantity. Lines without a
    matching product are skipped with an OrphanedLineWarning.
    """
    by_id = {product.id: product.model_copy() for product in products}
    touched = {}

    for line in lines:
        product = by_id.get(line.product_id)
        if product is None:
            _warn_orphaned(line.product_id)
            continue
        product.quantity = max(0, product.quantity - line.quantity)
        product.in_stock = product.quantity > 0
        touched[product.id] = product

    return list(touched.values())


class StockService:
    """Stock reads and the atomic post-order decrement"""

    def __init__(self, store):
        self.store = store

    async def check(self, lines: Sequence[CartLine]) -> List[UnavailabilityReport]:
        """Availability of the lines against freshly read stock"""
        products = await self.store.list_products()
        return check_availability(lines, products)

    async def commit(self, lines: Sequence[CartLine]) -> List[StockUpdate]:
        """Decrement all lines at once or not at all.

        Raises StockConflictError if another order took the stock since the
        last check; nothing is written in that case.
        """
        updates, orphaned = await self.store.decrement_stock(lines)

        for product_id in orphaned:
            _warn_orphaned(product_id)

        for update in updates:
            logger.info(
                f"Stock for product {update.product_id} now {update.quantity}"
                f"{'' if update.in_stock else ' (sold out)'}"
            )
        return updates

    async def set_quantity(self, product_id: int, quantity: int) -> bool:
        """Restock or correct a product's quantity"""
        if quantity < 0:
            raise ValidationError("quantity must not be negative")
        return await self.store.update_product_quantity(product_id, quantity, quantity > 0)
