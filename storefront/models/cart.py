# storefront/models/cart.py
from decimal import Decimal
from typing import Dict, Iterable, List
from pydantic import BaseModel, Field
from .product import Product
from .order import UnavailabilityReport

class CartLine(BaseModel):
    """Requested quantity of one product"""
    product_id: int
    quantity: int = Field(ge=1)

class Cart(BaseModel):
    """In-progress order owned by a client session"""
    lines: List[CartLine] = []

    def _find(self, product_id: int):
        for line in self.lines:
            if line.product_id == product_id:
                return line
        return None

    def add(self, product_id: int, quantity: int = 1) -> None:
        if quantity < 1:
            raise ValueError("quantity must be at least 1")
        line = self._find(product_id)
        if line:
            line.quantity += quantity
        else:
            self.lines.append(CartLine(product_id=product_id, quantity=quantity))

    def set_quantity(self, product_id: int, quantity: int) -> None:
        """Set a line's quantity; zero or less removes the line"""
        if quantity <= 0:
            self.remove(product_id)
            return
        line = self._find(product_id)
        if line:
            line.quantity = quantity
        else:
            self.lines.append(CartLine(product_id=product_id, quantity=quantity))

    def remove(self, product_id: int) -> None:
        self.lines = [line for line in self.lines if line.product_id != product_id]

    def clear(self) -> None:
        self.lines = []

    def drop_unavailable(self, reports: Iterable[UnavailabilityReport]) -> None:
        """Remove every line named in an availability report"""
        blocked = {report.product_id for report in reports}
        self.lines = [line for line in self.lines if line.product_id not in blocked]

    @property
    def is_empty(self) -> bool:
        return not self.lines

    @property
    def total_items(self) -> int:
        return sum(line.quantity for line in self.lines)

    def subtotal(self, products: Iterable[Product]) -> Decimal:
        """Sum of price * quantity; lines for unknown products add nothing"""
        by_id: Dict[int, Product] = {product.id: product for product in products}
        total = Decimal(0)
        for line in self.lines:
            product = by_id.get(line.product_id)
            if product:
                total += product.price * line.quantity
        return total
