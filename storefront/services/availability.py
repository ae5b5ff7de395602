# storefront/services/availability.py
from typing import Iterable, List

from ..models.cart import CartLine
from ..models.order import AvailabilityIssue, UnavailabilityReport
from ..models.product import Product


def check_availability(lines: Iterable[CartLine], products: Iterable[Product]) -> List[UnavailabilityReport]:
    """Report every cart line current stock cannot satisfy, in cart order.

    Pure read; run it while the cart is open and again right before stock
    is committed, since stock may move in between.
    """
    by_id = {product.id: product for product in products}
    reports: List[UnavailabilityReport] = []

    for line in lines:
        product = by_id.get(line.product_id)

        if product is None or not product.in_stock or product.quantity == 0:
            reports.append(UnavailabilityReport(
                product_id=line.product_id,
                product_name=product.name if product else None,
                kind=AvailabilityIssue.OUT_OF_STOCK,
                requested_quantity=line.quantity,
                available_quantity=0
            ))
        elif product.quantity < line.quantity:
            reports.append(UnavailabilityReport(
                product_id=line.product_id,
                product_name=product.name,
                kind=AvailabilityIssue.INSUFFICIENT_QUANTITY,
                requested_quantity=line.quantity,
                available_quantity=product.quantity
            ))

    return reports
