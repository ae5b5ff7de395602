# storefront/utils/messages.py
from typing import Iterable
from ..models.order import AvailabilityIssue, Order, UnavailabilityReport
from ..models.product import Product
from ..utils.formatters import format_price, format_datetime

class Messages:
    @staticmethod
    def format_product(product: Product) -> str:
        """One-line product summary"""
        availability = f"{product.quantity} in stock" if product.in_stock and product.quantity > 0 else "Out of stock"
        return f"{product.name} - {format_price(product.price)} ({availability})"

    @staticmethod
    def format_unavailability(report: UnavailabilityReport) -> str:
        """Customer-facing reason a cart line was removed"""
        name = report.product_name or f"Item #{report.product_id}"
        if report.kind == AvailabilityIssue.OUT_OF_STOCK:
            return f"{name} is out of stock."
        return (
            f"Only {report.available_quantity} of {name} available "
            f"(you requested {report.requested_quantity})."
        )

    @classmethod
    def format_unavailability_list(cls, reports: Iterable[UnavailabilityReport]) -> str:
        return "\n".join(cls.format_unavailability(report) for report in reports)

    @staticmethod
    def format_order(order: Order) -> str:
        """Order confirmation text"""
        items_text = "\n".join([
            f"- {item.quantity}x {item.name}: {format_price(item.total_price, order.currency)}"
            for item in order.items
        ])

        return (
            f"Order {order.payment_reference}\n"
            f"------------------\n"
            f"{items_text}\n"
            f"------------------\n"
            f"Subtotal: {format_price(order.subtotal, order.currency)}\n"
            f"{order.tax_label}: {format_price(order.tax, order.currency)}\n"
            f"Total: {format_price(order.total_amount, order.currency)}\n"
            f"Placed: {format_datetime(order.placed_at)}\n"
        )
