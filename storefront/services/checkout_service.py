# storefront/services/checkout_service.py
import logging
from decimal import Decimal
from typing import Any, Dict, List, Optional

from ..config import Config
from ..errors import StockConflictError, StoreUnavailableError, ValidationError
from ..models.base import utcnow
from ..models.cart import Cart
from ..models.product import Product
from ..models.order import AvailabilityIssue, CheckoutResult, CheckoutStatus, Order, OrderItem, UnavailabilityReport
from ..utils.messages import Messages
from .availability import check_availability
from .payment_service import PaymentGateway
from .stock_service import StockService
from .tax_service import TaxCalculator

class CheckoutService:
    """Availability gate, payment authorisation and stock commit for one cart"""

    def __init__(self, store, payment_gateway: PaymentGateway,
                 tax_calculator: Optional[TaxCalculator] = None):
        self.store = store
        self.payment_gateway = payment_gateway
        self.tax_calculator = tax_calculator or TaxCalculator()
        self.stock_service = StockService(store)
        self.logger = logging.getLogger(__name__)

    async def review(self, cart: Cart) -> List[UnavailabilityReport]:
        """Pre-emptive availability check while the cart is open"""
        reports = await self.stock_service.check(cart.lines)
        cart.drop_unavailable(reports)
        return reports

    async def place_order(self, cart: Cart, billing: Dict[str, Any],
                          country_code: Optional[str] = None,
                          currency: Optional[str] = None) -> CheckoutResult:
        """Authorise payment and take the stock for every line in the cart"""
        if cart.is_empty:
            raise ValidationError("Cart is empty")

        country_code = (country_code or Config.DEFAULT_COUNTRY).upper()
        currency = currency or Config.CURRENCY

        products = await self.store.list_products()
        reports = check_availability(cart.lines, products)
        if reports:
            return self._blocked(cart, reports)

        by_id = {product.id: product for product in products}
        items = [
            OrderItem(
                product_id=line.product_id,
                name=by_id[line.product_id].name,
                quantity=line.quantity,
                price_per_unit=by_id[line.product_id].price
            )
            for line in cart.lines
        ]
        subtotal = sum((item.total_price for item in items), Decimal(0))
        tax = self.tax_calculator.compute_tax(subtotal, country_code)
        total = subtotal + tax

        payment = await self.payment_gateway.authorize(total, currency, billing)
        if not payment["success"]:
            self.logger.warning(f"Payment authorisation failed: {payment.get('error')}")
            return CheckoutResult(
                status=CheckoutStatus.PAYMENT_FAILED,
                reason=payment.get("error") or "Payment was declined"
            )
        reference = payment["reference"]

        try:
            reports = await self._commit_stock(cart, by_id)
        except StoreUnavailableError:
            await self._void(reference)
            raise

        if reports:
            await self._void(reference)
            return self._blocked(cart, reports)

        order = Order(
            items=items,
            currency=currency,
            country_code=country_code,
            subtotal=subtotal,
            tax=tax,
            tax_label=self.tax_calculator.label_for(country_code),
            total_amount=total,
            payment_reference=reference,
            placed_at=utcnow()
        )
        cart.clear()
        self.logger.info(f"Order {reference} confirmed: {len(items)} line(s), total {total} {currency}")
        self.logger.debug(Messages.format_order(order))
        return CheckoutResult(status=CheckoutStatus.CONFIRMED, order=order)

    async def _commit_stock(self, cart: Cart,
                            by_id: Dict[int, Product]) -> List[UnavailabilityReport]:
        """Take the stock, or report the lines that can no longer be filled"""
        # Stock may have moved while payment was being authorised
        reports = await self.stock_service.check(cart.lines)
        if reports:
            return reports
        try:
            await self.stock_service.commit(cart.lines)
        except StockConflictError as e:
            self.logger.warning(f"Stock conflict committing order: {e}")
            return await self.stock_service.check(cart.lines) or [
                UnavailabilityReport(
                    product_id=line.product_id,
                    product_name=by_id[line.product_id].name,
                    kind=AvailabilityIssue.OUT_OF_STOCK,
                    requested_quantity=line.quantity,
                    available_quantity=0
                )
                for line in cart.lines if line.product_id in e.product_ids
            ]
        return []

    def _blocked(self, cart: Cart, reports: List[UnavailabilityReport]) -> CheckoutResult:
        cart.drop_unavailable(reports)
        return CheckoutResult(
            status=CheckoutStatus.BLOCKED,
            reports=reports,
            reason=Messages.format_unavailability_list(reports)
        )

    async def _void(self, reference: str) -> None:
        result = await self.payment_gateway.void(reference)
        if not result["success"]:
            self.logger.error(f"Could not void authorisation {reference}: {result.get('error')}")
