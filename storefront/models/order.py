# storefront/models/order.py
from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import List, Optional
from pydantic import BaseModel
from .base import TimeStampedModel

class AvailabilityIssue(str, Enum):
    OUT_OF_STOCK = "out_of_stock"
    INSUFFICIENT_QUANTITY = "insufficient_quantity"

class UnavailabilityReport(BaseModel):
    """Why a cart line cannot currently be fulfilled"""
    product_id: int
    product_name: Optional[str] = None
    kind: AvailabilityIssue
    requested_quantity: int
    available_quantity: int

class CheckoutStatus(str, Enum):
    CONFIRMED = "confirmed"
    BLOCKED = "blocked"
    PAYMENT_FAILED = "payment_failed"

class OrderItem(BaseModel):
    """Individual item in an order"""
    product_id: int
    name: str
    quantity: int
    price_per_unit: Decimal

    @property
    def total_price(self) -> Decimal:
        return self.price_per_unit * self.quantity

class Order(TimeStampedModel):
    """Confirmed order"""
    items: List[OrderItem]
    currency: str
    country_code: str
    subtotal: Decimal
    tax: Decimal
    tax_label: str
    total_amount: Decimal
    payment_reference: str
    placed_at: datetime

class CheckoutResult(BaseModel):
    status: CheckoutStatus
    order: Optional[Order] = None
    reports: List[UnavailabilityReport] = []
    reason: Optional[str] = None

    @property
    def is_confirmed(self) -> bool:
        return self.status == CheckoutStatus.CONFIRMED
