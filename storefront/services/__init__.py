# storefront/services/__init__.py
"""Catalog, inventory and checkout services"""
from .category_service import CategoryService
from .product_service import ProductService
from .stock_service import StockService
from .checkout_service import CheckoutService
from .payment_service import PaymentGateway, HttpPaymentGateway
from .tax_service import TaxCalculator

__all__ = [
    'CategoryService',
    'ProductService',
    'StockService',
    'CheckoutService',
    'PaymentGateway',
    'HttpPaymentGateway',
    'TaxCalculator',
]
