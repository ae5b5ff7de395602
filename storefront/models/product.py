# storefront/models/product.py
from decimal import Decimal
from typing import Optional, List
from pydantic import BaseModel, Field
from .base import TimeStampedModel

class Product(TimeStampedModel):
    """Furniture item offered in the storefront.

    `category` may hold either a top-level category name or, in records
    written before subcategories existed, a subcategory name. Read the
    grouping through `resolve_effective_category` instead of this field.
    """
    id: int
    name: str
    description: str = ""
    price: Decimal = Field(ge=0)
    category: str
    subcategory: Optional[str] = None
    in_stock: bool = True
    quantity: int = Field(default=0, ge=0)

    # Not used by the catalog logic, carried through for display
    image: Optional[str] = None
    images: List[str] = []

class StockUpdate(BaseModel):
    """Quantity written back for one product after a sale"""
    product_id: int
    quantity: int
    in_stock: bool
