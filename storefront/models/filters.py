# storefront/models/filters.py
from decimal import Decimal
from enum import Enum
from typing import Optional, Set
from pydantic import BaseModel, Field, model_validator

class SortKey(str, Enum):
    PRICE_ASC = "price-asc"
    PRICE_DESC = "price-desc"
    NAME_ASC = "name-asc"
    NAME_DESC = "name-desc"

class PriceRange(BaseModel):
    """Inclusive price bounds; None means unbounded on that side"""
    min: Optional[Decimal] = None
    max: Optional[Decimal] = None

    @model_validator(mode="after")
    def check_order(self) -> "PriceRange":
        if self.min is not None and self.max is not None and self.min > self.max:
            raise ValueError("price range min must not exceed max")
        return self

    def contains(self, price: Decimal) -> bool:
        if self.min is not None and price < self.min:
            return False
        if self.max is not None and price > self.max:
            return False
        return True

class FilterCriteria(BaseModel):
    """Per-view narrowing applied after category membership"""
    selected_subcategories: Set[str] = Field(default_factory=set)
    price_range: PriceRange = Field(default_factory=PriceRange)
    sort_key: SortKey = SortKey.PRICE_ASC
