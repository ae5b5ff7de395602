# storefront/models/category.py
from typing import Optional, List
from pydantic import BaseModel
from .base import TimeStampedModel

class Category(TimeStampedModel):
    """Category record; parent_id is None for top-level categories"""
    id: int
    name: str
    parent_id: Optional[int] = None

    @property
    def is_top_level(self) -> bool:
        return self.parent_id is None

class CategoryNode(BaseModel):
    """A top-level category with its subcategories"""
    id: int
    name: str
    subcategories: List[Category] = []

    @property
    def subcategory_names(self) -> List[str]:
        return [sub.name for sub in self.subcategories]
