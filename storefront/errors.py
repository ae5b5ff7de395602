# storefront/errors.py
from typing import Iterable, Optional


class StorefrontError(Exception):
    """Base class for storefront errors"""


class ValidationError(StorefrontError):
    """Input rejected before touching the store"""


class DuplicateNameError(StorefrontError):
    """A sibling category already uses this name"""

    def __init__(self, name: str, parent_id: Optional[int] = None):
        self.name = name
        self.parent_id = parent_id
        scope = "top-level categories" if parent_id is None else f"subcategories of {parent_id}"
        super().__init__(f"Category '{name}' already exists among {scope}")


class HasDependentsError(StorefrontError):
    """Deletion blocked because products still reference the category"""

    def __init__(self, category_id: int, dependent_count: int):
        self.category_id = category_id
        self.dependent_count = dependent_count
        super().__init__(
            f"Category {category_id} has {dependent_count} dependent product(s); "
            "resubmit with cascade_delete_products=True to delete them"
        )


class CategoryNotFoundError(StorefrontError):
    """Referenced category does not exist"""


class InvalidParentError(StorefrontError):
    """Subcategories may only hang off a top-level category"""


class ProductNotFoundError(StorefrontError):
    """Referenced product does not exist"""


class StoreUnavailableError(StorefrontError):
    """Backing store is unreachable or misconfigured"""


class StockConflictError(StorefrontError):
    """Stock changed between the availability check and the decrement"""

    def __init__(self, product_ids: Iterable[int]):
        self.product_ids = list(product_ids)
        super().__init__(f"Insufficient stock for product(s): {self.product_ids}")


class OrphanedLineWarning(UserWarning):
    """A cart line points at a product that no longer exists"""
