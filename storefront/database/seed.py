# storefront/database/seed.py
import json
import logging
from decimal import Decimal
from pathlib import Path
from typing import Any, Dict, Union

from ..errors import DuplicateNameError

logger = logging.getLogger(__name__)

def load_seed_file(path: Union[str, Path]) -> Dict[str, Any]:
    with open(path, encoding="utf-8") as f:
        return json.load(f)

async def seed_catalog(category_service, product_service, data: Dict[str, Any]) -> Dict[str, int]:
    """Load categories and products from seed data.

    Expected shape:
        {"categories": [{"name": "Sofas", "subcategories": ["Corner sofas"]}],
         "products": [{"name": ..., "price": ..., "category": ..., ...}]}

    Categories that already exist are reused, so re-running is safe for the
    category tree. Products are always created.
    """
    existing = {(c.parent_id, c.name): c for c in await category_service.list_all()}
    categories_added = 0

    for entry in data.get("categories", []):
        parent = existing.get((None, entry["name"]))
        if parent is None:
            parent = await category_service.add(entry["name"])
            existing[(None, parent.name)] = parent
            categories_added += 1

        for sub_name in entry.get("subcategories", []):
            if (parent.id, sub_name) in existing:
                continue
            try:
                sub = await category_service.add(sub_name, parent.id)
            except DuplicateNameError:
                logger.warning(f"Subcategory '{sub_name}' already exists under '{parent.name}'")
                continue
            existing[(parent.id, sub.name)] = sub
            categories_added += 1

    products_added = 0
    for entry in data.get("products", []):
        fields = dict(entry)
        fields.pop("id", None)
        fields["price"] = Decimal(str(fields["price"]))
        await product_service.create(**fields)
        products_added += 1

    logger.info(f"Seeded {categories_added} categories and {products_added} products")
    return {"categories": categories_added, "products": products_added}
