# storefront/database/record_store.py
import abc
import asyncio
import logging
from contextlib import asynccontextmanager
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

import asyncpg

from ..config import Config
from ..errors import (
    CategoryNotFoundError,
    DuplicateNameError,
    StockConflictError,
    StoreUnavailableError,
)
from ..models.base import utcnow
from ..models.cart import CartLine
from ..models.category import Category
from ..models.product import Product, StockUpdate
from ..services.stock_service import apply_stock_decrement
from .database import Database

logger = logging.getLogger(__name__)

PRODUCT_COLUMNS = (
    "id, name, description, price, category, subcategory, in_stock, "
    "quantity, image, images, created_at, updated_at"
)


class RecordStore(abc.ABC):
    """Record store the catalog services read from and write to.

    Every method may raise StoreUnavailableError; callers let it propagate.
    """

    @abc.abstractmethod
    async def list_categories(self) -> List[Category]:
        ...

    @abc.abstractmethod
    async def insert_category(self, name: str, parent_id: Optional[int] = None) -> Category:
        ...

    @abc.abstractmethod
    async def rename_category(self, category_id: int, new_name: str) -> int:
        """Rename in place and re-point products using the old name; returns products touched"""

    @abc.abstractmethod
    async def delete_category(self, category_id: int, product_ids: Iterable[int] = ()) -> None:
        """Delete a category, its subcategories and the given products together"""

    @abc.abstractmethod
    async def list_products(self) -> List[Product]:
        ...

    @abc.abstractmethod
    async def get_product(self, product_id: int) -> Optional[Product]:
        ...

    @abc.abstractmethod
    async def upsert_product(self, product: Product) -> Product:
        ...

    @abc.abstractmethod
    async def next_product_id(self) -> int:
        ...

    @abc.abstractmethod
    async def delete_product(self, product_id: int) -> bool:
        ...

    @abc.abstractmethod
    async def update_product_quantity(self, product_id: int, quantity: int, in_stock: bool) -> bool:
        ...

    @abc.abstractmethod
    async def decrement_stock(self, lines: Sequence[CartLine]) -> Tuple[List[StockUpdate], List[int]]:
        """Conditionally decrement every line as one unit.

        Returns the applied updates and the ids of lines whose product no
        longer exists. Raises StockConflictError, writing nothing, if any
        existing product has less stock than requested.
        """

    async def close(self) -> None:
        pass


class PostgresRecordStore(RecordStore):
    """Record store backed by the asyncpg pool of a Database"""

    def __init__(self, db):
        self.db = db

    async def close(self) -> None:
        await self.db.close()

    @asynccontextmanager
    async def _connection(self):
        if self.db.pool is None:
            raise StoreUnavailableError("Database pool is not connected")
        try:
            async with self.db.pool.acquire() as conn:
                yield conn
        except (asyncpg.PostgresError, asyncpg.InterfaceError, OSError) as e:
            logger.error(f"Store operation failed: {e}")
            raise StoreUnavailableError(str(e)) from e

    async def list_categories(self) -> List[Category]:
        async with self._connection() as conn:
            rows = await conn.fetch("""
                SELECT id, name, parent_id, created_at, updated_at
                FROM categories
                ORDER BY parent_id NULLS FIRST, name
            """)
            return [Category.model_validate(dict(row)) for row in rows]

    async def insert_category(self, name: str, parent_id: Optional[int] = None) -> Category:
        async with self._connection() as conn:
            try:
                row = await conn.fetchrow("""
                    INSERT INTO categories (name, parent_id)
                    VALUES ($1, $2)
                    RETURNING id, name, parent_id, created_at, updated_at
                """, name, parent_id)
            except asyncpg.UniqueViolationError:
                raise DuplicateNameError(name, parent_id)
            except asyncpg.ForeignKeyViolationError:
                raise CategoryNotFoundError(f"Parent category {parent_id} not found")
            return Category.model_validate(dict(row))

    async def rename_category(self, category_id: int, new_name: str) -> int:
        async with self._connection() as conn:
            async with conn.transaction():
                row = await conn.fetchrow("""
                    SELECT c.name, c.parent_id, p.name AS parent_name
                    FROM categories c
                    LEFT JOIN categories p ON p.id = c.parent_id
                    WHERE c.id = $1
                    FOR UPDATE OF c
                """, category_id)
                if row is None:
                    raise CategoryNotFoundError(f"Category {category_id} not found")
                old_name, parent_id = row["name"], row["parent_id"]

                try:
                    await conn.execute("""
                        UPDATE categories
                        SET name = $1, updated_at = NOW()
                        WHERE id = $2
                    """, new_name, category_id)
                except asyncpg.UniqueViolationError:
                    raise DuplicateNameError(new_name, parent_id)

                if parent_id is None:
                    result = await conn.execute("""
                        UPDATE products SET category = $1, updated_at = NOW()
                        WHERE category = $2
                    """, new_name, old_name)
                    return _rowcount(result)

                by_subcategory = await conn.execute("""
                    UPDATE products SET subcategory = $1, updated_at = NOW()
                    WHERE subcategory = $2 AND category = $3
                """, new_name, old_name, row["parent_name"])
                # Legacy rows belong to the category the parent map resolves
                # the name to: a top-level entry, else the lowest parent id
                legacy = await conn.execute("""
                    UPDATE products SET category = $1, updated_at = NOW()
                    WHERE category = $2 AND subcategory IS NULL
                      AND NOT EXISTS (
                          SELECT 1 FROM categories
                          WHERE name = $2 AND id <> $3
                            AND (parent_id IS NULL OR parent_id < $4)
                      )
                """, new_name, old_name, category_id, parent_id)

                return _rowcount(by_subcategory) + _rowcount(legacy)

    async def delete_category(self, category_id: int, product_ids: Iterable[int] = ()) -> None:
        product_ids = list(product_ids)
        async with self._connection() as conn:
            async with conn.transaction():
                if product_ids:
                    await conn.execute(
                        "DELETE FROM products WHERE id = ANY($1::int[])", product_ids
                    )

                await conn.execute("DELETE FROM categories WHERE parent_id = $1", category_id)

                result = await conn.execute("DELETE FROM categories WHERE id = $1", category_id)
                if result != "DELETE 1":
                    raise CategoryNotFoundError(f"Category {category_id} not found")

    async def list_products(self) -> List[Product]:
        async with self._connection() as conn:
            rows = await conn.fetch(f"SELECT {PRODUCT_COLUMNS} FROM products ORDER BY id")
            return [Product.model_validate(dict(row)) for row in rows]

    async def get_product(self, product_id: int) -> Optional[Product]:
        async with self._connection() as conn:
            row = await conn.fetchrow(
                f"SELECT {PRODUCT_COLUMNS} FROM products WHERE id = $1", product_id
            )
            return Product.model_validate(dict(row)) if row else None

    async def upsert_product(self, product: Product) -> Product:
        async with self._connection() as conn:
            row = await conn.fetchrow(f"""
                INSERT INTO products (
                    id, name, description, price, category, subcategory,
                    in_stock, quantity, image, images
                ) VALUES ($1, $2, $3, $4, $5, $6, $7, $8, $9, $10)
                ON CONFLICT (id) DO UPDATE SET
                    name = EXCLUDED.name,
                    description = EXCLUDED.description,
                    price = EXCLUDED.price,
                    category = EXCLUDED.category,
                    subcategory = EXCLUDED.subcategory,
                    in_stock = EXCLUDED.in_stock,
                    quantity = EXCLUDED.quantity,
                    image = EXCLUDED.image,
                    images = EXCLUDED.images,
                    updated_at = NOW()
                RETURNING {PRODUCT_COLUMNS}
            """,
                product.id,
                product.name,
                product.description,
                product.price,
                product.category,
                product.subcategory,
                product.in_stock,
                product.quantity,
                product.image,
                product.images
            )
            # Keep the serial ahead of explicitly supplied ids
            await conn.execute("""
                SELECT setval(pg_get_serial_sequence('products', 'id'),
                              GREATEST((SELECT MAX(id) FROM products), 1))
            """)
            return Product.model_validate(dict(row))

    async def next_product_id(self) -> int:
        async with self._connection() as conn:
            return await conn.fetchval(
                "SELECT nextval(pg_get_serial_sequence('products', 'id'))"
            )

    async def delete_product(self, product_id: int) -> bool:
        async with self._connection() as conn:
            result = await conn.execute("DELETE FROM products WHERE id = $1", product_id)
            return result == "DELETE 1"

    async def update_product_quantity(self, product_id: int, quantity: int, in_stock: bool) -> bool:
        async with self._connection() as conn:
            result = await conn.execute("""
                UPDATE products
                SET quantity = $1, in_stock = $2, updated_at = NOW()
                WHERE id = $3
            """, quantity, in_stock, product_id)
            return result == "UPDATE 1"

    async def decrement_stock(self, lines: Sequence[CartLine]) -> Tuple[List[StockUpdate], List[int]]:
        updates: List[StockUpdate] = []
        orphaned: List[int] = []
        conflicts: List[int] = []

        async with self._connection() as conn:
            async with conn.transaction():
                # Fixed lock order so concurrent checkouts cannot deadlock
                for line in sorted(lines, key=lambda l: l.product_id):
                    row = await conn.fetchrow("""
                        UPDATE products
                        SET quantity = quantity - $1,
                            in_stock = (quantity - $1) > 0,
                            updated_at = NOW()
                        WHERE id = $2 AND in_stock AND quantity >= $1
                        RETURNING id, quantity, in_stock
                    """, line.quantity, line.product_id)

                    if row:
                        updates.append(StockUpdate(
                            product_id=row["id"],
                            quantity=row["quantity"],
                            in_stock=row["in_stock"]
                        ))
                        continue

                    exists = await conn.fetchval(
                        "SELECT 1 FROM products WHERE id = $1", line.product_id
                    )
                    if exists:
                        conflicts.append(line.product_id)
                    else:
                        orphaned.append(line.product_id)

                if conflicts:
                    # Raising inside the transaction block rolls every line back
                    raise StockConflictError(conflicts)

        return updates, orphaned


class MemoryRecordStore(RecordStore):
    """In-process record store used for local runs and tests"""

    def __init__(self, categories: Iterable[Category] = (), products: Iterable[Product] = ()):
        self._categories: Dict[int, Category] = {c.id: c.model_copy() for c in categories}
        self._products: Dict[int, Product] = {p.id: p.model_copy() for p in products}
        self._last_category_id = max(self._categories, default=0)
        self._last_product_id = max(self._products, default=0)
        self._stock_lock = asyncio.Lock()

    async def list_categories(self) -> List[Category]:
        return sorted(
            (c.model_copy() for c in self._categories.values()),
            key=lambda c: (c.parent_id is not None, c.parent_id or 0, c.name)
        )

    async def insert_category(self, name: str, parent_id: Optional[int] = None) -> Category:
        if parent_id is not None and parent_id not in self._categories:
            raise CategoryNotFoundError(f"Parent category {parent_id} not found")
        for existing in self._categories.values():
            if existing.parent_id == parent_id and existing.name == name:
                raise DuplicateNameError(name, parent_id)

        self._last_category_id += 1
        category = Category(id=self._last_category_id, name=name, parent_id=parent_id)
        self._categories[category.id] = category
        return category.model_copy()

    async def rename_category(self, category_id: int, new_name: str) -> int:
        category = self._categories.get(category_id)
        if category is None:
            raise CategoryNotFoundError(f"Category {category_id} not found")

        old_name = category.name
        parent = self._categories.get(category.parent_id) if category.parent_id is not None else None
        owns_legacy = parent is None or not any(
            other.name == old_name and other.id != category_id
            and (other.parent_id is None or other.parent_id < category.parent_id)
            for other in self._categories.values()
        )
        category.name = new_name
        category.updated_at = utcnow()

        touched = 0
        for product in self._products.values():
            if parent is None:
                if product.category == old_name:
                    product.category = new_name
                    touched += 1
            elif product.subcategory == old_name and product.category == parent.name:
                product.subcategory = new_name
                touched += 1
            elif owns_legacy and product.subcategory is None and product.category == old_name:
                product.category = new_name
                touched += 1
        return touched

    async def delete_category(self, category_id: int, product_ids: Iterable[int] = ()) -> None:
        if category_id not in self._categories:
            raise CategoryNotFoundError(f"Category {category_id} not found")

        for product_id in list(product_ids):
            self._products.pop(product_id, None)
        for child_id in [c.id for c in self._categories.values() if c.parent_id == category_id]:
            del self._categories[child_id]
        del self._categories[category_id]

    async def list_products(self) -> List[Product]:
        return [self._products[pid].model_copy() for pid in sorted(self._products)]

    async def get_product(self, product_id: int) -> Optional[Product]:
        product = self._products.get(product_id)
        return product.model_copy() if product else None

    async def upsert_product(self, product: Product) -> Product:
        stored = product.model_copy(deep=True)
        if product.id in self._products:
            stored.created_at = self._products[product.id].created_at
            stored.updated_at = utcnow()
        self._products[stored.id] = stored
        self._last_product_id = max(self._last_product_id, stored.id)
        return stored.model_copy()

    async def next_product_id(self) -> int:
        self._last_product_id += 1
        return self._last_product_id

    async def delete_product(self, product_id: int) -> bool:
        return self._products.pop(product_id, None) is not None

    async def update_product_quantity(self, product_id: int, quantity: int, in_stock: bool) -> bool:
        product = self._products.get(product_id)
        if product is None:
            return False
        product.quantity = quantity
        product.in_stock = in_stock
        product.updated_at = utcnow()
        return True

    async def decrement_stock(self, lines: Sequence[CartLine]) -> Tuple[List[StockUpdate], List[int]]:
        async with self._stock_lock:
            orphaned = [line.product_id for line in lines if line.product_id not in self._products]

            requested: Dict[int, int] = {}
            for line in lines:
                if line.product_id in self._products:
                    requested[line.product_id] = requested.get(line.product_id, 0) + line.quantity

            conflicts = [
                product_id for product_id, quantity in requested.items()
                if not self._products[product_id].in_stock
                or self._products[product_id].quantity < quantity
            ]
            if conflicts:
                raise StockConflictError(conflicts)

            updates = []
            live_lines = [line for line in lines if line.product_id in self._products]
            for product in apply_stock_decrement(live_lines, self._products.values()):
                product.updated_at = utcnow()
                self._products[product.id] = product
                updates.append(StockUpdate(
                    product_id=product.id,
                    quantity=product.quantity,
                    in_stock=product.in_stock
                ))
            return updates, orphaned


def _rowcount(status: str) -> int:
    """Row count from an asyncpg command status such as 'UPDATE 3'"""
    try:
        return int(status.split()[-1])
    except (ValueError, IndexError):
        return 0


async def open_store(backend: Optional[str] = None) -> RecordStore:
    """Build the configured store; postgres connects and migrates first"""
    backend = backend or Config.STORE_BACKEND
    if backend == "memory":
        return MemoryRecordStore()

    db = Database()
    await db.connect()
    return PostgresRecordStore(db)
