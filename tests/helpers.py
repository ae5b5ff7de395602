"""Helper utilities for tests."""

from decimal import Decimal

from storefront.models.product import Product


def make_product(id, name, price, category, subcategory=None, quantity=5, in_stock=None):
    """Build a Product with sensible defaults for tests."""
    return Product(
        id=id,
        name=name,
        description=f"{name} description",
        price=Decimal(str(price)),
        category=category,
        subcategory=subcategory,
        quantity=quantity,
        in_stock=quantity > 0 if in_stock is None else in_stock,
    )


class FakePaymentGateway:
    """Records calls and answers with a fixed outcome."""

    def __init__(self, succeed=True, error="Card declined"):
        self.succeed = succeed
        self.error = error
        self.authorized = []
        self.voided = []

    async def authorize(self, amount, currency, billing):
        self.authorized.append((amount, currency, billing))
        if not self.succeed:
            return {"success": False, "error": self.error}
        return {"success": True, "reference": f"auth_{len(self.authorized)}"}

    async def void(self, reference):
        self.voided.append(reference)
        return {"success": True, "reference": reference}
