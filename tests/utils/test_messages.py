from datetime import datetime, timezone
from decimal import Decimal

from storefront.models.order import AvailabilityIssue, Order, OrderItem, UnavailabilityReport
from storefront.utils.formatters import format_datetime, format_price
from storefront.utils.messages import Messages
from tests.helpers import make_product


class TestFormatters:
    """Tests for price and date formatting."""

    def test_format_price(self):
        assert format_price(Decimal("1299"), "GBP") == "£1,299.00"
        assert format_price(Decimal("5.5"), "SEK") == "5.50 SEK"

    def test_format_datetime_uses_store_timezone(self):
        # 12:00 UTC in July is 13:00 in London
        assert format_datetime(datetime(2024, 7, 1, 12, 0, tzinfo=timezone.utc)) == "2024-07-01 13:00:00"

    def test_naive_datetime_treated_as_utc(self):
        assert format_datetime(datetime(2024, 1, 1, 12, 0)) == "2024-01-01 12:00:00"


class TestMessages:
    """Tests for customer-facing messages."""

    def test_out_of_stock(self):
        report = UnavailabilityReport(
            product_id=1, product_name="Oak Table",
            kind=AvailabilityIssue.OUT_OF_STOCK,
            requested_quantity=1, available_quantity=0
        )

        assert Messages.format_unavailability(report) == "Oak Table is out of stock."

    def test_insufficient_quantity(self):
        report = UnavailabilityReport(
            product_id=2, kind=AvailabilityIssue.INSUFFICIENT_QUANTITY,
            requested_quantity=4, available_quantity=1
        )

        assert Messages.format_unavailability(report) == "Only 1 of Item #2 available (you requested 4)."

    def test_format_product(self):
        assert Messages.format_product(make_product(1, "Oak Table", 899, "Tables", quantity=0)) == (
            "Oak Table - £899.00 (Out of stock)"
        )

    def test_format_order(self):
        order = Order(
            items=[OrderItem(product_id=1, name="Oak Table", quantity=2, price_per_unit=Decimal("100"))],
            currency="GBP",
            country_code="GB",
            subtotal=Decimal("200"),
            tax=Decimal("40.00"),
            tax_label="VAT",
            total_amount=Decimal("240.00"),
            payment_reference="pay_1",
            placed_at=datetime(2024, 1, 1, 9, 30, tzinfo=timezone.utc)
        )

        text = Messages.format_order(order)

        assert "- 2x Oak Table: £200.00" in text
        assert "VAT: £40.00" in text
        assert "Total: £240.00" in text
        assert "Placed: 2024-01-01 09:30:00" in text
