# storefront/services/tax_service.py
from decimal import Decimal, ROUND_HALF_UP
from typing import Dict, Optional, Tuple

CENT = Decimal("0.01")

# country code -> (rate, label)
DEFAULT_RATES: Dict[str, Tuple[Decimal, str]] = {
    "GB": (Decimal("0.20"), "VAT"),
    "IE": (Decimal("0.23"), "VAT"),
    "DE": (Decimal("0.19"), "MwSt"),
    "FR": (Decimal("0.20"), "TVA"),
    "NL": (Decimal("0.21"), "BTW"),
    "US": (Decimal("0"), "Sales tax"),
}

class TaxCalculator:
    """Flat per-country sales tax"""

    def __init__(self, rates: Optional[Dict[str, Tuple[Decimal, str]]] = None):
        self.rates = dict(DEFAULT_RATES if rates is None else rates)

    def rate_for(self, country_code: str) -> Decimal:
        return self.rates.get((country_code or "").upper(), (Decimal(0), "Tax"))[0]

    def label_for(self, country_code: str) -> str:
        return self.rates.get((country_code or "").upper(), (Decimal(0), "Tax"))[1]

    def compute_tax(self, subtotal: Decimal, country_code: str) -> Decimal:
        return (Decimal(subtotal) * self.rate_for(country_code)).quantize(CENT, rounding=ROUND_HALF_UP)
