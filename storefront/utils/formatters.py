# storefront/utils/formatters.py
from datetime import datetime
import pytz
from decimal import Decimal
from typing import Optional
from ..config import Config

CURRENCY_SYMBOLS = {
    "GBP": "£",
    "EUR": "€",
    "USD": "$",
}

def format_price(amount: Decimal, currency: Optional[str] = None) -> str:
    """Price with currency symbol and two decimals, e.g. £1,299.00"""
    currency = currency or Config.CURRENCY
    symbol = CURRENCY_SYMBOLS.get(currency)
    if symbol:
        return f"{symbol}{amount:,.2f}"
    return f"{amount:,.2f} {currency}"

def format_datetime(dt: datetime) -> str:
    """Timestamp in the store's local time zone"""
    local_tz = pytz.timezone(Config.TIMEZONE)
    if dt.tzinfo is None:
        dt = pytz.utc.localize(dt)
    return dt.astimezone(local_tz).strftime("%Y-%m-%d %H:%M:%S")
