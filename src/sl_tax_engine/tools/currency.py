"""Currency parsing and formatting helpers for LKR amounts."""

import logging
import re
from typing import Any, Optional

logger = logging.getLogger(__name__)

_CURRENCY_PREFIX = re.compile(r"^(rs\.?|lkr|usd|\$|€|£)", re.IGNORECASE)


def parse_currency_string(value: str) -> float:
    """Parse a currency string to float, removing currency symbols and formatting.

    Handles strings like "Rs. 1,234.56", "LKR 1,200,000", "$1.10", "(5,000.00)".

    Args:
        value: String value that may contain currency symbols, commas, etc.

    Returns:
        Float value parsed from the string

    Raises:
        ValueError: If the string cannot be parsed to a float
    """
    if not isinstance(value, str):
        raise ValueError(f"Expected string, got {type(value)}")

    cleaned = value.strip()

    # Accounting notation: (1,000.00) means -1000
    negative = cleaned.startswith("(") and cleaned.endswith(")")
    if negative:
        cleaned = cleaned[1:-1].strip()

    cleaned = _CURRENCY_PREFIX.sub("", cleaned)

    # Remove commas (thousand separators) and whitespace
    cleaned = cleaned.replace(",", "").strip()

    if not cleaned:
        return 0.0

    try:
        amount = float(cleaned)
    except ValueError as e:
        raise ValueError(f"Could not parse currency string '{value}' to float: {e}") from e

    return -amount if negative else amount


def coerce_amount(value: Any) -> float:
    """Coerce an optional money value to float; missing values count as zero."""
    if value is None:
        return 0.0
    if isinstance(value, str):
        return parse_currency_string(value)
    return float(value)


def format_lkr(amount: Optional[float]) -> str:
    """Format an amount as Sri Lankan Rupees (e.g. "Rs. 1,234.56")."""
    return f"Rs. {(amount or 0.0):,.2f}"
