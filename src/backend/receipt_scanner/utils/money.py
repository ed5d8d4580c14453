"""
Money parsing utilities for OCR'd receipt amounts.

Handles:
- Grouping separators: 1,234.56 -> 1234.56
- Currency symbols: $12.34 -> 12.34
- Missing decimals: 1234 -> 1234
"""

from decimal import Decimal, InvalidOperation
from typing import Optional
import re

# Amounts outside (0, MAX_RECEIPT_AMOUNT) are treated as OCR noise
MIN_RECEIPT_AMOUNT = Decimal('0')
MAX_RECEIPT_AMOUNT = Decimal('10000')


def parse_money(
    amount_str: str,
    allow_negative: bool = False
) -> Optional[Decimal]:
    """
    Parse a money string into a Decimal.

    Args:
        amount_str: String containing amount (e.g., "$1,234.56", "12.50")
        allow_negative: Whether to allow negative amounts

    Returns:
        Decimal amount or None if parsing fails

    Examples:
        >>> parse_money("$1,234.56")
        Decimal('1234.56')
        >>> parse_money("-3.00", allow_negative=True)
        Decimal('-3.00')
    """
    if not amount_str or not isinstance(amount_str, str):
        return None

    is_negative = False
    cleaned = amount_str.strip()

    if cleaned.startswith('-'):
        if not allow_negative:
            return None
        is_negative = True
        cleaned = cleaned[1:].strip()

    # Strip currency symbols
    cleaned = re.sub(r'[$£€¥]\s*', '', cleaned)

    # Remove grouping separators and stray spaces
    cleaned = cleaned.replace(',', '').replace(' ', '')

    if not cleaned:
        return None

    try:
        result = Decimal(cleaned)
    except (InvalidOperation, ValueError):
        return None

    if not result.is_finite():
        return None

    return -result if is_negative else result


def is_plausible_amount(amount: Optional[Decimal]) -> bool:
    """Whether a parsed amount lies strictly inside the accepted receipt range."""
    if amount is None:
        return False
    return MIN_RECEIPT_AMOUNT < amount < MAX_RECEIPT_AMOUNT


def format_money(amount: Optional[Decimal], currency: str = 'USD') -> str:
    """
    Format Decimal amount as money string.

    Examples:
        >>> format_money(Decimal('1234.5'))
        '$1,234.50'
    """
    if amount is None:
        return 'N/A'

    symbol_map = {
        'USD': '$',
        'CAD': '$',
        'EUR': '€',
        'GBP': '£',
    }
    symbol = symbol_map.get(currency.upper(), currency)

    return f"{symbol}{amount:,.2f}"
