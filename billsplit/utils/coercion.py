"""Total coercion helpers for untrusted payload values.

Every function here accepts any value and returns an in-range result.
None of them raise; unusable input collapses to the given default.
"""

import re
from collections.abc import Mapping
from decimal import Decimal, InvalidOperation
from typing import Any, List, Optional

MAX_TEXT_LENGTH = 200
MAX_ITEMS = 100
MIN_QUANTITY = 1
MAX_QUANTITY = 100
DEFAULT_ITEM_NAME = "Unknown Item"
DEFAULT_CURRENCY = "USD"
DEFAULT_CONFIDENCE = 0.8
# Amounts at or above this are treated as unreadable
MAX_AMOUNT = Decimal("1e15")

_MARKUP_CHARS = re.compile(r"[<>]")
CURRENCY_PATTERN = re.compile(r"^[A-Z]{3}$")


def to_decimal(value: Any) -> Optional[Decimal]:
    """
    Read a finite number out of an arbitrary value.

    Accepts int, float, Decimal and numeric strings. Booleans, NaN and
    infinities are not numbers here.

    Returns:
        Decimal value, or None if the value is not numeric
    """
    if isinstance(value, bool):
        return None
    if isinstance(value, Decimal):
        number = value
    elif isinstance(value, (int, float)):
        number = Decimal(str(value))
    elif isinstance(value, str):
        text = value.strip()
        if not text:
            return None
        try:
            number = Decimal(text)
        except InvalidOperation:
            return None
    else:
        return None

    if not number.is_finite():
        return None
    return number


def to_text(value: Any) -> Optional[str]:
    """Read text from a string or a plain number; anything else is None"""
    if isinstance(value, str):
        return value
    if isinstance(value, (int, float, Decimal)) and not isinstance(value, bool):
        return str(value)
    return None


def strip_markup(text: str) -> str:
    """Remove characters that could open or close a markup tag"""
    return _MARKUP_CHARS.sub("", text)


def sanitize_text(value: Any, default: str = "") -> str:
    """
    Coerce a value to display-safe text.

    Truncates to MAX_TEXT_LENGTH characters, then strips `<` and `>`.

    Args:
        value: Untrusted value
        default: Used when the value is missing, blank or not text

    Returns:
        Sanitized text
    """
    text = to_text(value)
    if text is None or not text.strip():
        text = default
    return strip_markup(text[:MAX_TEXT_LENGTH])


def non_negative_decimal(value: Any, default: Decimal = Decimal("0")) -> Decimal:
    """
    Coerce to a non-negative Decimal below MAX_AMOUNT.

    Negative, non-numeric or out-of-range values give the default.
    """
    number = to_decimal(value)
    if number is None or number < 0 or number >= MAX_AMOUNT:
        return default
    # abs() folds -0 into 0
    return abs(number)


def clamp_quantity(value: Any) -> int:
    """Coerce to an integer quantity within [MIN_QUANTITY, MAX_QUANTITY]"""
    number = to_decimal(value)
    if number is None:
        return MIN_QUANTITY
    number = min(max(number, Decimal(MIN_QUANTITY)), Decimal(MAX_QUANTITY))
    return int(number)


def clamp_confidence(value: Any) -> float:
    """Coerce to a confidence ratio within [0, 1]; non-numeric gives 0.8"""
    number = to_decimal(value)
    if number is None:
        return DEFAULT_CONFIDENCE
    return float(min(max(number, Decimal("0")), Decimal("1")))


def normalize_currency(value: Any) -> str:
    """Upper-case an ISO 4217 style code, falling back to USD"""
    if not isinstance(value, str):
        return DEFAULT_CURRENCY
    code = value.strip().upper()
    if not CURRENCY_PATTERN.fullmatch(code):
        return DEFAULT_CURRENCY
    return code


def bounded_mappings(value: Any, limit: int = MAX_ITEMS) -> List[dict]:
    """
    Keep the first `limit` entries of a sequence, dropping non-mapping entries.

    Args:
        value: Untrusted value expected to be a list of objects
        limit: Maximum number of entries considered

    Returns:
        List of plain dicts with string keys
    """
    if not isinstance(value, (list, tuple)):
        return []
    return [
        string_keyed(entry)
        for entry in value[:limit]
        if isinstance(entry, Mapping)
    ]


def string_keyed(value: Mapping) -> dict:
    """Copy a mapping, keeping only string keys"""
    return {key: item for key, item in value.items() if isinstance(key, str)}
