"""
utils/payment_utils.py

Purpose: Money helpers

- Lenient amount parsing (course fees arrive as numbers or strings)
- Conversion to minor units (paise) for payment orders
- Indian-grouped rupee formatting for display
- Error message extraction from backend payloads
"""

import math
import re
from typing import Any, Optional


_LEADING_NUMBER = re.compile(r"^[+-]?(\d+\.?\d*|\.\d+)([eE][+-]?\d+)?")


def parse_amount(value: Any) -> float:
    """
    Parses a fee value the way the storefront always has: the leading
    numeric part of the value, or 0 when there is none.

    Examples:
        1499 -> 1499.0
        "1499.50" -> 1499.5
        "1499 INR" -> 1499.0
        None / "" / "free" -> 0.0
    """
    if value is None or isinstance(value, bool):
        return 0.0

    if isinstance(value, (int, float)):
        amount = float(value)
    else:
        match = _LEADING_NUMBER.match(str(value).strip())
        if not match:
            return 0.0
        amount = float(match.group(0))

    if math.isnan(amount) or math.isinf(amount):
        return 0.0
    return amount


def round_half_up(value: float) -> int:
    """Rounds to the nearest integer, halves going up."""
    return int(math.floor(value + 0.5))


def to_minor_units(amount: float) -> int:
    """
    Converts a rupee amount to paise for payment orders.

    Args:
        amount: Amount in rupees

    Returns:
        Integer amount in paise
    """
    return round_half_up(amount * 100)


def format_inr(amount: float, symbol: str = "₹") -> str:
    """
    Formats an amount as whole rupees with Indian digit grouping.

    Examples:
        1499 -> "₹1,499"
        150000 -> "₹1,50,000"
        12345678.6 -> "₹1,23,45,679"
    """
    negative = amount < 0
    whole = round_half_up(abs(amount))
    digits = str(whole)

    if len(digits) > 3:
        head, tail = digits[:-3], digits[-3:]
        groups = []
        while len(head) > 2:
            groups.insert(0, head[-2:])
            head = head[:-2]
        if head:
            groups.insert(0, head)
        digits = ",".join(groups + [tail])

    return f"{'-' if negative else ''}{symbol}{digits}"


def extract_error_message(payload: Any, fallback: str) -> str:
    """
    Pulls a user-facing message out of a backend error body.

    Looks at 'error' first, then 'message'; anything else falls back.
    """
    if isinstance(payload, dict):
        for key in ("error", "message"):
            value: Optional[Any] = payload.get(key)
            if isinstance(value, str) and value.strip():
                return value
            if isinstance(value, dict):
                nested = value.get("description") or value.get("message")
                if isinstance(nested, str) and nested.strip():
                    return nested
    return fallback
