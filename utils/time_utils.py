"""
utils/time_utils.py

Purpose: Time and expiry helpers

- Epoch timestamps for receipts
- Token expiry checks
"""

import time
from typing import Optional


def now_ms() -> int:
    """
    Current Unix time in milliseconds.
    """
    return int(time.time() * 1000)


def is_expired(exp: Optional[float], now: Optional[float] = None) -> bool:
    """
    Checks a Unix 'exp' timestamp (seconds) against the current time.
    A missing expiry never expires.
    """
    if exp is None:
        return False
    current = time.time() if now is None else now
    return float(exp) < current
