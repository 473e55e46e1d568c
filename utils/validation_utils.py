"""
utils/validation_utils.py

Purpose: Input validation

- Required-field checks for profile completion
- Phone number format
- Input sanitization
"""

import re
from typing import Any, Dict, Iterable, List


def is_blank(value: Any) -> bool:
    """
    True for None, whitespace-only strings and empty collections.
    """
    if value is None:
        return True
    if isinstance(value, str):
        return not value.strip()
    if isinstance(value, (list, tuple, set, dict)):
        return len(value) == 0
    return False


def missing_required_fields(data: Dict[str, Any], required: Iterable[str]) -> List[str]:
    """
    Lists the required fields that are absent or empty in `data`.

    Args:
        data: Submitted form values
        required: Field names that must be non-empty

    Returns:
        Missing field names, in the order given
    """
    return [field for field in required if is_blank(data.get(field))]


def validate_phone_number(phone: str) -> bool:
    """
    Validates a contact number: 10 to 15 digits after stripping separators.

    Args:
        phone: Phone number string

    Returns:
        True if valid
    """
    if not phone:
        return False

    phone = re.sub(r"[\s\-\(\)]", "", phone)
    return bool(re.match(r"^[0-9]{10,15}$", phone))


def sanitize_input(text: str, max_length: int = 500) -> str:
    """
    Trims whitespace, collapses internal runs of spaces and caps length.
    """
    if not text:
        return ""
    text = re.sub(r"\s+", " ", text.strip())
    return text[:max_length]
