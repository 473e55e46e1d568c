import pytest

from utils.payment_utils import extract_error_message, format_inr, parse_amount, to_minor_units
from utils.time_utils import is_expired
from utils.validation_utils import missing_required_fields, validate_phone_number


@pytest.mark.parametrize("value,expected", [
    (1499, 1499.0),
    ("1499.50", 1499.5),
    ("1499 INR", 1499.0),
    (" 250", 250.0),
    (None, 0.0),
    ("", 0.0),
    ("free", 0.0),
    (True, 0.0),
])
def test_parse_amount(value, expected):
    assert parse_amount(value) == expected


def test_minor_units():
    assert to_minor_units(15000) == 1500000
    assert to_minor_units(1499.5) == 149950
    assert to_minor_units(0.125) == 13
    assert to_minor_units(0) == 0


@pytest.mark.parametrize("amount,expected", [
    (0, "₹0"),
    (999, "₹999"),
    (1499, "₹1,499"),
    (150000, "₹1,50,000"),
    (12345678.6, "₹1,23,45,679"),
    (-2500, "-₹2,500"),
])
def test_format_inr(amount, expected):
    assert format_inr(amount) == expected


def test_extract_error_message_order():
    assert extract_error_message({"error": "E", "message": "M"}, "F") == "E"
    assert extract_error_message({"message": "M"}, "F") == "M"
    assert extract_error_message({"error": {"description": "Card declined"}}, "F") == "Card declined"
    assert extract_error_message({"error": ""}, "F") == "F"
    assert extract_error_message(None, "F") == "F"


def test_is_expired():
    assert is_expired(100, now=200)
    assert not is_expired(300, now=200)
    assert not is_expired(None)


def test_missing_required_fields():
    data = {"full_name": "Asha", "goals": [], "experience": "  "}
    assert missing_required_fields(data, ("full_name", "goals", "experience", "profession")) == [
        "goals", "experience", "profession"
    ]


def test_phone_number():
    assert validate_phone_number("98765 43210")
    assert validate_phone_number("+91 98765 43210") is False
    assert not validate_phone_number("12345")
