"""Tests for amount parsing and formatting."""

from decimal import Decimal

import pytest

from feeledger.utils.amount_parser import format_amount, parse_amount, quantize_amount


@pytest.mark.parametrize(
    "text, expected",
    [
        ("250", Decimal("250")),
        ("250.00", Decimal("250.00")),
        ("₱1,250.50", Decimal("1250.50")),
        ("PHP 1,250.50", Decimal("1250.50")),
        ("php1250", Decimal("1250")),
        ("$99.95", Decimal("99.95")),
        ("(50.00)", Decimal("-50.00")),
    ],
)
def test_parse_amount(text, expected):
    """Test the accepted amount notations."""
    assert parse_amount(text) == expected


@pytest.mark.parametrize("text", ["", "   ", "abc", "1.2.3", "Infinity", "NaN"])
def test_parse_amount_rejects(text):
    """Test strings that are not amounts."""
    with pytest.raises(ValueError):
        parse_amount(text)


def test_quantize_and_format():
    """Test rounding to centavos and display formatting."""
    assert quantize_amount(Decimal("12.345")) == Decimal("12.34")
    assert format_amount(Decimal("1250")) == "₱1,250.00"
    assert format_amount(Decimal("0.5")) == "₱0.50"
