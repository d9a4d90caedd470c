"""Tests for amount parsing."""

import pytest
from decimal import Decimal
from cardrecon.utils.amount_parser import parse_amount


@pytest.mark.parametrize(
    "text,expected",
    [
        ("123.45", Decimal("123.45")),
        ("-123.45", Decimal("-123.45")),
        ("$1,234.56", Decimal("1234.56")),
        ("R$ 1.234,56", Decimal("1234.56")),
        ("-80,00", Decimal("-80.00")),
        ("(50.00)", Decimal("-50.00")),
        ("1,234", Decimal("1234")),
        (" 1000 ", Decimal("1000")),
    ],
)
def test_parse_amount(text, expected):
    """Test supported amount formats."""
    assert parse_amount(text) == expected


@pytest.mark.parametrize("text", ["", "   ", "abc", "12.3.4", "nan"])
def test_parse_amount_invalid(text):
    """Test that invalid amounts raise ValueError."""
    with pytest.raises(ValueError):
        parse_amount(text)
