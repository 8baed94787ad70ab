"""Tests for amount parser."""

import pytest
from decimal import Decimal
from bilanzkit.utils.amount_parser import parse_amount


@pytest.mark.parametrize(
    "text, expected",
    [
        ("119,00", "119.00"),
        ("1.093,08", "1093.08"),
        ("1,093.08", "1093.08"),
        ("1234.56", "1234.56"),
        ("-3.604,21", "-3604.21"),
        ("3.604,21-", "-3604.21"),
        ("€ 119,00", "119.00"),
        ("119,00 EUR", "119.00"),
        ("(12.50)", "-12.50"),
        ("1.234.567", "1234567"),
    ],
)
def test_parse_amount(text, expected):
    assert parse_amount(text) == Decimal(expected)


@pytest.mark.parametrize("text", ["", "   ", "abc", "12,3,4x", "Infinity"])
def test_parse_invalid_amount(text):
    with pytest.raises(ValueError):
        parse_amount(text)
