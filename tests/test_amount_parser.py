"""Tests for amount parsing."""

import pytest
from decimal import Decimal
from ledgersync.utils.amount_parser import parse_amount


def test_parse_plain_amount():
    assert parse_amount("123.45") == Decimal("123.45")


def test_parse_with_currency_symbol():
    assert parse_amount("$1,234.56") == Decimal("1234.56")


def test_parse_with_currency_code():
    """Test local currency suffixes are stripped."""
    assert parse_amount("150000 Ar") == Decimal("150000")
    assert parse_amount("150000 MGA") == Decimal("150000")


def test_parse_space_thousands_separator():
    assert parse_amount("500 000") == Decimal("500000")


def test_parse_rejects_empty():
    with pytest.raises(ValueError, match="Empty"):
        parse_amount("  ")


def test_parse_rejects_garbage():
    with pytest.raises(ValueError, match="Could not parse"):
        parse_amount("abc")


@pytest.mark.parametrize("value", ["0", "-50.00"])
def test_parse_rejects_non_positive(value):
    """Test ledger amounts must be positive."""
    with pytest.raises(ValueError, match="positive"):
        parse_amount(value)


@pytest.mark.parametrize("value", ["nan", "Infinity", "-inf", "sNaN"])
def test_parse_rejects_non_finite(value):
    with pytest.raises(ValueError, match="not a finite number"):
        parse_amount(value)
