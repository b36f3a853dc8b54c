"""
Tests for amount parsing, resolution and formatting
"""

import pytest

from bill_recon.reconciliation.amounts import (
    find_amount_header,
    format_currency,
    format_fixed,
    parse_amount,
    resolve_amount
)
from bill_recon.reconciliation.models import Record, RecordCategory


class TestParseAmount:
    """Test cases for parse_amount"""

    @pytest.mark.parametrize("text,expected", [
        ("$1,234.56", 1234.56),
        ("100", 100.0),
        ("-30", -30.0),
        ("-$50.25", -50.25),
        (" 12.5 ", 12.5),
        (".5", 0.5),
        ("1e3", 1000.0),
        ("12abc", 12.0),
        ("abc", 0.0),
        ("", 0.0),
        ("(100)", 0.0),
        (None, 0.0),
    ])
    def test_parse(self, text, expected):
        assert parse_amount(text) == expected


class TestResolveAmount:
    """Test cases for the two-tier amount resolution policy"""

    def _record(self, headers, row_data, total):
        return Record(name='Acme', total=total, headers=headers,
                      row_data=row_data, category=RecordCategory.BILL)

    def test_exact_total_header_wins(self):
        record = self._record(('Name', 'Price', 'Total'),
                              {'Name': 'Acme', 'Price': '5', 'Total': '$2,000'}, total=5.0)
        assert resolve_amount(record) == 2000.0

    def test_exact_match_is_case_insensitive(self):
        record = self._record(('Name', 'AMOUNT'), {'Name': 'Acme', 'AMOUNT': '7'}, total=7.0)
        assert resolve_amount(record) == 7.0

    def test_substring_header_falls_back_to_parse_time_total(self):
        record = self._record(('Name', 'Invoice Total'),
                              {'Name': 'Acme', 'Invoice Total': '99'}, total=42.0)
        assert resolve_amount(record) == 42.0

    def test_unparsable_exact_value_is_zero(self):
        record = self._record(('Name', 'Price', 'Total'),
                              {'Name': 'Acme', 'Price': '5', 'Total': 'n/a'}, total=5.0)
        assert resolve_amount(record) == 0.0

    def test_empty_exact_value_is_zero(self):
        record = self._record(('Name', 'Price', 'Total'),
                              {'Name': 'Acme', 'Price': '5', 'Total': ''}, total=5.0)
        assert resolve_amount(record) == 0.0

    def test_first_exact_header_in_header_order(self):
        assert find_amount_header(['Name', 'Amount', 'Total']) == 'Amount'
        assert find_amount_header(['Name', 'Subtotal']) is None


class TestFormatting:
    """Test cases for fixed and currency formatting"""

    @pytest.mark.parametrize("value,expected", [
        (0.0, "0.00"),
        (-0.0, "0.00"),
        (70.0, "70.00"),
        (1234.5, "1234.50"),
        (-30.0, "-30.00"),
        (-0.004, "-0.00"),
        (0.125, "0.13"),
        (-0.125, "-0.13"),
        (1.005, "1.00"),
    ])
    def test_format_fixed(self, value, expected):
        assert format_fixed(value) == expected

    def test_format_fixed_large_value(self):
        assert format_fixed(1e20) == "100000000000000000000.00"

    def test_format_currency(self):
        assert format_currency(1234.5) == "$1,234.50"
        assert format_currency(-99.999) == "$100.00"
