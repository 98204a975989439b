"""Tests for formatting utilities.

Tests the formatter functions used for payout messages and notes.
"""

from utils.formatters import (
    format_currency,
    format_rupiah,
    format_percentage,
    format_conversion_note,
)


class TestFormatCurrency:
    """Tests for format_currency function."""

    def test_thousands_separator(self):
        """Test large amounts are grouped by thousands."""
        assert format_currency(5000) == "¥5,000"

    def test_small_amount(self):
        """Test amounts under a thousand."""
        assert format_currency(250) == "¥250"

    def test_negative_amount(self):
        """Test the sign goes before the symbol."""
        assert format_currency(-1500) == "-¥1,500"

    def test_custom_symbol(self):
        """Test a different currency symbol."""
        assert format_currency(1000, symbol="$") == "$1,000"


class TestFormatRupiah:
    """Tests for format_rupiah function."""

    def test_dot_grouping(self):
        """Test Rupiah uses dots between thousands."""
        assert format_rupiah(630000) == "Rp630.000"


class TestFormatPercentage:
    """Tests for format_percentage function."""

    def test_one_decimal(self):
        """Test percentages keep one decimal."""
        assert format_percentage(33.333) == "33.3%"


class TestFormatConversionNote:
    """Tests for format_conversion_note function."""

    def test_note_contents(self):
        """Test the note shows both amounts and the rate."""
        note = format_conversion_note(6000, 630000, 105)

        assert "¥6,000" in note
        assert "Rp630.000" in note
        assert "kurs: 105" in note
