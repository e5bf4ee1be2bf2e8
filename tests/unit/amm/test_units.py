"""Tests for decimal unit conversion."""

import pytest

from dexroute.amm.units import format_units, parse_units


class TestParseUnits:
    def test_fractional_ether(self):
        assert parse_units("1.5", 18) == 1_500_000_000_000_000_000

    def test_integer(self):
        assert parse_units("2000", 6) == 2_000_000_000

    def test_leading_dot(self):
        assert parse_units(".25", 6) == 250_000

    def test_excess_digits_truncate(self):
        """Digits beyond the token's precision are dropped, not rounded."""
        assert parse_units("0.1234567", 6) == 123_456

    def test_zero_decimals(self):
        assert parse_units("42.9", 0) == 42

    @pytest.mark.parametrize("text", ["", "abc", "1.2.3", "-1", "1e18"])
    def test_invalid_raises(self, text):
        with pytest.raises(ValueError, match="Invalid amount"):
            parse_units(text, 18)


class TestFormatUnits:
    def test_trims_trailing_zeros(self):
        assert format_units(1_500_000_000_000_000_000, 18) == "1.5"

    def test_whole_number(self):
        assert format_units(2_000_000_000, 6) == "2000"

    def test_small_fraction_keeps_leading_zeros(self):
        assert format_units(1, 6) == "0.000001"

    def test_zero_decimals(self):
        assert format_units(42, 0) == "42"

    def test_negative_raises(self):
        with pytest.raises(ValueError):
            format_units(-1, 18)
