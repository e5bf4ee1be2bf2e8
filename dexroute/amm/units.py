"""Conversion between human-readable decimal strings and base units.

Conversions are string based so no precision is lost for 18-decimal
tokens; excess fractional digits are truncated, never rounded.
"""

from __future__ import annotations


def parse_units(amount: str, decimals: int) -> int:
    """Parse "1.5" with 18 decimals into 1500000000000000000.

    Raises:
        ValueError: If amount is not a non-negative decimal number
    """
    text = amount.strip()
    if text.count(".") > 1 or not text.replace(".", "", 1).isdigit():
        raise ValueError(f"Invalid amount: '{amount}'")
    integer_part, _, fractional_part = text.partition(".")
    padded = fractional_part[:decimals].ljust(decimals, "0")
    return int((integer_part or "0") + padded)


def format_units(amount: int, decimals: int) -> str:
    """Format base units as a decimal string with trailing zeros trimmed."""
    if amount < 0:
        raise ValueError(f"Amount cannot be negative: {amount}")
    if decimals == 0:
        return str(amount)
    integer_part, fractional_part = divmod(amount, 10**decimals)
    if fractional_part == 0:
        return str(integer_part)
    fractional = str(fractional_part).rjust(decimals, "0").rstrip("0")
    return f"{integer_part}.{fractional}"


__all__ = ["parse_units", "format_units"]
