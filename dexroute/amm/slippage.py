"""Slippage bounds for exact-input and exact-output swaps."""

from __future__ import annotations

import structlog

from dexroute.constants import BPS_DENOMINATOR, HIGH_SLIPPAGE_BPS
from dexroute.safe_int import S

logger = structlog.get_logger()


def validate_slippage_bps(slippage_bps: int) -> int:
    """Check that slippage is within [0, 10000] basis points.

    Raises:
        ValueError: If slippage_bps is out of range
    """
    if not 0 <= slippage_bps <= BPS_DENOMINATOR:
        raise ValueError(f"Slippage must be between 0 and {BPS_DENOMINATOR} bps, got {slippage_bps}")
    if slippage_bps > HIGH_SLIPPAGE_BPS:
        logger.warning(
            "high_slippage_tolerance",
            slippage_bps=slippage_bps,
            message="High slippage increases risk of front-running",
        )
    return slippage_bps


def min_amount_out(quoted_amount_out: int, slippage_bps: int) -> int:
    """Minimum acceptable output: floor(quoted * (10000 - bps) / 10000).

    Rounds toward zero, so the guarantee is never stricter than requested.
    """
    validate_slippage_bps(slippage_bps)
    return (S(quoted_amount_out) * (BPS_DENOMINATOR - slippage_bps) // BPS_DENOMINATOR).value


def max_amount_in(quoted_amount_in: int, slippage_bps: int) -> int:
    """Maximum acceptable input: amount + floor(amount * bps / 10000)."""
    validate_slippage_bps(slippage_bps)
    return (S(quoted_amount_in) + S(quoted_amount_in) * slippage_bps // BPS_DENOMINATOR).value


__all__ = ["validate_slippage_bps", "min_amount_out", "max_amount_in"]
