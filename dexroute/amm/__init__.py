"""Constant-product AMM math, slippage bounds and call encoding."""

from dexroute.amm.encoding import SwapCall, SwapMethod, encode_approve, encode_swap_call
from dexroute.amm.slippage import max_amount_in, min_amount_out, validate_slippage_bps
from dexroute.amm.units import format_units, parse_units
from dexroute.amm.uniswap_v2 import PoolReserves, UniswapV2, pair_for, sort_tokens, uniswap_v2

__all__ = [
    "PoolReserves",
    "UniswapV2",
    "uniswap_v2",
    "pair_for",
    "sort_tokens",
    "SwapCall",
    "SwapMethod",
    "encode_swap_call",
    "encode_approve",
    "min_amount_out",
    "max_amount_in",
    "validate_slippage_bps",
    "parse_units",
    "format_units",
]
