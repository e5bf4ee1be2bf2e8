"""Test helpers module for shared test utilities.

This module consolidates common test utilities to reduce duplication:
- constants: Token addresses, accounts and common amounts
- factories: Chain, router and service factory functions
"""

from tests.helpers.constants import (
    ALICE,
    BOB,
    DAI,
    ONE_ETH,
    ONE_USDC,
    TKA,
    TKB,
    TKC,
    TOKEN_DECIMALS,
    USDC,
    USDT,
    WBTC,
    WETH,
    WETH_USDC_PAIR,
)
from tests.helpers.factories import (
    FakeClock,
    make_chain,
    make_config,
    make_registry,
    make_router,
    make_service,
)

__all__ = [
    # Constants
    "WETH",
    "USDC",
    "DAI",
    "USDT",
    "WBTC",
    "WETH_USDC_PAIR",
    "TKA",
    "TKB",
    "TKC",
    "TOKEN_DECIMALS",
    "ALICE",
    "BOB",
    "ONE_ETH",
    "ONE_USDC",
    # Factories
    "FakeClock",
    "make_chain",
    "make_config",
    "make_registry",
    "make_router",
    "make_service",
]
