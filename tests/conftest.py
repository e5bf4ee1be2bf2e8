"""Pytest configuration and fixtures."""

import pytest

from dexroute.chain.memory import InMemoryChain
from dexroute.models.assets import AssetRegistry, NativeAsset
from tests.helpers import (
    ALICE,
    DAI,
    ONE_ETH,
    ONE_USDC,
    USDC,
    USDT,
    WETH,
    make_chain,
    make_registry,
)


@pytest.fixture
def registry() -> AssetRegistry:
    """Default assets plus unlisted test tokens."""
    return make_registry()


@pytest.fixture
def eth() -> NativeAsset:
    return NativeAsset()


@pytest.fixture
def chain() -> InMemoryChain:
    """Chain with deep WETH pools and a stablecoin pool."""
    return make_chain(
        [
            (WETH, USDC, 1_000 * ONE_ETH, 2_000_000 * ONE_USDC),
            (WETH, DAI, 1_000 * ONE_ETH, 2_000_000 * ONE_ETH),
            (USDC, USDT, 1_000_000 * ONE_USDC, 1_000_000 * ONE_USDC),
        ]
    )


@pytest.fixture
def funded_chain(chain: InMemoryChain) -> InMemoryChain:
    """The default chain with ALICE holding ETH and every pool token."""
    chain.set_native_balance(ALICE, 100 * ONE_ETH)
    chain.set_token_balance(WETH, ALICE, 100 * ONE_ETH)
    chain.set_token_balance(USDC, ALICE, 100_000 * ONE_USDC)
    chain.set_token_balance(DAI, ALICE, 100_000 * ONE_ETH)
    chain.set_token_balance(USDT, ALICE, 100_000 * ONE_USDC)
    return chain
