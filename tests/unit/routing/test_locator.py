"""Tests for pool lookup."""

import asyncio

import pytest

from dexroute.chain.cache import TtlCache
from dexroute.chain.retry import RetryPolicy
from dexroute.errors import InvalidPath
from dexroute.routing.locator import PoolLocator
from dexroute.routing.normalizer import AssetNormalizer
from tests.helpers import DAI, USDC, WETH, WETH_USDC_PAIR, FakeClock


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def locator(registry, chain, clock):
    normalizer = AssetNormalizer(registry, wrapped_native=WETH, chain=chain)
    return PoolLocator(
        chain, normalizer, cache=TtlCache(60, clock=clock), retry=RetryPolicy.no_delay()
    )


class TestPoolLocator:
    def test_order_independent(self, locator):
        """locate(a, b) and locate(b, a) return the same pool."""
        assert asyncio.run(locator.locate(WETH, USDC)) == WETH_USDC_PAIR
        assert asyncio.run(locator.locate(USDC, WETH)) == WETH_USDC_PAIR

    def test_native_asset_uses_wrapped_pool(self, locator, eth):
        assert asyncio.run(locator.locate(eth, USDC)) == WETH_USDC_PAIR

    def test_missing_pool_is_none(self, locator):
        assert asyncio.run(locator.locate(USDC, DAI)) is None

    def test_identical_assets_rejected(self, locator, eth):
        with pytest.raises(InvalidPath):
            asyncio.run(locator.locate(eth, WETH))

    def test_results_are_cached(self, locator, chain):
        asyncio.run(locator.locate(WETH, USDC))
        asyncio.run(locator.locate(USDC, WETH))
        assert chain.read_calls["get_pool"] == 1

    def test_missing_pool_is_cached(self, locator, chain):
        """A "no pool" answer is reused until it expires."""
        asyncio.run(locator.locate(USDC, DAI))
        asyncio.run(locator.locate(USDC, DAI))
        assert chain.read_calls["get_pool"] == 1

    def test_cache_expires(self, locator, chain, clock):
        asyncio.run(locator.locate(USDC, DAI))
        chain.add_pool(USDC, DAI, 10**12, 10**24)
        clock.advance(61)

        assert asyncio.run(locator.locate(USDC, DAI)) is not None
        assert chain.read_calls["get_pool"] == 2

    def test_force_refresh_bypasses_cache(self, locator, chain):
        asyncio.run(locator.locate(WETH, USDC))
        asyncio.run(locator.locate(WETH, USDC, force_refresh=True))
        assert chain.read_calls["get_pool"] == 2

    def test_transient_errors_retried(self, locator, chain):
        chain.fail_reads(1)
        assert asyncio.run(locator.locate(WETH, USDC)) == WETH_USDC_PAIR
