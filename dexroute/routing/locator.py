"""Pool lookup for an asset pair."""

from __future__ import annotations

from dexroute.amm.uniswap_v2 import sort_tokens
from dexroute.chain.cache import MISSING, TtlCache
from dexroute.chain.interfaces import ChainReader
from dexroute.chain.retry import RetryPolicy, call_with_retry
from dexroute.models.assets import Asset
from dexroute.routing.normalizer import AssetNormalizer


class PoolLocator:
    """Resolves the pool holding two assets' joint reserves.

    Lookups are keyed by the sorted pair of normalized addresses, so the
    call order of the two assets never matters. "No pool" is a normal
    answer (None) and is cached like any other.
    """

    def __init__(
        self,
        chain: ChainReader,
        normalizer: AssetNormalizer,
        cache: TtlCache | None = None,
        retry: RetryPolicy | None = None,
    ) -> None:
        self._chain = chain
        self._normalizer = normalizer
        self._cache = cache if cache is not None else TtlCache(0)
        self._retry = retry or RetryPolicy()

    async def locate(
        self, asset_a: Asset | str, asset_b: Asset | str, force_refresh: bool = False
    ) -> str | None:
        """Pool address for the pair, or None if none was ever created.

        Raises:
            InvalidPath: If both assets normalize to the same address
            TransientNetworkError: If the lookup keeps failing after retries
        """
        token0, token1 = sort_tokens(
            self._normalizer.normalize(asset_a), self._normalizer.normalize(asset_b)
        )
        key = (token0, token1)

        if not force_refresh:
            cached = self._cache.get(key)
            if cached is not MISSING:
                return cached

        pool = await call_with_retry(
            self._retry, lambda: self._chain.get_pool(token0, token1), operation="get_pool"
        )
        self._cache.set(key, pool)
        return pool


__all__ = ["PoolLocator"]
