"""Reserve snapshots for quoting."""

from __future__ import annotations

import structlog

from dexroute.amm.uniswap_v2 import PoolReserves
from dexroute.chain.cache import MISSING, TtlCache
from dexroute.chain.interfaces import ChainReader
from dexroute.chain.retry import RetryPolicy, call_with_retry
from dexroute.models.types import normalize_address, short

logger = structlog.get_logger()


class ReserveReader:
    """Fetches a pool's reserves together with its token ordering.

    The returned PoolReserves keeps the pair's storage order (token0,
    token1); callers orient it with PoolReserves.oriented() by token
    identity. Each call is an independent snapshot unless a cache with a
    positive TTL is supplied.
    """

    def __init__(
        self,
        chain: ChainReader,
        cache: TtlCache | None = None,
        retry: RetryPolicy | None = None,
    ) -> None:
        self._chain = chain
        self._cache = cache if cache is not None else TtlCache(0)
        self._retry = retry or RetryPolicy()

    async def reserves(self, pool: str, force_refresh: bool = False) -> PoolReserves | None:
        """Current reserves, or None if the pool is unknown or either side is empty.

        Raises:
            TransientNetworkError: If the read keeps failing after retries
        """
        pool = normalize_address(pool)

        snapshot = MISSING if force_refresh else self._cache.get(pool)
        if snapshot is MISSING:
            snapshot = await call_with_retry(
                self._retry, lambda: self._chain.get_reserves(pool), operation="get_reserves"
            )
            self._cache.set(pool, snapshot)

        if snapshot is None:
            return None
        if not snapshot.has_liquidity:
            logger.debug(
                "pool_without_liquidity",
                pool=short(pool),
                reserve0=snapshot.reserve0,
                reserve1=snapshot.reserve1,
            )
            return None
        return snapshot


__all__ = ["ReserveReader"]
