"""Multi-hop route search.

The router enumerates hub paths, prices each one hop by hop against fresh
reserve snapshots and keeps the one with the largest output.

Candidates are evaluated concurrently but share no state: each carries
its own running amount and accumulated impact. A candidate that hits a
missing or empty pool is dropped; the search itself only fails on input
errors or when the chain stays unreachable after retries.
"""

from __future__ import annotations

import asyncio
from collections.abc import Sequence
from decimal import Decimal

import structlog

from dexroute.amm.uniswap_v2 import UniswapV2, uniswap_v2
from dexroute.constants import MAX_HOPS_CAP
from dexroute.errors import (
    InsufficientInputAmount,
    InvalidPath,
    NoLiquidity,
    NoPool,
)
from dexroute.models.assets import Asset
from dexroute.models.route import HopQuote, Route, RouteResult
from dexroute.models.types import short
from dexroute.routing.locator import PoolLocator
from dexroute.routing.normalizer import AssetNormalizer
from dexroute.routing.pathfinding import candidate_paths
from dexroute.routing.reserves import ReserveReader

logger = structlog.get_logger()

DEFAULT_MAX_CONCURRENCY = 8


class Router:
    """Finds the best constant-product route between two assets.

    Usage:
        router = Router(normalizer, locator, reader, hubs=[weth, usdc])
        result = await router.find_routes(usdc, dai, 1_000_000, max_hops=3)
    """

    def __init__(
        self,
        normalizer: AssetNormalizer,
        locator: PoolLocator,
        reader: ReserveReader,
        hubs: Sequence[Asset] = (),
        amm: UniswapV2 | None = None,
        max_concurrency: int = DEFAULT_MAX_CONCURRENCY,
    ) -> None:
        if max_concurrency < 1:
            raise ValueError(f"max_concurrency must be >= 1, got {max_concurrency}")
        self.normalizer = normalizer
        self.locator = locator
        self.reader = reader
        self.hubs = tuple(hubs)
        self.amm = amm if amm is not None else uniswap_v2
        self.max_concurrency = max_concurrency

    async def find_routes(
        self,
        token_in: Asset,
        token_out: Asset,
        amount_in: int,
        max_hops: int = MAX_HOPS_CAP,
    ) -> RouteResult:
        """Price every candidate path and select the best.

        Selection is by greatest final output, then fewer hops, then
        enumeration order (direct, 2-hop in hub order, 3-hop).

        Args:
            token_in: Asset being sold
            token_out: Asset being bought
            amount_in: Input amount in base units
            max_hops: Hop bound; values above 3 are clamped to 3

        Returns:
            RouteResult; best_route is None when no candidate could be priced

        Raises:
            InvalidPath: If max_hops < 1 or both assets normalize to the same token
            InsufficientInputAmount: If amount_in is not positive
            TransientNetworkError: If chain reads keep failing after retries
        """
        if max_hops < 1:
            raise InvalidPath(f"max_hops must be at least 1, got {max_hops}")
        if amount_in <= 0:
            raise InsufficientInputAmount(f"INSUFFICIENT_INPUT_AMOUNT: {amount_in}")

        address_in = self.normalizer.normalize(token_in)
        address_out = self.normalizer.normalize(token_out)
        if address_in == address_out:
            raise InvalidPath(f"Cannot route {token_in.symbol} to {token_out.symbol}: same token")

        hub_assets = {self.normalizer.normalize(hub): hub for hub in self.hubs}
        paths = candidate_paths(address_in, address_out, list(hub_assets), max_hops)

        semaphore = asyncio.Semaphore(self.max_concurrency)

        async def evaluate(addresses: tuple[str, ...]) -> Route | None:
            assets = (token_in, *(hub_assets[a] for a in addresses[1:-1]), token_out)
            async with semaphore:
                try:
                    return await self._evaluate(assets, addresses, amount_in)
                except (NoPool, NoLiquidity, InsufficientInputAmount) as e:
                    logger.debug(
                        "candidate_pruned",
                        path=[short(a) for a in addresses],
                        reason=e.code,
                    )
                    return None

        # A failing candidate cancels its siblings, so no reads outlive the search
        try:
            async with asyncio.TaskGroup() as group:
                tasks = [group.create_task(evaluate(path)) for path in paths]
        except ExceptionGroup as eg:
            raise eg.exceptions[0]
        results = [task.result() for task in tasks]
        routes = tuple(route for route in results if route is not None)

        best = select_best(routes)
        if best is None:
            logger.info(
                "no_route_found",
                token_in=token_in.symbol,
                token_out=token_out.symbol,
                amount_in=amount_in,
                candidates=len(paths),
            )
        else:
            logger.info(
                "route_selected",
                token_in=token_in.symbol,
                token_out=token_out.symbol,
                amount_in=amount_in,
                amount_out=best.amount_out,
                hops=best.hop_count,
                price_impact=str(best.price_impact),
                candidates=len(paths),
                priced=len(routes),
            )
        return RouteResult(best_route=best, all_routes=routes)

    async def quote_path(
        self, path: Sequence[Asset], amount_in: int, force_refresh: bool = False
    ) -> Route:
        """Price one explicit path.

        Raises:
            InvalidPath: If the path has fewer than two assets or repeats one
            NoPool: If a hop has no pool
            NoLiquidity: If a hop's pool has an empty reserve
        """
        if len(path) < 2:
            raise InvalidPath(f"Path needs at least two assets, got {len(path)}")
        if amount_in <= 0:
            raise InsufficientInputAmount(f"INSUFFICIENT_INPUT_AMOUNT: {amount_in}")
        addresses = self.normalizer.normalize_path(list(path))
        if len(set(addresses)) != len(addresses):
            raise InvalidPath("Path visits the same asset twice")
        return await self._evaluate(tuple(path), addresses, amount_in, force_refresh)

    async def _evaluate(
        self,
        assets: tuple[Asset, ...],
        addresses: tuple[str, ...],
        amount_in: int,
        force_refresh: bool = False,
    ) -> Route:
        amount = amount_in
        hops: list[HopQuote] = []

        for token_in, token_out in zip(addresses, addresses[1:]):
            pool = await self.locator.locate(token_in, token_out, force_refresh=force_refresh)
            if pool is None:
                raise NoPool(f"No pool for {short(token_in)}/{short(token_out)}")

            reserves = await self.reader.reserves(pool, force_refresh=force_refresh)
            if reserves is None:
                raise NoLiquidity(f"Pool {short(pool)} has no liquidity")

            hop = self.amm.simulate_hop(reserves, token_in, amount)
            hops.append(hop)
            amount = hop.amount_out

        # Hop impacts are summed, not compounded
        price_impact = sum((hop.price_impact for hop in hops), Decimal(0))

        return Route(
            path=assets,
            addresses=addresses,
            pairs=tuple(hop.pool for hop in hops),
            amounts=(amount_in, *(hop.amount_out for hop in hops)),
            price_impact=price_impact,
            hops=tuple(hops),
        )


def select_best(routes: Sequence[Route]) -> Route | None:
    """Greatest output wins; ties go to fewer hops, then to the earlier route."""
    best: Route | None = None
    for route in routes:
        if best is None or (route.amount_out, -route.hop_count) > (
            best.amount_out,
            -best.hop_count,
        ):
            best = route
    return best


__all__ = ["Router", "select_best", "DEFAULT_MAX_CONCURRENCY"]
