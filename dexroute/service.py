"""Swap service: the entry point used by the API and CLI.

SwapService wires the normalizer, locator, reserve reader, router and
executor from one EngineConfig and a chain client. request_quote() and
confirm_swap() are the only operations the outer surfaces call.
"""

from __future__ import annotations

import time
from collections.abc import Callable

import structlog

from dexroute.chain.cache import TtlCache
from dexroute.chain.interfaces import ChainReader, ChainWriter
from dexroute.config import EngineConfig, load_config
from dexroute.errors import InsufficientLiquidity, SwapError
from dexroute.execution.executor import SwapExecutor, TxHandle
from dexroute.models.assets import Asset, AssetRegistry, default_assets
from dexroute.models.route import Route, RouteResult
from dexroute.routing.locator import PoolLocator
from dexroute.routing.normalizer import AssetNormalizer
from dexroute.routing.reserves import ReserveReader
from dexroute.routing.router import Router

logger = structlog.get_logger()


class SwapService:
    """Quotes and executes swaps against one chain."""

    def __init__(
        self,
        config: EngineConfig,
        chain: ChainReader,
        writer: ChainWriter | None = None,
        registry: AssetRegistry | None = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        """Initialize the service.

        Args:
            config: Engine configuration
            chain: Chain reader used for quoting and pre-flight checks
            writer: Transaction sender; None makes the service quote-only
            registry: Known assets (defaults to the built-in mainnet list)
            clock: Time source for the read caches
        """
        self.config = config
        self.chain = chain
        self.writer = writer
        self.registry = registry if registry is not None else AssetRegistry(default_assets())

        self.normalizer = AssetNormalizer(
            self.registry,
            wrapped_native=config.wrapped_native,
            chain=chain,
            decimals_cache=TtlCache(config.decimals_cache_ttl, clock=clock),
            retry=config.retry,
        )
        self.locator = PoolLocator(
            chain,
            self.normalizer,
            cache=TtlCache(config.pool_cache_ttl, clock=clock),
            retry=config.retry,
        )
        self.reader = ReserveReader(
            chain,
            cache=TtlCache(config.reserves_cache_ttl, clock=clock),
            retry=config.retry,
        )
        self.router = Router(
            self.normalizer,
            self.locator,
            self.reader,
            hubs=self._hub_assets(),
            max_concurrency=config.max_concurrent_reads,
        )
        self.executor = (
            SwapExecutor(
                chain,
                writer,
                self.router,
                router_address=config.router_address,
                retry=config.retry,
                preflight_quote=config.preflight_quote,
                infinite_approval=config.infinite_approval,
            )
            if writer is not None
            else None
        )

    def _hub_assets(self) -> list[Asset]:
        hubs: list[Asset] = []
        for symbol in self.config.hub_symbols:
            asset = self.registry.resolve(symbol)
            if asset is None:
                logger.warning("unknown_hub_symbol", symbol=symbol)
                continue
            hubs.append(asset)
        return hubs

    @property
    def hubs(self) -> tuple[Asset, ...]:
        return self.router.hubs

    def list_assets(self) -> list[Asset]:
        return list(self.registry)

    async def resolve(self, identifier: Asset | str) -> Asset:
        return await self.normalizer.resolve(identifier)

    async def request_quote(
        self,
        token_in: Asset | str,
        token_out: Asset | str,
        amount_in: int,
        max_hops: int | None = None,
    ) -> RouteResult:
        """Find the best route for selling amount_in of token_in.

        Tokens may be given as Assets, symbols or addresses. A result with
        no best route means no pool path had liquidity for this trade.
        """
        asset_in = await self.resolve(token_in)
        asset_out = await self.resolve(token_out)
        return await self.router.find_routes(
            asset_in,
            asset_out,
            amount_in,
            max_hops=self.config.max_hops if max_hops is None else max_hops,
        )

    async def quote_route(self, path: list[Asset | str], amount_in: int) -> Route:
        """Re-price an explicit path (symbols or addresses) with fresh reserves."""
        assets = [await self.resolve(identifier) for identifier in path]
        return await self.router.quote_path(assets, amount_in, force_refresh=True)

    async def confirm_swap(
        self,
        route: Route,
        amount_in: int,
        min_amount_out: int,
        slippage_bps: int | None = None,
        recipient: str | None = None,
        deadline_seconds: int | None = None,
    ) -> TxHandle:
        """Execute a previously quoted route from the connected account.

        Raises:
            SwapError: If no wallet is connected, or any classified execution failure
        """
        if self.executor is None or self.writer is None:
            raise SwapError("No wallet connected")
        return await self.executor.execute(
            route,
            amount_in,
            min_amount_out,
            recipient=recipient or self.writer.account,
            slippage_bps=self.config.default_slippage_bps if slippage_bps is None else slippage_bps,
            deadline_seconds=deadline_seconds or self.config.deadline_seconds,
        )

    async def quote_and_swap(
        self,
        token_in: Asset | str,
        token_out: Asset | str,
        amount_in: int,
        slippage_bps: int | None = None,
        recipient: str | None = None,
        max_hops: int | None = None,
    ) -> TxHandle:
        """Quote, then execute the best route with the quote as the expected output.

        Raises:
            InsufficientLiquidity: If no route could be priced
        """
        result = await self.request_quote(token_in, token_out, amount_in, max_hops=max_hops)
        if result.best_route is None:
            raise InsufficientLiquidity("No route with enough liquidity for this trade")
        return await self.confirm_swap(
            result.best_route,
            amount_in,
            result.best_route.amount_out,
            slippage_bps=slippage_bps,
            recipient=recipient,
        )


def create_service(config: EngineConfig) -> SwapService:
    """Build a service backed by the configured JSON-RPC endpoint.

    Raises:
        ValueError: If no RPC URL is configured
    """
    from dexroute.chain.web3_client import Web3ChainClient

    if not config.rpc_url:
        raise ValueError("DEXROUTE_RPC_URL is not set")

    registry = (
        AssetRegistry.from_file(config.token_list_path)
        if config.token_list_path
        else AssetRegistry(default_assets())
    )
    client = Web3ChainClient(
        config.rpc_url,
        factory_address=config.factory_address,
        account=config.account,
        private_key=config.private_key,
    )
    has_wallet = config.account is not None or config.private_key is not None
    logger.info(
        "service_created",
        rpc_url=config.rpc_url[:50] + "...",
        chain_id=config.chain_id,
        assets=len(registry),
        wallet=has_wallet,
    )
    return SwapService(config, client, writer=client if has_wallet else None, registry=registry)


_default_service: SwapService | None = None


def get_default_service() -> SwapService:
    """Process-wide service built from the environment on first use."""
    global _default_service
    if _default_service is None:
        _default_service = create_service(load_config())
    return _default_service


__all__ = ["SwapService", "create_service", "get_default_service"]
