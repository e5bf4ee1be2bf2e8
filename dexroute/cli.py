"""Command line entry point.

    dexroute quote WETH USDC 1.5 [--max-hops 2] [--simulate]
    dexroute serve

Amounts on the command line are human units and converted with the
input token's decimals. --simulate quotes against a small in-memory pool
set instead of a live RPC endpoint.
"""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys

import structlog

from dexroute.amm.units import format_units, parse_units
from dexroute.api.schemas import QuoteResponse
from dexroute.chain.memory import InMemoryChain
from dexroute.config import EngineConfig, load_config
from dexroute.constants import DAI, USDC, USDT, WBTC, WETH
from dexroute.errors import SwapError
from dexroute.models.route import RouteResult
from dexroute.service import SwapService, create_service

logger = structlog.get_logger()


def configure_logging(verbose: bool = False) -> None:
    """Console logging for interactive use; the library never calls this."""
    structlog.configure(
        processors=[
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.dev.ConsoleRenderer(),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(
            logging.DEBUG if verbose else logging.INFO
        ),
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
    )


def simulated_chain(config: EngineConfig | None = None) -> InMemoryChain:
    """Mainnet-like pools at round prices (1 WETH = 2000 USD, 1 WBTC = 30 WETH).

    Pair addresses derive from the configured factory and init code hash.
    """
    config = config or EngineConfig()
    chain = InMemoryChain(factory=config.factory_address, init_code_hash=config.init_code_hash)
    chain.add_pool(WETH, USDC, 10_000 * 10**18, 20_000_000 * 10**6)
    chain.add_pool(WETH, USDT, 8_000 * 10**18, 16_000_000 * 10**6)
    chain.add_pool(WETH, DAI, 5_000 * 10**18, 10_000_000 * 10**18)
    chain.add_pool(USDC, USDT, 5_000_000 * 10**6, 5_000_000 * 10**6)
    chain.add_pool(USDC, DAI, 4_000_000 * 10**6, 4_000_000 * 10**18)
    chain.add_pool(WBTC, WETH, 100 * 10**8, 3_000 * 10**18)
    return chain


def build_service(config: EngineConfig, simulate: bool) -> SwapService:
    if simulate:
        return SwapService(config, simulated_chain(config))
    return create_service(config)


def render_result(result: RouteResult, decimals_out: int) -> dict[str, object]:
    body = QuoteResponse.from_result(result).model_dump(by_alias=True, exclude_none=True)
    if result.best_route is not None:
        body["amountOutFormatted"] = format_units(result.best_route.amount_out, decimals_out)
    return body


async def _quote(args: argparse.Namespace) -> int:
    config = load_config()
    service = build_service(config, args.simulate)

    token_in = await service.resolve(args.token_in)
    token_out = await service.resolve(args.token_out)
    amount_in = parse_units(args.amount, token_in.decimals)

    result = await service.request_quote(token_in, token_out, amount_in, max_hops=args.max_hops)
    print(json.dumps(render_result(result, token_out.decimals), indent=2))
    return 0 if result.found else 1


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(prog="dexroute", description=__doc__.split("\n\n")[0])
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    subparsers = parser.add_subparsers(dest="command", required=True)

    quote = subparsers.add_parser("quote", help="Find the best route for a trade")
    quote.add_argument("token_in", help="Symbol or address of the asset sold")
    quote.add_argument("token_out", help="Symbol or address of the asset bought")
    quote.add_argument("amount", help="Amount sold, in human units (e.g. 1.5)")
    quote.add_argument("--max-hops", type=int, default=None, help="Hop bound (1-3)")
    quote.add_argument(
        "--simulate", action="store_true", help="Quote against built-in in-memory pools"
    )

    subparsers.add_parser("serve", help="Run the HTTP API")

    args = parser.parse_args(argv)
    configure_logging(args.verbose)

    if args.command == "serve":
        from dexroute.api.main import run

        run()
        return 0

    try:
        return asyncio.run(_quote(args))
    except SwapError as e:
        print(json.dumps(e.to_dict(), indent=2), file=sys.stderr)
        return 2
    except ValueError as e:
        print(f"error: {e}", file=sys.stderr)
        return 2


if __name__ == "__main__":
    sys.exit(main())
