"""Tests for the swap service wiring."""

import asyncio
import json

import pytest
from structlog.testing import capture_logs

from dexroute.errors import InsufficientLiquidity, SwapError
from dexroute.service import SwapService, create_service
from tests.helpers import ALICE, DAI, ONE_ETH, ONE_USDC, USDC, WETH, make_config, make_service


class TestQuoting:
    def test_request_quote_by_symbol(self, chain):
        service = make_service(chain)

        result = asyncio.run(service.request_quote("WETH", "USDC", ONE_ETH))

        assert result.best_route.addresses == (WETH, USDC)

    def test_configured_hop_limit(self, chain):
        service = make_service(chain, max_hops=1)

        assert not asyncio.run(service.request_quote("USDC", "DAI", ONE_USDC)).found
        assert asyncio.run(service.request_quote("USDC", "DAI", ONE_USDC, max_hops=2)).found

    def test_quote_route(self, chain):
        service = make_service(chain)

        route = asyncio.run(service.quote_route(["USDC", WETH, "dai"], 1_000 * ONE_USDC))

        assert route.addresses == (USDC, WETH, DAI)

    def test_pool_lookups_are_cached(self, chain):
        service = make_service(chain, pool_cache_ttl=60)

        asyncio.run(service.request_quote("WETH", "USDC", ONE_ETH))
        lookups = chain.read_calls["get_pool"]
        snapshots = chain.read_calls["get_reserves"]
        asyncio.run(service.request_quote("WETH", "USDC", ONE_ETH))

        assert chain.read_calls["get_pool"] == lookups
        # Reserves are always read fresh
        assert chain.read_calls["get_reserves"] == 2 * snapshots

    def test_hubs_follow_config_order(self, chain):
        service = make_service(chain, hub_symbols=("DAI", "WETH"))
        assert [hub.symbol for hub in service.hubs] == ["DAI", "WETH"]

    def test_unknown_hub_symbol_is_skipped(self, chain):
        with capture_logs() as logs:
            service = make_service(chain, hub_symbols=("WETH", "FOO"))

        assert [hub.symbol for hub in service.hubs] == ["WETH"]
        assert logs[0]["event"] == "unknown_hub_symbol"
        assert logs[0]["symbol"] == "FOO"

    def test_list_assets(self, chain):
        symbols = {asset.symbol for asset in make_service(chain).list_assets()}
        assert {"ETH", "WETH", "USDC", "TKA"} <= symbols


class TestSwapping:
    def test_confirm_swap_uses_defaults(self, funded_chain):
        service = make_service(funded_chain, default_slippage_bps=100, deadline_seconds=600)
        route = asyncio.run(service.request_quote("WETH", "USDC", ONE_ETH)).best_route

        handle = asyncio.run(service.confirm_swap(route, ONE_ETH, route.amount_out))

        assert handle.min_amount_out == route.amount_out * 9_900 // 10_000
        assert handle.deadline == 1_700_000_000 + 600
        assert funded_chain.swaps[0].recipient == ALICE

    def test_quote_and_swap(self, funded_chain):
        service = make_service(funded_chain)

        handle = asyncio.run(service.quote_and_swap("ETH", "DAI", ONE_ETH))

        assert handle.route.addresses == (WETH, DAI)
        assert funded_chain.swaps[0].value == ONE_ETH

    def test_quote_and_swap_without_route(self, funded_chain):
        service = make_service(funded_chain)
        with pytest.raises(InsufficientLiquidity):
            asyncio.run(service.quote_and_swap("WBTC", "DAI", 10**8))

    def test_quote_only_service(self, chain):
        service = make_service(chain, with_writer=False)
        route = asyncio.run(service.request_quote("WETH", "USDC", ONE_ETH)).best_route

        with pytest.raises(SwapError, match="No wallet connected"):
            asyncio.run(service.confirm_swap(route, ONE_ETH, route.amount_out))


class TestCreateService:
    def test_requires_rpc_url(self):
        with pytest.raises(ValueError, match="DEXROUTE_RPC_URL"):
            create_service(make_config())

    def test_read_only_without_wallet(self):
        service = create_service(make_config(rpc_url="http://localhost:8545"))

        assert isinstance(service, SwapService)
        assert service.executor is None

    def test_token_list_replaces_defaults(self, tmp_path):
        token_list = tmp_path / "tokens.json"
        token_list.write_text(
            json.dumps(
                {
                    "tokens": [
                        {"address": WETH, "symbol": "WETH", "decimals": 18},
                        {"address": USDC, "symbol": "USDC", "decimals": 6},
                    ]
                }
            )
        )

        service = create_service(
            make_config(rpc_url="http://localhost:8545", token_list_path=str(token_list))
        )

        assert [asset.symbol for asset in service.list_assets()] == ["WETH", "USDC"]
