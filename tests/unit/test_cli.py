"""Tests for the command line entry point."""

import asyncio
import json

import pytest
import structlog

from dexroute.amm.uniswap_v2 import pair_for
from dexroute.cli import main, simulated_chain
from dexroute.config import EngineConfig
from dexroute.constants import UNISWAP_V2_FACTORY
from tests.helpers import USDC, WETH


@pytest.fixture(autouse=True)
def reset_logging(monkeypatch):
    """main() configures console logging; undo it for the other tests."""
    for name in (
        "DEXROUTE_RPC_URL",
        "DEXROUTE_MAX_HOPS",
        "DEXROUTE_HUBS",
        "DEXROUTE_FACTORY",
        "DEXROUTE_INIT_CODE_HASH",
    ):
        monkeypatch.delenv(name, raising=False)
    yield
    structlog.reset_defaults()


class TestQuoteCommand:
    def test_simulated_quote(self, capsys):
        assert main(["quote", "WETH", "USDC", "1.5", "--simulate"]) == 0

        body = json.loads(capsys.readouterr().out)
        assert body["found"] is True
        assert body["bestRoute"]["amountIn"] == str(15 * 10**17)
        assert float(body["amountOutFormatted"]) > 2_900

    def test_simulated_multihop(self, capsys):
        assert main(["quote", "WBTC", "DAI", "1", "--simulate"]) == 0

        body = json.loads(capsys.readouterr().out)
        assert [token["symbol"] for token in body["bestRoute"]["path"]] == ["WBTC", "WETH", "DAI"]

    def test_no_route_exit_code(self, capsys):
        unlisted = "0x4444444444444444444444444444444444444444"
        assert main(["quote", "WETH", unlisted, "1", "--simulate"]) == 1
        assert json.loads(capsys.readouterr().out)["found"] is False

    def test_unknown_token(self, capsys):
        assert main(["quote", "WETH", "NOPE", "1", "--simulate"]) == 2
        assert '"UNKNOWN_ASSET"' in capsys.readouterr().err

    def test_missing_rpc_url(self, capsys):
        assert main(["quote", "WETH", "USDC", "1"]) == 2
        assert "DEXROUTE_RPC_URL" in capsys.readouterr().err


def test_simulated_chain_pools():
    chain = simulated_chain()
    assert chain.reserves_of(WETH, USDC) == (10_000 * 10**18, 20_000_000 * 10**6)


def test_simulated_chain_uses_configured_pair_hash():
    init_code_hash = "0x" + "ab" * 32
    chain = simulated_chain(EngineConfig(init_code_hash=init_code_hash))

    pool = asyncio.run(chain.get_pool(WETH, USDC))
    assert pool == pair_for(chain.factory, WETH, USDC, init_code_hash)


def test_quote_reports_pairs_for_configured_hash(monkeypatch, capsys):
    init_code_hash = "0x" + "cd" * 32
    monkeypatch.setenv("DEXROUTE_INIT_CODE_HASH", init_code_hash)

    assert main(["quote", "WETH", "USDC", "1", "--simulate"]) == 0

    body = json.loads(capsys.readouterr().out)
    assert body["bestRoute"]["pairs"] == [pair_for(UNISWAP_V2_FACTORY, WETH, USDC, init_code_hash)]
