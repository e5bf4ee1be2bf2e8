"""Tests for the in-memory chain used by simulation and tests."""

import asyncio

import pytest

from dexroute.amm.encoding import SwapCall, SwapMethod
from dexroute.amm.uniswap_v2 import pair_for
from dexroute.chain.interfaces import ChainReader, ChainWriter
from dexroute.chain.memory import ExecutionReverted, InMemoryChain
from dexroute.constants import (
    UINT256_MAX,
    UNISWAP_V2_FACTORY,
    UNISWAP_V2_INIT_CODE_HASH,
    UNISWAP_V2_ROUTER,
)
from dexroute.errors import TransientNetworkError
from tests.helpers import ALICE, BOB, DAI, ONE_ETH, ONE_USDC, USDC, WETH, WETH_USDC_PAIR


def _call(method=SwapMethod.TOKENS_FOR_TOKENS, path=(WETH, USDC), amount_in=ONE_ETH, **kwargs):
    params = {
        "method": method,
        "amount_in": amount_in,
        "amount_out_min": 0,
        "path": path,
        "recipient": ALICE,
        "deadline": 2_000_000_000,
    }
    params.update(kwargs)
    return SwapCall(**params)


class TestReads:
    def test_implements_chain_protocols(self, chain):
        assert isinstance(chain, ChainReader)
        assert isinstance(chain, ChainWriter)

    def test_pool_address_is_create2(self, chain):
        """Pairs live at the factory's deterministic address, in either token order."""
        assert asyncio.run(chain.get_pool(WETH, USDC)) == WETH_USDC_PAIR
        assert asyncio.run(chain.get_pool(USDC, WETH)) == WETH_USDC_PAIR
        assert WETH_USDC_PAIR == pair_for(UNISWAP_V2_FACTORY, WETH, USDC, UNISWAP_V2_INIT_CODE_HASH)

    def test_missing_pool(self, chain):
        assert asyncio.run(chain.get_pool(USDC, DAI)) is None
        assert asyncio.run(chain.get_reserves(BOB)) is None

    def test_reserves_are_sorted(self, chain):
        snapshot = asyncio.run(chain.get_reserves(WETH_USDC_PAIR))

        # USDC sorts before WETH
        assert snapshot.token0 == USDC
        assert snapshot.reserve0 == 2_000_000 * ONE_USDC
        assert snapshot.reserve1 == 1_000 * ONE_ETH

    def test_read_failures_are_injected_in_order(self, chain):
        chain.fail_reads(1)

        with pytest.raises(TransientNetworkError):
            asyncio.run(chain.get_pool(WETH, USDC))
        assert asyncio.run(chain.get_pool(WETH, USDC)) == WETH_USDC_PAIR
        assert chain.read_calls["get_pool"] == 2

    def test_decimals_default_to_18(self, chain):
        chain.set_decimals(USDC, 6)
        assert asyncio.run(chain.get_decimals(USDC)) == 6
        assert asyncio.run(chain.get_decimals(DAI)) == 18

    def test_set_reserves_requires_existing_pair(self, chain):
        with pytest.raises(KeyError):
            chain.set_reserves(USDC, DAI, 1, 1)


class TestSwap:
    def test_swap_moves_reserves_and_balances(self, funded_chain):
        receipt = asyncio.run(funded_chain.approve(WETH, UNISWAP_V2_ROUTER, ONE_ETH))
        assert receipt.succeeded

        asyncio.run(funded_chain.swap(UNISWAP_V2_ROUTER, _call()))

        reserve_weth, reserve_usdc = funded_chain.reserves_of(WETH, USDC)
        assert reserve_weth == 1_001 * ONE_ETH
        received = 2_000_000 * ONE_USDC - reserve_usdc
        assert received > 0
        assert asyncio.run(funded_chain.get_token_balance(USDC, ALICE)) == 100_000 * ONE_USDC + received
        assert asyncio.run(funded_chain.get_token_balance(WETH, ALICE)) == 99 * ONE_ETH
        assert asyncio.run(funded_chain.get_allowance(WETH, ALICE, UNISWAP_V2_ROUTER)) == 0

    def test_infinite_allowance_is_not_spent(self, funded_chain):
        funded_chain.set_allowance(WETH, ALICE, UNISWAP_V2_ROUTER, UINT256_MAX)
        asyncio.run(funded_chain.swap(UNISWAP_V2_ROUTER, _call()))
        assert asyncio.run(funded_chain.get_allowance(WETH, ALICE, UNISWAP_V2_ROUTER)) == UINT256_MAX

    def test_missing_allowance_reverts(self, funded_chain):
        with pytest.raises(ExecutionReverted, match="TRANSFER_FROM_FAILED"):
            asyncio.run(funded_chain.swap(UNISWAP_V2_ROUTER, _call()))

    def test_minimum_output_enforced(self, funded_chain):
        funded_chain.set_allowance(WETH, ALICE, UNISWAP_V2_ROUTER, UINT256_MAX)
        call = _call(amount_out_min=10_000 * ONE_USDC)

        with pytest.raises(ExecutionReverted, match="INSUFFICIENT_OUTPUT_AMOUNT"):
            asyncio.run(funded_chain.swap(UNISWAP_V2_ROUTER, call))
        assert funded_chain.swaps == []

    def test_expired_deadline(self, funded_chain):
        call = _call(deadline=funded_chain.block_timestamp + 5)

        with pytest.raises(ExecutionReverted, match="EXPIRED"):
            asyncio.run(funded_chain.swap(UNISWAP_V2_ROUTER, call))

    def test_eth_input_pays_value(self, funded_chain):
        call = _call(method=SwapMethod.ETH_FOR_TOKENS)
        asyncio.run(funded_chain.swap(UNISWAP_V2_ROUTER, call))
        assert asyncio.run(funded_chain.get_native_balance(ALICE)) == 99 * ONE_ETH

    def test_eth_output_credits_native_balance(self, funded_chain):
        funded_chain.set_allowance(USDC, ALICE, UNISWAP_V2_ROUTER, UINT256_MAX)
        call = _call(method=SwapMethod.TOKENS_FOR_ETH, path=(USDC, WETH), amount_in=2_000 * ONE_USDC)

        asyncio.run(funded_chain.swap(UNISWAP_V2_ROUTER, call))
        assert asyncio.run(funded_chain.get_native_balance(ALICE)) > 100 * ONE_ETH

    def test_eth_path_must_use_wrapped_native(self, funded_chain):
        call = _call(method=SwapMethod.ETH_FOR_TOKENS, path=(USDC, WETH))
        with pytest.raises(ExecutionReverted, match="INVALID_PATH"):
            asyncio.run(funded_chain.swap(UNISWAP_V2_ROUTER, call))

    def test_unknown_pair_reverts(self, funded_chain):
        call = _call(path=(USDC, DAI))
        with pytest.raises(ExecutionReverted, match="pair does not exist"):
            asyncio.run(funded_chain.swap(UNISWAP_V2_ROUTER, call))

    def test_rejected_signature(self, funded_chain):
        funded_chain.reject_signing = True
        with pytest.raises(PermissionError, match="User denied"):
            asyncio.run(funded_chain.approve(WETH, UNISWAP_V2_ROUTER, ONE_ETH))

    def test_receipts_are_unique(self):
        chain = InMemoryChain()
        first = asyncio.run(chain.approve(WETH, UNISWAP_V2_ROUTER, 1))
        second = asyncio.run(chain.approve(WETH, UNISWAP_V2_ROUTER, 1))

        assert first.tx_hash != second.tx_hash
        assert second.block_number == first.block_number + 1
