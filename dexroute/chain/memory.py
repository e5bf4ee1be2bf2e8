"""In-memory chain for simulation and tests.

InMemoryChain implements both ChainReader and ChainWriter and replays the
router's on-chain behaviour against local state: pair addresses come from
CREATE2, swaps revert with the router's own reason strings, and executed
swaps move the reserves. Failures can be injected to exercise retries.
"""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass

import structlog
from eth_utils import keccak

from dexroute.amm.encoding import SwapCall, SwapMethod
from dexroute.amm.uniswap_v2 import PoolReserves, pair_for, sort_tokens, uniswap_v2
from dexroute.chain.interfaces import TxReceipt
from dexroute.constants import (
    UINT256_MAX,
    UNISWAP_V2_FACTORY,
    UNISWAP_V2_INIT_CODE_HASH,
    WETH,
)
from dexroute.errors import SwapError, TransientNetworkError
from dexroute.models.types import normalize_address, short

logger = structlog.get_logger()

DEFAULT_ACCOUNT = "0x00000000000000000000000000000000000a11ce"
GENESIS_TIMESTAMP = 1_700_000_000


class ExecutionReverted(Exception):
    """Raised the way a node reports a reverted call."""

    def __init__(self, reason: str) -> None:
        super().__init__(f"execution reverted: {reason}")
        self.reason = reason


@dataclass
class _Pair:
    address: str
    token0: str
    token1: str
    reserve0: int
    reserve1: int


class InMemoryChain:
    """Deterministic local chain holding pairs, balances and allowances."""

    def __init__(
        self,
        factory: str = UNISWAP_V2_FACTORY,
        init_code_hash: str = UNISWAP_V2_INIT_CODE_HASH,
        wrapped_native: str = WETH,
        account: str = DEFAULT_ACCOUNT,
        block_timestamp: int = GENESIS_TIMESTAMP,
    ) -> None:
        self.factory = normalize_address(factory)
        self.init_code_hash = init_code_hash
        self.wrapped_native = normalize_address(wrapped_native)
        self._account = normalize_address(account)
        self.block_timestamp = block_timestamp
        self.block_number = 1
        # Seconds the clock advances between submission and inclusion
        self.inclusion_delay = 12
        self.reject_signing = False

        self._pairs: dict[str, _Pair] = {}
        self._decimals: dict[str, int] = {}
        self._token_balances: dict[tuple[str, str], int] = {}
        self._native_balances: dict[str, int] = {}
        self._allowances: dict[tuple[str, str, str], int] = {}
        self._read_failures: list[Exception] = []
        self._tx_counter = 0

        self.read_calls: Counter[str] = Counter()
        self.approvals: list[tuple[str, str, int]] = []
        self.swaps: list[SwapCall] = []

    # --- State setup ---

    def add_pool(self, token_a: str, token_b: str, reserve_a: int, reserve_b: int) -> str:
        """Create (or overwrite) the pair for two tokens and return its address."""
        token0, token1 = sort_tokens(token_a, token_b)
        address = pair_for(self.factory, token0, token1, self.init_code_hash)
        if token0 == normalize_address(token_a):
            reserve0, reserve1 = reserve_a, reserve_b
        else:
            reserve0, reserve1 = reserve_b, reserve_a
        self._pairs[address] = _Pair(address, token0, token1, reserve0, reserve1)
        return address

    def set_reserves(self, token_a: str, token_b: str, reserve_a: int, reserve_b: int) -> None:
        address = pair_for(self.factory, token_a, token_b, self.init_code_hash)
        if address not in self._pairs:
            raise KeyError(f"No pair for {token_a}/{token_b}")
        self.add_pool(token_a, token_b, reserve_a, reserve_b)

    def reserves_of(self, token_a: str, token_b: str) -> tuple[int, int]:
        """Current reserves ordered as (reserve_a, reserve_b)."""
        pair = self._pairs[pair_for(self.factory, token_a, token_b, self.init_code_hash)]
        if pair.token0 == normalize_address(token_a):
            return pair.reserve0, pair.reserve1
        return pair.reserve1, pair.reserve0

    def set_decimals(self, token: str, decimals: int) -> None:
        self._decimals[normalize_address(token)] = decimals

    def set_token_balance(self, token: str, owner: str, amount: int) -> None:
        self._token_balances[(normalize_address(token), normalize_address(owner))] = amount

    def set_native_balance(self, owner: str, amount: int) -> None:
        self._native_balances[normalize_address(owner)] = amount

    def set_allowance(self, token: str, owner: str, spender: str, amount: int) -> None:
        key = (normalize_address(token), normalize_address(owner), normalize_address(spender))
        self._allowances[key] = amount

    def fail_reads(self, count: int, error: Exception | None = None) -> None:
        """Make the next `count` reads raise (TransientNetworkError by default)."""
        for _ in range(count):
            self._read_failures.append(error or TransientNetworkError("429 Too Many Requests"))

    def _read(self, operation: str) -> None:
        self.read_calls[operation] += 1
        if self._read_failures:
            raise self._read_failures.pop(0)

    # --- ChainReader ---

    async def get_pool(self, token_a: str, token_b: str) -> str | None:
        self._read("get_pool")
        address = pair_for(self.factory, token_a, token_b, self.init_code_hash)
        return address if address in self._pairs else None

    async def get_reserves(self, pool: str) -> PoolReserves | None:
        self._read("get_reserves")
        pair = self._pairs.get(normalize_address(pool))
        if pair is None:
            return None
        return PoolReserves(
            pool=pair.address,
            token0=pair.token0,
            token1=pair.token1,
            reserve0=pair.reserve0,
            reserve1=pair.reserve1,
        )

    async def get_decimals(self, token: str) -> int:
        self._read("get_decimals")
        return self._decimals.get(normalize_address(token), 18)

    async def get_token_balance(self, token: str, owner: str) -> int:
        self._read("get_token_balance")
        return self._token_balances.get((normalize_address(token), normalize_address(owner)), 0)

    async def get_native_balance(self, owner: str) -> int:
        self._read("get_native_balance")
        return self._native_balances.get(normalize_address(owner), 0)

    async def get_allowance(self, token: str, owner: str, spender: str) -> int:
        self._read("get_allowance")
        key = (normalize_address(token), normalize_address(owner), normalize_address(spender))
        return self._allowances.get(key, 0)

    async def get_block_timestamp(self) -> int:
        self._read("get_block_timestamp")
        return self.block_timestamp

    # --- ChainWriter ---

    @property
    def account(self) -> str:
        return self._account

    async def approve(self, token: str, spender: str, amount: int) -> TxReceipt:
        self._sign()
        self.set_allowance(token, self._account, spender, amount)
        self.approvals.append((normalize_address(token), normalize_address(spender), amount))
        return self._mine()

    async def swap(self, router: str, call: SwapCall) -> TxReceipt:
        self._sign()
        self.block_timestamp += self.inclusion_delay
        if self.block_timestamp > call.deadline:
            raise ExecutionReverted("UniswapV2Router: EXPIRED")

        path = [normalize_address(p) for p in call.path]
        if call.method is SwapMethod.ETH_FOR_TOKENS and path[0] != self.wrapped_native:
            raise ExecutionReverted("UniswapV2Router: INVALID_PATH")
        if call.method is SwapMethod.TOKENS_FOR_ETH and path[-1] != self.wrapped_native:
            raise ExecutionReverted("UniswapV2Router: INVALID_PATH")

        pairs: list[_Pair] = []
        for token_in, token_out in zip(path, path[1:]):
            pair = self._pairs.get(pair_for(self.factory, token_in, token_out, self.init_code_hash))
            if pair is None:
                raise ExecutionReverted("UniswapV2Library: pair does not exist")
            pairs.append(pair)

        hop_reserves = [
            (pair.reserve0, pair.reserve1) if pair.token0 == token_in else (pair.reserve1, pair.reserve0)
            for pair, token_in in zip(pairs, path)
        ]
        try:
            amounts = uniswap_v2.get_amounts_out(call.amount_in, hop_reserves)
        except SwapError as e:
            raise ExecutionReverted(f"UniswapV2Library: {e}") from e
        if amounts[-1] < call.amount_out_min:
            raise ExecutionReverted("UniswapV2Router: INSUFFICIENT_OUTPUT_AMOUNT")

        self._debit_input(router, call, path[0])

        for pair, token_in, amount_in, amount_out in zip(pairs, path, amounts, amounts[1:]):
            if pair.token0 == token_in:
                pair.reserve0 += amount_in
                pair.reserve1 -= amount_out
            else:
                pair.reserve1 += amount_in
                pair.reserve0 -= amount_out

        recipient = normalize_address(call.recipient)
        if call.method is SwapMethod.TOKENS_FOR_ETH:
            self._native_balances[recipient] = self._native_balances.get(recipient, 0) + amounts[-1]
        else:
            key = (path[-1], recipient)
            self._token_balances[key] = self._token_balances.get(key, 0) + amounts[-1]

        self.swaps.append(call)
        logger.debug(
            "simulated_swap",
            method=call.method.value,
            path=[short(p) for p in path],
            amount_in=call.amount_in,
            amount_out=amounts[-1],
        )
        return self._mine()

    def _debit_input(self, router: str, call: SwapCall, token_in: str) -> None:
        if call.method.pays_value:
            balance = self._native_balances.get(self._account, 0)
            if balance < call.value:
                raise ExecutionReverted("insufficient funds for gas * price + value")
            self._native_balances[self._account] = balance - call.value
            return

        balance_key = (token_in, self._account)
        balance = self._token_balances.get(balance_key, 0)
        allowance_key = (token_in, self._account, normalize_address(router))
        allowance = self._allowances.get(allowance_key, 0)
        if allowance < call.amount_in:
            raise ExecutionReverted("TransferHelper: TRANSFER_FROM_FAILED (allowance)")
        if balance < call.amount_in:
            raise ExecutionReverted("ERC20: transfer amount exceeds balance")
        self._token_balances[balance_key] = balance - call.amount_in
        if allowance != UINT256_MAX:
            self._allowances[allowance_key] = allowance - call.amount_in

    def _sign(self) -> None:
        if self.reject_signing:
            raise PermissionError("MetaMask Tx Signature: User denied transaction signature.")

    def _mine(self) -> TxReceipt:
        self._tx_counter += 1
        self.block_number += 1
        tx_hash = "0x" + keccak(f"dexroute-sim-{self._tx_counter}".encode()).hex()
        return TxReceipt(tx_hash=tx_hash, status=1, block_number=self.block_number)


__all__ = ["InMemoryChain", "ExecutionReverted", "DEFAULT_ACCOUNT"]
