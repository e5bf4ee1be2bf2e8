"""JSON-RPC adapter for ChainReader and ChainWriter.

Web3ChainClient makes eth_call requests against the factory, pair and
ERC-20 contracts and submits router transactions from the configured
account. Every raw web3 exception is classified at this boundary, so the
core only ever sees the SwapError hierarchy.
"""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable
from typing import Any, TypeVar

import structlog
from eth_account import Account
from web3 import AsyncWeb3
from web3.exceptions import TimeExhausted
from web3.middleware import SignAndSendRawMiddlewareBuilder

from dexroute.amm.encoding import SwapCall, encode_approve, encode_swap_call
from dexroute.amm.uniswap_v2 import PoolReserves
from dexroute.chain.interfaces import TxReceipt
from dexroute.constants import DEFAULT_GAS_LIMITS, GAS_BUFFER_PERCENT, ZERO_ADDRESS
from dexroute.errors import (
    DeadlineExpired,
    SwapError,
    TransientNetworkError,
    classify_error,
)
from dexroute.models.types import normalize_address, short

logger = structlog.get_logger()

T = TypeVar("T")

FACTORY_ABI = [
    {
        "name": "getPair",
        "type": "function",
        "stateMutability": "view",
        "inputs": [
            {"name": "tokenA", "type": "address"},
            {"name": "tokenB", "type": "address"},
        ],
        "outputs": [{"name": "pair", "type": "address"}],
    },
]

PAIR_ABI = [
    {
        "name": "getReserves",
        "type": "function",
        "stateMutability": "view",
        "inputs": [],
        "outputs": [
            {"name": "reserve0", "type": "uint112"},
            {"name": "reserve1", "type": "uint112"},
            {"name": "blockTimestampLast", "type": "uint32"},
        ],
    },
    {
        "name": "token0",
        "type": "function",
        "stateMutability": "view",
        "inputs": [],
        "outputs": [{"name": "", "type": "address"}],
    },
    {
        "name": "token1",
        "type": "function",
        "stateMutability": "view",
        "inputs": [],
        "outputs": [{"name": "", "type": "address"}],
    },
]

ERC20_ABI = [
    {
        "name": "decimals",
        "type": "function",
        "stateMutability": "view",
        "inputs": [],
        "outputs": [{"name": "", "type": "uint8"}],
    },
    {
        "name": "balanceOf",
        "type": "function",
        "stateMutability": "view",
        "inputs": [{"name": "owner", "type": "address"}],
        "outputs": [{"name": "", "type": "uint256"}],
    },
    {
        "name": "allowance",
        "type": "function",
        "stateMutability": "view",
        "inputs": [
            {"name": "owner", "type": "address"},
            {"name": "spender", "type": "address"},
        ],
        "outputs": [{"name": "", "type": "uint256"}],
    },
]


class Web3ChainClient:
    """ChainReader/ChainWriter backed by an HTTP JSON-RPC endpoint.

    With a private key, transactions are signed locally and sent raw.
    With only an account address, the node is expected to hold the key.
    Without either, the client is read-only and writes raise.
    """

    def __init__(
        self,
        rpc_url: str,
        factory_address: str,
        account: str | None = None,
        private_key: str | None = None,
        receipt_timeout: float = 180.0,
    ):
        """Initialize the client.

        Args:
            rpc_url: HTTP RPC URL (e.g., "https://eth.llamarpc.com")
            factory_address: UniswapV2-compatible factory contract
            account: Sender address for a node-managed account
            private_key: Hex private key for local signing (overrides account)
            receipt_timeout: Seconds to wait for a transaction receipt
        """
        self.w3 = AsyncWeb3(AsyncWeb3.AsyncHTTPProvider(rpc_url))
        self.factory = self.w3.eth.contract(
            address=AsyncWeb3.to_checksum_address(factory_address),
            abi=FACTORY_ABI,
        )
        self.receipt_timeout = receipt_timeout

        self._account: str | None = None
        if private_key:
            signer = Account.from_key(private_key)
            self.w3.middleware_onion.inject(SignAndSendRawMiddlewareBuilder.build(signer), layer=0)
            self._account = normalize_address(signer.address)
        elif account:
            self._account = normalize_address(account, validate=True)

    async def _call(self, operation: str, fn: Callable[[], Awaitable[T]]) -> T:
        try:
            return await fn()
        except SwapError:
            raise
        except Exception as e:
            error = classify_error(e)
            logger.debug("rpc_call_failed", operation=operation, error=str(e), code=error.code)
            raise error from e

    @staticmethod
    def _checksum(address: str) -> Any:
        return AsyncWeb3.to_checksum_address(address)

    # --- ChainReader ---

    async def get_pool(self, token_a: str, token_b: str) -> str | None:
        pair = await self._call(
            "get_pool",
            lambda: self.factory.functions.getPair(
                self._checksum(token_a), self._checksum(token_b)
            ).call(),
        )
        pair = normalize_address(pair)
        return None if pair == ZERO_ADDRESS else pair

    async def get_reserves(self, pool: str) -> PoolReserves | None:
        contract = self.w3.eth.contract(address=self._checksum(pool), abi=PAIR_ABI)

        async def fetch() -> tuple[Any, Any, Any]:
            return await asyncio.gather(
                contract.functions.getReserves().call(),
                contract.functions.token0().call(),
                contract.functions.token1().call(),
            )

        reserves, token0, token1 = await self._call("get_reserves", fetch)
        return PoolReserves(
            pool=normalize_address(pool),
            token0=normalize_address(token0),
            token1=normalize_address(token1),
            reserve0=int(reserves[0]),
            reserve1=int(reserves[1]),
        )

    def _erc20(self, token: str) -> Any:
        return self.w3.eth.contract(address=self._checksum(token), abi=ERC20_ABI)

    async def get_decimals(self, token: str) -> int:
        decimals = await self._call("get_decimals", lambda: self._erc20(token).functions.decimals().call())
        return int(decimals)

    async def get_token_balance(self, token: str, owner: str) -> int:
        balance = await self._call(
            "get_token_balance",
            lambda: self._erc20(token).functions.balanceOf(self._checksum(owner)).call(),
        )
        return int(balance)

    async def get_native_balance(self, owner: str) -> int:
        balance = await self._call(
            "get_native_balance", lambda: self.w3.eth.get_balance(self._checksum(owner))
        )
        return int(balance)

    async def get_allowance(self, token: str, owner: str, spender: str) -> int:
        allowance = await self._call(
            "get_allowance",
            lambda: self._erc20(token)
            .functions.allowance(self._checksum(owner), self._checksum(spender))
            .call(),
        )
        return int(allowance)

    async def get_block_timestamp(self) -> int:
        block = await self._call("get_block_timestamp", lambda: self.w3.eth.get_block("latest"))
        return int(block["timestamp"])

    # --- ChainWriter ---

    @property
    def account(self) -> str:
        if self._account is None:
            raise SwapError("No wallet connected")
        return self._account

    async def approve(self, token: str, spender: str, amount: int) -> TxReceipt:
        return await self._send(
            method="approve",
            to=token,
            data=encode_approve(normalize_address(spender), amount),
            value=0,
        )

    async def swap(self, router: str, call: SwapCall) -> TxReceipt:
        return await self._send(
            method=call.method.value,
            to=router,
            data=encode_swap_call(call),
            value=call.value,
        )

    async def _send(self, method: str, to: str, data: str, value: int) -> TxReceipt:
        """Estimate, submit and wait for one transaction.

        A revert during estimation is raised before anything is broadcast.
        If estimation only fails for network reasons, the method's default
        gas limit is used instead.
        """
        tx: dict[str, Any] = {
            "from": self._checksum(self.account),
            "to": self._checksum(to),
            "data": data,
            "value": value,
        }

        try:
            estimated = await self._call("estimate_gas", lambda: self.w3.eth.estimate_gas(tx))
            tx["gas"] = estimated * GAS_BUFFER_PERCENT // 100
        except TransientNetworkError as e:
            tx["gas"] = DEFAULT_GAS_LIMITS[method]
            logger.warning("gas_estimation_failed", method=method, fallback=tx["gas"], error=str(e))

        tx_hash = await self._call("send_transaction", lambda: self.w3.eth.send_transaction(tx))
        tx_hash_hex = AsyncWeb3.to_hex(tx_hash)
        logger.info("transaction_submitted", method=method, to=short(to), tx_hash=tx_hash_hex)

        try:
            receipt = await self.w3.eth.wait_for_transaction_receipt(
                tx_hash, timeout=self.receipt_timeout
            )
        except TimeExhausted as e:
            raise DeadlineExpired(
                f"Transaction {tx_hash_hex} was not mined within {self.receipt_timeout}s"
            ) from e
        except Exception as e:
            raise classify_error(e) from e

        return TxReceipt(
            tx_hash=tx_hash_hex,
            status=int(receipt["status"]),
            block_number=receipt.get("blockNumber"),
        )


__all__ = ["Web3ChainClient", "FACTORY_ABI", "PAIR_ABI", "ERC20_ABI"]
