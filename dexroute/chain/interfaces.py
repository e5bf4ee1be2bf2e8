"""Boundary between the routing core and the chain.

Reads are side-effect free and may be served from a short-lived cache by
the implementation; the core treats every value as a point-in-time
snapshot. Writes return once the transaction has a receipt.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol, runtime_checkable

from dexroute.amm.encoding import SwapCall
from dexroute.amm.uniswap_v2 import PoolReserves


@dataclass(frozen=True)
class TxReceipt:
    """Mined transaction outcome."""

    tx_hash: str
    status: int
    block_number: int | None = None

    @property
    def succeeded(self) -> bool:
        return self.status == 1


@runtime_checkable
class ChainReader(Protocol):
    """Read-only chain queries used for quoting and pre-flight checks."""

    async def get_pool(self, token_a: str, token_b: str) -> str | None:
        """Pair address for two tokens, or None if the factory has none."""
        ...

    async def get_reserves(self, pool: str) -> PoolReserves | None:
        """Raw reserve snapshot with token0/token1, or None if the pool is unknown."""
        ...

    async def get_decimals(self, token: str) -> int:
        ...

    async def get_token_balance(self, token: str, owner: str) -> int:
        ...

    async def get_native_balance(self, owner: str) -> int:
        ...

    async def get_allowance(self, token: str, owner: str, spender: str) -> int:
        ...

    async def get_block_timestamp(self) -> int:
        """Timestamp of the latest block (the chain's clock, not the local one)."""
        ...


@runtime_checkable
class ChainWriter(Protocol):
    """Transaction submission from the connected account."""

    @property
    def account(self) -> str:
        """Address that signs and pays for transactions."""
        ...

    async def approve(self, token: str, spender: str, amount: int) -> TxReceipt:
        ...

    async def swap(self, router: str, call: SwapCall) -> TxReceipt:
        ...


__all__ = ["TxReceipt", "ChainReader", "ChainWriter"]
