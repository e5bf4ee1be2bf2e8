"""Swap execution.

SwapExecutor turns a priced Route into a protected router call. The
minimum output and deadline are fixed here, pre-flight checks run before
anything is signed, and the approve-then-swap sequence is strictly
sequential. Submission is never retried: once broadcast, a transaction
can only be superseded, not recalled.
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable
from dataclasses import dataclass

import structlog

from dexroute.amm.encoding import SwapCall, SwapMethod
from dexroute.amm.slippage import min_amount_out, validate_slippage_bps
from dexroute.chain.interfaces import ChainReader, ChainWriter, TxReceipt
from dexroute.chain.retry import RetryPolicy, call_with_retry
from dexroute.constants import UINT256_MAX
from dexroute.errors import (
    InsufficientAllowance,
    InsufficientBalance,
    InsufficientInputAmount,
    InsufficientOutput,
    SwapError,
    TransactionReverted,
    classify_error,
)
from dexroute.models.assets import Asset, NativeAsset
from dexroute.models.route import Route
from dexroute.models.types import normalize_address, short
from dexroute.routing.router import Router

logger = structlog.get_logger()


@dataclass(frozen=True)
class TxHandle:
    """A confirmed swap.

    Attributes:
        tx_hash: Hash of the swap transaction
        route: The route that was submitted
        amount_in: Input amount in base units
        min_amount_out: Output floor enforced by the router contract
        deadline: Absolute deadline (chain timestamp) sent with the call
        approval_tx_hash: Hash of the preceding approval, if one was needed
        block_number: Block the swap was mined in, when known
    """

    tx_hash: str
    route: Route
    amount_in: int
    min_amount_out: int
    deadline: int
    approval_tx_hash: str | None = None
    block_number: int | None = None


def swap_method(token_in: Asset, token_out: Asset) -> SwapMethod:
    """Router entry point for the input/output asset kinds."""
    if isinstance(token_in, NativeAsset):
        return SwapMethod.ETH_FOR_TOKENS
    if isinstance(token_out, NativeAsset):
        return SwapMethod.TOKENS_FOR_ETH
    return SwapMethod.TOKENS_FOR_TOKENS


class SwapExecutor:
    """Builds, checks and submits router swaps from one account."""

    def __init__(
        self,
        reader: ChainReader,
        writer: ChainWriter,
        router: Router,
        router_address: str,
        retry: RetryPolicy | None = None,
        preflight_quote: bool = True,
        infinite_approval: bool = False,
    ) -> None:
        self._reader = reader
        self._writer = writer
        self._router = router
        self.router_address = normalize_address(router_address, validate=True)
        self._retry = retry or RetryPolicy()
        self.preflight_quote = preflight_quote
        self.infinite_approval = infinite_approval

    async def execute(
        self,
        route: Route,
        amount_in: int,
        min_amount_out_requested: int,
        recipient: str,
        slippage_bps: int,
        deadline_seconds: int,
    ) -> TxHandle:
        """Submit a swap along route and wait for its receipt.

        Args:
            route: Route from Router.find_routes
            amount_in: Input amount in base units
            min_amount_out_requested: Output the caller expects (usually the quote)
            recipient: Address receiving the output
            slippage_bps: Tolerance applied to min_amount_out_requested
            deadline_seconds: Validity window measured on the chain's clock

        Returns:
            TxHandle for the mined swap

        Raises:
            InsufficientInputAmount: If amount_in is not positive
            InsufficientBalance: If the account cannot cover amount_in
            InsufficientOutput: If the fresh quote or the chain misses the minimum
            InsufficientAllowance: If the approval transaction fails
            DeadlineExpired: If the swap is mined too late
            UserRejected: If signing is declined
            TransactionReverted: For any other on-chain failure
        """
        if amount_in <= 0:
            raise InsufficientInputAmount(f"INSUFFICIENT_INPUT_AMOUNT: {amount_in}")
        if min_amount_out_requested < 0:
            raise ValueError(f"min_amount_out cannot be negative: {min_amount_out_requested}")
        if deadline_seconds <= 0:
            raise ValueError(f"deadline_seconds must be positive, got {deadline_seconds}")
        validate_slippage_bps(slippage_bps)

        min_out = min_amount_out(min_amount_out_requested, slippage_bps)
        recipient = normalize_address(recipient, validate=True)
        method = swap_method(route.token_in, route.token_out)
        account = self._writer.account
        token_in = route.addresses[0]

        await self._check_balance(route.token_in, token_in, account, amount_in)

        if self.preflight_quote:
            fresh = await self._router.quote_path(route.path, amount_in, force_refresh=True)
            if fresh.amount_out < min_out:
                logger.warning(
                    "preflight_output_below_minimum",
                    quoted=route.amount_out,
                    fresh=fresh.amount_out,
                    min_amount_out=min_out,
                )
                raise InsufficientOutput(
                    f"Pool now returns {fresh.amount_out}, below the minimum {min_out}. "
                    "Try again with higher slippage or a smaller amount"
                )

        approval_tx_hash = None
        if not method.pays_value:
            approval_tx_hash = await self._ensure_allowance(token_in, account, amount_in)

        now = await self._read("get_block_timestamp", self._reader.get_block_timestamp)
        deadline = now + deadline_seconds

        call = SwapCall(
            method=method,
            amount_in=amount_in,
            amount_out_min=min_out,
            path=route.addresses,
            recipient=recipient,
            deadline=deadline,
        )
        logger.info(
            "swap_submitted",
            method=method.value,
            path=[short(a) for a in route.addresses],
            amount_in=amount_in,
            min_amount_out=min_out,
            deadline=deadline,
        )
        receipt = await self._submit(lambda: self._writer.swap(self.router_address, call))
        if not receipt.succeeded:
            raise TransactionReverted(f"Swap transaction {receipt.tx_hash} reverted")

        logger.info("swap_confirmed", tx_hash=receipt.tx_hash, block_number=receipt.block_number)
        return TxHandle(
            tx_hash=receipt.tx_hash,
            route=route,
            amount_in=amount_in,
            min_amount_out=min_out,
            deadline=deadline,
            approval_tx_hash=approval_tx_hash,
            block_number=receipt.block_number,
        )

    async def _check_balance(self, asset: Asset, token: str, account: str, amount_in: int) -> None:
        if isinstance(asset, NativeAsset):
            balance = await self._read(
                "get_native_balance", lambda: self._reader.get_native_balance(account)
            )
        else:
            balance = await self._read(
                "get_token_balance", lambda: self._reader.get_token_balance(token, account)
            )
        if balance < amount_in:
            raise InsufficientBalance(
                f"Balance {balance} of {asset.symbol} is below the swap amount {amount_in}"
            )

    async def _ensure_allowance(self, token: str, account: str, amount_in: int) -> str | None:
        """Approve the router if needed; returns the approval hash or None."""
        allowance = await self._read(
            "get_allowance",
            lambda: self._reader.get_allowance(token, account, self.router_address),
        )
        if allowance >= amount_in:
            return None

        amount = UINT256_MAX if self.infinite_approval else amount_in
        logger.info(
            "approval_submitted",
            token=short(token),
            spender=short(self.router_address),
            current_allowance=allowance,
            amount=amount,
        )
        receipt = await self._submit(lambda: self._writer.approve(token, self.router_address, amount))
        if not receipt.succeeded:
            raise InsufficientAllowance(f"Approval transaction {receipt.tx_hash} failed")
        return receipt.tx_hash

    async def _read(self, operation: str, fn: Callable[[], Awaitable[int]]) -> int:
        return await call_with_retry(self._retry, fn, operation=operation)

    async def _submit(self, fn: Callable[[], Awaitable[TxReceipt]]) -> TxReceipt:
        try:
            return await fn()
        except SwapError:
            raise
        except Exception as e:
            error = classify_error(e)
            logger.warning("transaction_failed", code=error.code, error=str(e))
            raise error from e


__all__ = ["SwapExecutor", "TxHandle", "swap_method"]
