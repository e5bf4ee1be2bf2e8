"""Error taxonomy for quoting and swap execution.

Quoting errors for a single hop (NoPool, NoLiquidity) are absorbed by the
router. Everything else reaches the caller as a SwapError subclass whose
class attributes describe how to present it to a user.

Raw node and wallet errors are never surfaced verbatim: classify_error()
maps them onto this hierarchy by pattern matching the message.
"""

from __future__ import annotations

import re
from typing import ClassVar


class SwapError(Exception):
    """Base error for routing, quoting and execution."""

    code: ClassVar[str] = "SWAP_ERROR"
    title: ClassVar[str] = "Swap Failed"
    default_message: ClassVar[str] = "The swap could not be completed"
    recoverable: ClassVar[bool] = True

    def __init__(self, message: str | None = None) -> None:
        super().__init__(message or self.default_message)

    @property
    def message(self) -> str:
        return str(self)

    def to_dict(self) -> dict[str, object]:
        """User-facing representation (code, title, message, recoverable)."""
        return {
            "code": self.code,
            "title": self.title,
            "message": self.message,
            "recoverable": self.recoverable,
        }


class NoPool(SwapError):
    """No pool has been created for the asset pair."""

    code = "NO_POOL"
    title = "No Pool"
    default_message = "No liquidity pool exists for this pair"


class NoLiquidity(SwapError):
    """The pool exists but one of its reserves is zero."""

    code = "NO_LIQUIDITY"
    title = "No Liquidity"
    default_message = "The pool for this pair has no liquidity"


class InvalidPath(SwapError, ValueError):
    """Fewer than two assets, a repeated asset, or an unusable hop bound."""

    code = "INVALID_PATH"
    title = "Invalid Route"
    default_message = "The swap route is invalid"
    recoverable = False


class UnknownAsset(SwapError, ValueError):
    """Identifier is neither a known symbol nor a valid address."""

    code = "UNKNOWN_ASSET"
    title = "Unknown Token"
    default_message = "The requested token is not recognized"
    recoverable = False


class InsufficientInputAmount(SwapError, ValueError):
    """Quote requested for a non-positive amount."""

    code = "INSUFFICIENT_INPUT_AMOUNT"
    title = "Invalid Amount"
    default_message = "Amount must be greater than zero"
    recoverable = False


class InsufficientLiquidity(SwapError, ValueError):
    """Quote requested against non-positive reserves or beyond the pool's depth."""

    code = "INSUFFICIENT_LIQUIDITY"
    title = "Insufficient Liquidity"
    default_message = "Not enough liquidity for this trade"


class InsufficientOutput(SwapError):
    """Output would fall below the caller's minimum (slippage exceeded)."""

    code = "INSUFFICIENT_OUTPUT"
    title = "Price Moved"
    default_message = "Price moved beyond your slippage tolerance. Try again with higher slippage or a smaller amount"


class DeadlineExpired(SwapError):
    """The transaction was not mined before its deadline."""

    code = "DEADLINE_EXPIRED"
    title = "Transaction Expired"
    default_message = "Transaction expired. Please retry"


class UserRejected(SwapError):
    """The signing request was declined."""

    code = "USER_REJECTED"
    title = "Transaction Cancelled"
    default_message = "You cancelled the transaction"


class InsufficientBalance(SwapError):
    """The sender does not hold enough of the input asset."""

    code = "INSUFFICIENT_BALANCE"
    title = "Insufficient Balance"
    default_message = "Your wallet balance is too low for this swap"
    recoverable = False


class InsufficientAllowance(SwapError):
    """The router is not allowed to spend enough of the input token."""

    code = "INSUFFICIENT_ALLOWANCE"
    title = "Approval Required"
    default_message = "Token approval failed or is too low for this swap"


class TransientNetworkError(SwapError):
    """RPC rate limiting or connectivity failure."""

    code = "NETWORK_ERROR"
    title = "Network Error"
    default_message = "The network request failed. Please check your connection and try again"


class TransactionReverted(SwapError):
    """On-chain revert without a more specific classification."""

    code = "TRANSACTION_REVERTED"
    title = "Transaction Failed"
    default_message = "The transaction was reverted by the contract"


# Ordered: first match wins. Specific revert reasons come first, then any
# revert, so revert data (hex payloads) never reaches the network patterns.
_PATTERNS: tuple[tuple[re.Pattern[str], type[SwapError]], ...] = (
    (re.compile(r"user rejected|user denied|rejected by user|action_rejected|'code': 4001\b"), UserRejected),
    (re.compile(r"insufficient_output_amount|excessive_input_amount"), InsufficientOutput),
    (re.compile(r"expired|deadline"), DeadlineExpired),
    (
        re.compile(r"insufficient funds|insufficient balance|transfer amount exceeds balance"),
        InsufficientBalance,
    ),
    (re.compile(r"allowance|transfer_from_failed|transferhelper"), InsufficientAllowance),
    (re.compile(r"execution reverted|revert"), TransactionReverted),
    (
        re.compile(
            r"\b(?:429|502|503)\b|too many requests|rate limit|timeout|timed out"
            r"|network error|connection|temporarily unavailable"
        ),
        TransientNetworkError,
    ),
)


def classify_error(exc: BaseException) -> SwapError:
    """Map a raw node or wallet exception onto the error taxonomy.

    Already-classified SwapErrors are returned unchanged. Unknown errors
    become a generic TransactionReverted; the raw exception stays reachable
    through __cause__ but is not part of the message.
    """
    if isinstance(exc, SwapError):
        return exc

    text = f"{type(exc).__name__}: {exc}".lower()
    if isinstance(exc, (TimeoutError, ConnectionError)):
        classified: SwapError = TransientNetworkError()
    else:
        classified = TransactionReverted()
        for pattern, error_cls in _PATTERNS:
            if pattern.search(text):
                classified = error_cls()
                break

    classified.__cause__ = exc
    return classified


__all__ = [
    "SwapError",
    "NoPool",
    "NoLiquidity",
    "InvalidPath",
    "UnknownAsset",
    "InsufficientInputAmount",
    "InsufficientLiquidity",
    "InsufficientOutput",
    "DeadlineExpired",
    "UserRejected",
    "InsufficientBalance",
    "InsufficientAllowance",
    "TransientNetworkError",
    "TransactionReverted",
    "classify_error",
]
