"""Bounded retry with exponential backoff for RPC calls."""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import TypeVar

import structlog

from dexroute.errors import TransientNetworkError

logger = structlog.get_logger()

T = TypeVar("T")


@dataclass(frozen=True)
class RetryPolicy:
    """How often and how patiently to retry transient RPC failures.

    Attributes:
        max_attempts: Total attempts including the first (>= 1)
        base_delay: Seconds to wait before the second attempt
        multiplier: Backoff factor applied per further attempt
        max_delay: Upper bound on a single wait
    """

    max_attempts: int = 3
    base_delay: float = 0.5
    multiplier: float = 2.0
    max_delay: float = 8.0

    def __post_init__(self) -> None:
        if self.max_attempts < 1:
            raise ValueError(f"max_attempts must be >= 1, got {self.max_attempts}")
        if self.base_delay < 0 or self.max_delay < 0:
            raise ValueError("Retry delays cannot be negative")
        if self.multiplier < 1:
            raise ValueError(f"multiplier must be >= 1, got {self.multiplier}")

    def delay_for(self, attempt: int) -> float:
        """Wait after the given failed attempt (1-based)."""
        return min(self.base_delay * self.multiplier ** (attempt - 1), self.max_delay)

    @classmethod
    def no_delay(cls, max_attempts: int = 3) -> RetryPolicy:
        """Policy that retries immediately (for tests)."""
        return cls(max_attempts=max_attempts, base_delay=0.0, multiplier=1.0, max_delay=0.0)


async def call_with_retry(
    policy: RetryPolicy,
    fn: Callable[[], Awaitable[T]],
    operation: str = "rpc_call",
    sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
) -> T:
    """Await fn(), retrying on TransientNetworkError per the policy.

    Any other exception propagates immediately. After the final attempt
    the last TransientNetworkError is re-raised.
    """
    attempt = 1
    while True:
        try:
            return await fn()
        except TransientNetworkError as e:
            if attempt >= policy.max_attempts:
                logger.warning(
                    "rpc_retries_exhausted",
                    operation=operation,
                    attempts=attempt,
                    error=str(e),
                )
                raise
            delay = policy.delay_for(attempt)
            logger.debug(
                "rpc_retry",
                operation=operation,
                attempt=attempt,
                delay_seconds=delay,
                error=str(e),
            )
            await sleep(delay)
            attempt += 1


__all__ = ["RetryPolicy", "call_with_retry"]
