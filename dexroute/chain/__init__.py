"""Chain access: read/write interfaces, caching, retries and adapters."""

from dexroute.chain.cache import MISSING, TtlCache
from dexroute.chain.interfaces import ChainReader, ChainWriter, TxReceipt
from dexroute.chain.memory import DEFAULT_ACCOUNT, ExecutionReverted, InMemoryChain
from dexroute.chain.retry import RetryPolicy, call_with_retry

__all__ = [
    "ChainReader",
    "ChainWriter",
    "TxReceipt",
    "TtlCache",
    "MISSING",
    "RetryPolicy",
    "call_with_retry",
    "InMemoryChain",
    "ExecutionReverted",
    "DEFAULT_ACCOUNT",
]
