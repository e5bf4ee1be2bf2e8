"""Swap execution."""

from dexroute.execution.executor import SwapExecutor, TxHandle, swap_method

__all__ = ["SwapExecutor", "TxHandle", "swap_method"]
