"""UniswapV2 constant-product math.

UniswapV2 uses the constant product formula: x * y = k
With a 0.3% fee on input amounts.

Every function here mirrors UniswapV2Library's integer arithmetic exactly,
including floor division and the +1 rounding of get_amount_in. Projected
outputs are compared against on-chain minimums, so any "improvement" to
the rounding would make quotes disagree with what the pair pays out.
"""

from __future__ import annotations

import math
from collections.abc import Sequence
from dataclasses import dataclass
from decimal import Decimal

from eth_utils import keccak

from dexroute.constants import BPS_DENOMINATOR, FEE_DENOMINATOR, FEE_NUMERATOR, ZERO_ADDRESS
from dexroute.errors import InsufficientInputAmount, InsufficientLiquidity, InvalidPath
from dexroute.models.route import HopQuote
from dexroute.models.types import normalize_address
from dexroute.safe_int import S


@dataclass(frozen=True)
class PoolReserves:
    """Point-in-time reserve snapshot of a pair, in the pair's storage order."""

    pool: str
    token0: str
    token1: str
    reserve0: int
    reserve1: int

    @property
    def has_liquidity(self) -> bool:
        return self.reserve0 > 0 and self.reserve1 > 0

    def oriented(self, token_in: str) -> tuple[int, int]:
        """Get reserves ordered as (reserve_in, reserve_out)."""
        token_in_norm = normalize_address(token_in)
        if token_in_norm == normalize_address(self.token0):
            return self.reserve0, self.reserve1
        elif token_in_norm == normalize_address(self.token1):
            return self.reserve1, self.reserve0
        else:
            raise ValueError(f"Token {token_in} not in pool {self.pool}")

    def token_out(self, token_in: str) -> str:
        """Get the output token for a given input token."""
        token_in_norm = normalize_address(token_in)
        if token_in_norm == normalize_address(self.token0):
            return normalize_address(self.token1)
        elif token_in_norm == normalize_address(self.token1):
            return normalize_address(self.token0)
        else:
            raise ValueError(f"Token {token_in} not in pool {self.pool}")


def sort_tokens(token_a: str, token_b: str) -> tuple[str, str]:
    """Canonical (token0, token1) ordering used by the factory.

    Raises:
        InvalidPath: If the tokens are identical or token0 is the zero address
    """
    a = normalize_address(token_a)
    b = normalize_address(token_b)
    if a == b:
        raise InvalidPath("IDENTICAL_ADDRESSES")
    token0, token1 = (a, b) if a < b else (b, a)
    if token0 == ZERO_ADDRESS:
        raise InvalidPath("ZERO_ADDRESS")
    return token0, token1


def pair_for(factory: str, token_a: str, token_b: str, init_code_hash: str) -> str:
    """Deterministic CREATE2 address of the pair for two tokens.

    address = keccak256(0xff ++ factory ++ keccak256(token0 ++ token1) ++ init_code_hash)[12:]
    """
    token0, token1 = sort_tokens(token_a, token_b)
    salt = keccak(bytes.fromhex(token0[2:]) + bytes.fromhex(token1[2:]))
    digest = keccak(
        b"\xff"
        + bytes.fromhex(normalize_address(factory)[2:])
        + salt
        + bytes.fromhex(init_code_hash.removeprefix("0x"))
    )
    return "0x" + digest[12:].hex()


class UniswapV2:
    """UniswapV2 AMM math.

    Formula: amount_out = (amount_in * 997 * reserve_out) / (reserve_in * 1000 + amount_in * 997)

    The 997/1000 factor accounts for the 0.3% fee.
    """

    def get_amount_out(self, amount_in: int, reserve_in: int, reserve_out: int) -> int:
        """Calculate output amount using constant product formula.

        Args:
            amount_in: Input token amount
            reserve_in: Reserve of input token in pool
            reserve_out: Reserve of output token in pool

        Returns:
            Output token amount (floor)

        Raises:
            InsufficientInputAmount: If amount_in is not positive
            InsufficientLiquidity: If either reserve is not positive
        """
        if amount_in <= 0:
            raise InsufficientInputAmount(f"INSUFFICIENT_INPUT_AMOUNT: {amount_in}")
        if reserve_in <= 0 or reserve_out <= 0:
            raise InsufficientLiquidity(
                f"INSUFFICIENT_LIQUIDITY: reserves ({reserve_in}, {reserve_out})"
            )

        amount_in_with_fee = S(amount_in) * FEE_NUMERATOR
        numerator = amount_in_with_fee * S(reserve_out)
        denominator = S(reserve_in) * FEE_DENOMINATOR + amount_in_with_fee

        return (numerator // denominator).value

    def get_amount_in(self, amount_out: int, reserve_in: int, reserve_out: int) -> int:
        """Calculate required input for desired output.

        Formula: amount_in = (res_in * out * 1000) / ((res_out - out) * 997) + 1

        The +1 rounds up so the pair's invariant holds after floor division.

        Raises:
            InsufficientInputAmount: If amount_out is not positive
            InsufficientLiquidity: If either reserve is not positive, or the
                requested output would drain the output reserve
        """
        if amount_out <= 0:
            raise InsufficientInputAmount(f"INSUFFICIENT_OUTPUT_AMOUNT: {amount_out}")
        if reserve_in <= 0 or reserve_out <= 0:
            raise InsufficientLiquidity(
                f"INSUFFICIENT_LIQUIDITY: reserves ({reserve_in}, {reserve_out})"
            )
        if amount_out >= reserve_out:
            raise InsufficientLiquidity(
                f"INSUFFICIENT_LIQUIDITY: output {amount_out} >= reserve {reserve_out}"
            )

        numerator = S(reserve_in) * S(amount_out) * FEE_DENOMINATOR
        denominator = (S(reserve_out) - S(amount_out)) * FEE_NUMERATOR

        return ((numerator // denominator) + 1).value

    def quote(self, amount_a: int, reserve_a: int, reserve_b: int) -> int:
        """Proportional amount of B for amount_a of A, without fee.

        Only meaningful for liquidity-provision ratios, never for swap output.
        """
        if amount_a <= 0:
            raise InsufficientInputAmount(f"INSUFFICIENT_AMOUNT: {amount_a}")
        if reserve_a <= 0 or reserve_b <= 0:
            raise InsufficientLiquidity(f"INSUFFICIENT_LIQUIDITY: reserves ({reserve_a}, {reserve_b})")
        return (S(amount_a) * S(reserve_b) // S(reserve_a)).value

    def price_impact_bps(
        self, amount_in: int, amount_out: int, reserve_in: int, reserve_out: int
    ) -> int:
        """Price impact in hundredths of a percent, truncated.

        Compares amount_out against the fee-less spot projection
        amount_in * reserve_out / reserve_in. Never negative.
        """
        if reserve_in <= 0 or reserve_out <= 0:
            return 0
        ideal_out = S(amount_in) * S(reserve_out) // S(reserve_in)
        if not ideal_out:
            return 0
        return (ideal_out.saturating_sub(amount_out) * BPS_DENOMINATOR // ideal_out).value

    def price_impact(
        self, amount_in: int, amount_out: int, reserve_in: int, reserve_out: int
    ) -> Decimal:
        """Price impact as a percentage with two decimal places (e.g. Decimal("33.46"))."""
        bps = self.price_impact_bps(amount_in, amount_out, reserve_in, reserve_out)
        return Decimal(bps) / Decimal(100)

    def get_amounts_out(self, amount_in: int, reserves: Sequence[tuple[int, int]]) -> list[int]:
        """Chain get_amount_out over (reserve_in, reserve_out) per hop.

        Returns:
            Amounts at every path position; [0] is amount_in, [-1] the final output
        """
        if not reserves:
            raise InvalidPath("INVALID_PATH: no hops")
        amounts = [amount_in]
        for reserve_in, reserve_out in reserves:
            amounts.append(self.get_amount_out(amounts[-1], reserve_in, reserve_out))
        return amounts

    def get_amounts_in(self, amount_out: int, reserves: Sequence[tuple[int, int]]) -> list[int]:
        """Chain get_amount_in backwards over (reserve_in, reserve_out) per hop.

        Returns:
            Amounts at every path position; [-1] is amount_out, [0] the required input
        """
        if not reserves:
            raise InvalidPath("INVALID_PATH: no hops")
        amounts = [0] * (len(reserves) + 1)
        amounts[-1] = amount_out
        for i in range(len(reserves) - 1, -1, -1):
            reserve_in, reserve_out = reserves[i]
            amounts[i] = self.get_amount_in(amounts[i + 1], reserve_in, reserve_out)
        return amounts

    def simulate_hop(self, pool: PoolReserves, token_in: str, amount_in: int) -> HopQuote:
        """Quote one exact-input hop through a reserve snapshot.

        Reserves are oriented by token identity, never by request order.
        """
        reserve_in, reserve_out = pool.oriented(token_in)
        amount_out = self.get_amount_out(amount_in, reserve_in, reserve_out)
        return HopQuote(
            pool=pool.pool,
            token_in=normalize_address(token_in),
            token_out=pool.token_out(token_in),
            amount_in=amount_in,
            amount_out=amount_out,
            reserve_in=reserve_in,
            reserve_out=reserve_out,
            price_impact=self.price_impact(amount_in, amount_out, reserve_in, reserve_out),
        )

    # --- Liquidity provision ratios ---

    def optimal_amount_b(self, amount_a: int, reserve_a: int, reserve_b: int) -> int:
        """Amount of B to deposit alongside amount_a at the current ratio."""
        return self.quote(amount_a, reserve_a, reserve_b)

    def liquidity_minted(
        self,
        amount_a: int,
        amount_b: int,
        reserve_a: int,
        reserve_b: int,
        total_supply: int,
    ) -> int:
        """Estimate LP tokens received for a deposit.

        The first provider receives the geometric mean of the deposit; later
        providers receive the smaller of the two proportional shares.
        """
        if total_supply == 0:
            return math.isqrt(amount_a * amount_b)
        if reserve_a <= 0 or reserve_b <= 0:
            raise InsufficientLiquidity(f"INSUFFICIENT_LIQUIDITY: reserves ({reserve_a}, {reserve_b})")
        liquidity_a = (S(amount_a) * S(total_supply) // S(reserve_a)).value
        liquidity_b = (S(amount_b) * S(total_supply) // S(reserve_b)).value
        return min(liquidity_a, liquidity_b)

    def removal_amounts(
        self, liquidity: int, reserve_a: int, reserve_b: int, total_supply: int
    ) -> tuple[int, int]:
        """Underlying amounts returned for burning `liquidity` LP tokens."""
        if total_supply == 0:
            return 0, 0
        amount_a = (S(liquidity) * S(reserve_a) // S(total_supply)).value
        amount_b = (S(liquidity) * S(reserve_b) // S(total_supply)).value
        return amount_a, amount_b


# Singleton instance
uniswap_v2 = UniswapV2()


__all__ = [
    "PoolReserves",
    "UniswapV2",
    "uniswap_v2",
    "sort_tokens",
    "pair_for",
]
