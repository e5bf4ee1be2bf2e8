"""Route and quote value objects.

These are created per quoting request and discarded afterwards; nothing
here is persisted or shared between requests.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal
from enum import Enum

from dexroute.constants import HIGH_PRICE_IMPACT, MODERATE_PRICE_IMPACT
from dexroute.errors import InvalidPath
from dexroute.models.assets import Asset


class PriceImpactSeverity(str, Enum):
    """User-facing risk level for a route's aggregate price impact."""

    NONE = "none"
    MODERATE = "moderate"
    HIGH = "high"

    @classmethod
    def from_percent(cls, impact: Decimal) -> PriceImpactSeverity:
        if impact >= HIGH_PRICE_IMPACT:
            return cls.HIGH
        if impact >= MODERATE_PRICE_IMPACT:
            return cls.MODERATE
        return cls.NONE


@dataclass(frozen=True)
class HopQuote:
    """Result of quoting a single hop through one pool."""

    pool: str
    token_in: str
    token_out: str
    amount_in: int
    amount_out: int
    reserve_in: int
    reserve_out: int
    price_impact: Decimal


@dataclass(frozen=True)
class Route:
    """A priced path from the input asset to the output asset.

    Attributes:
        path: Assets in swap order (native assets kept as NativeAsset)
        addresses: Normalized token addresses for each path entry; this is
            the path transmitted to the router contract
        pairs: Pool address for each hop
        amounts: amounts[0] is the input, amounts[-1] the projected output
        price_impact: Sum of per-hop price impacts, in percent
    """

    path: tuple[Asset, ...]
    addresses: tuple[str, ...]
    pairs: tuple[str, ...]
    amounts: tuple[int, ...]
    price_impact: Decimal = Decimal(0)
    hops: tuple[HopQuote, ...] = field(default=(), compare=False)

    def __post_init__(self) -> None:
        if len(self.path) < 2:
            raise InvalidPath(f"Route needs at least two assets, got {len(self.path)}")
        if len(self.addresses) != len(self.path):
            raise InvalidPath("Route addresses must match path length")
        if len(set(self.addresses)) != len(self.addresses):
            raise InvalidPath("Route visits the same asset twice")
        if len(self.pairs) != len(self.path) - 1:
            raise InvalidPath(
                f"Route has {len(self.pairs)} pools for {len(self.path) - 1} hops"
            )
        if len(self.amounts) != len(self.path):
            raise InvalidPath(
                f"Route has {len(self.amounts)} amounts for {len(self.path)} assets"
            )

    @property
    def token_in(self) -> Asset:
        return self.path[0]

    @property
    def token_out(self) -> Asset:
        return self.path[-1]

    @property
    def amount_in(self) -> int:
        return self.amounts[0]

    @property
    def amount_out(self) -> int:
        return self.amounts[-1]

    @property
    def hop_count(self) -> int:
        return len(self.pairs)

    @property
    def is_multihop(self) -> bool:
        return self.hop_count > 1

    @property
    def severity(self) -> PriceImpactSeverity:
        return PriceImpactSeverity.from_percent(self.price_impact)


@dataclass(frozen=True)
class RouteResult:
    """Best route plus every candidate that priced successfully.

    best_route is None when no candidate survived; callers treat that as
    "insufficient liquidity", not as an error.
    """

    best_route: Route | None
    all_routes: tuple[Route, ...] = ()

    @property
    def found(self) -> bool:
        return self.best_route is not None


__all__ = ["HopQuote", "PriceImpactSeverity", "Route", "RouteResult"]
