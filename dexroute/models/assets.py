"""Asset model and the registry of known assets.

An asset is either the chain's native currency or an ERC-20 token. The
distinction is made once, when the asset is constructed, so that the
executor can branch on the type instead of comparing addresses against
a sentinel.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from pathlib import Path

from pydantic import BaseModel, Field

from dexroute.constants import DAI, NATIVE_MARKER, USDC, USDT, WBTC, WETH
from dexroute.models.types import Address, normalize_address


@dataclass(frozen=True)
class NativeAsset:
    """The chain's base currency (paid as transaction value)."""

    symbol: str = "ETH"
    decimals: int = 18

    @property
    def address(self) -> str:
        """Token-list marker for the native asset (the zero address)."""
        return NATIVE_MARKER

    @property
    def is_native(self) -> bool:
        return True


@dataclass(frozen=True)
class Erc20Asset:
    """A fungible token identified by its contract address."""

    address: str
    symbol: str
    decimals: int = 18

    def __post_init__(self) -> None:
        # Frozen dataclass: bypass __setattr__ to store the canonical form
        object.__setattr__(self, "address", normalize_address(self.address, validate=True))
        if not 0 <= self.decimals <= 77:
            raise ValueError(f"Invalid decimals for {self.symbol}: {self.decimals}")

    @property
    def is_native(self) -> bool:
        return False


Asset = NativeAsset | Erc20Asset


class TokenListEntry(BaseModel):
    """One entry of a JSON token list."""

    address: Address
    symbol: str = Field(min_length=1)
    decimals: int = Field(default=18, ge=0, le=77)

    def to_asset(self) -> Asset:
        if normalize_address(self.address) == NATIVE_MARKER:
            return NativeAsset(symbol=self.symbol, decimals=self.decimals)
        return Erc20Asset(address=self.address, symbol=self.symbol, decimals=self.decimals)


class TokenList(BaseModel):
    """A JSON token list: {"tokens": [{"address", "symbol", "decimals"}, ...]}."""

    tokens: list[TokenListEntry]


class AssetRegistry:
    """Known assets, indexed by address and by symbol.

    Loaded once at startup; lookups never touch the network. The native
    asset is registered under the zero-address marker.
    """

    def __init__(self, assets: list[Asset] | None = None) -> None:
        self._by_address: dict[str, Asset] = {}
        self._by_symbol: dict[str, Asset] = {}
        for asset in assets or []:
            self.add(asset)

    def add(self, asset: Asset) -> None:
        self._by_address[asset.address] = asset
        self._by_symbol[asset.symbol.upper()] = asset

    def get(self, address: str) -> Asset | None:
        """Look up an asset by address (any case)."""
        return self._by_address.get(normalize_address(address))

    def by_symbol(self, symbol: str) -> Asset | None:
        return self._by_symbol.get(symbol.upper())

    def resolve(self, identifier: str) -> Asset | None:
        """Look up by address if it looks like one, otherwise by symbol."""
        if identifier.lower().startswith("0x"):
            return self.get(identifier)
        return self.by_symbol(identifier)

    @property
    def native(self) -> NativeAsset | None:
        asset = self._by_address.get(NATIVE_MARKER)
        return asset if isinstance(asset, NativeAsset) else None

    def __iter__(self):  # type: ignore[no-untyped-def]
        return iter(self._by_address.values())

    def __len__(self) -> int:
        return len(self._by_address)

    def __contains__(self, address: object) -> bool:
        return isinstance(address, str) and normalize_address(address) in self._by_address

    @classmethod
    def from_token_list(cls, data: dict) -> AssetRegistry:
        """Build a registry from parsed token-list JSON.

        Raises:
            pydantic.ValidationError: If the token list is malformed
        """
        token_list = TokenList.model_validate(data)
        return cls([entry.to_asset() for entry in token_list.tokens])

    @classmethod
    def from_file(cls, path: str | Path) -> AssetRegistry:
        with open(path) as f:
            return cls.from_token_list(json.load(f))


def default_assets() -> list[Asset]:
    """Mainnet assets known without a token list."""
    return [
        NativeAsset(symbol="ETH", decimals=18),
        Erc20Asset(address=WETH, symbol="WETH", decimals=18),
        Erc20Asset(address=USDC, symbol="USDC", decimals=6),
        Erc20Asset(address=USDT, symbol="USDT", decimals=6),
        Erc20Asset(address=DAI, symbol="DAI", decimals=18),
        Erc20Asset(address=WBTC, symbol="WBTC", decimals=8),
    ]


__all__ = [
    "Asset",
    "NativeAsset",
    "Erc20Asset",
    "AssetRegistry",
    "TokenList",
    "TokenListEntry",
    "default_assets",
]
