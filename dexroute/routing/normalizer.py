"""Asset normalization.

Every pool key and path comparison works on ERC-20 addresses. The native
asset is mapped to its wrapped token here, and only here; the executor
keeps the original Asset to pick the call shape.
"""

from __future__ import annotations

import structlog

from dexroute.chain.cache import MISSING, TtlCache
from dexroute.chain.interfaces import ChainReader
from dexroute.chain.retry import RetryPolicy, call_with_retry
from dexroute.constants import NATIVE_MARKER
from dexroute.errors import UnknownAsset
from dexroute.models.assets import Asset, AssetRegistry, Erc20Asset, NativeAsset
from dexroute.models.types import is_valid_address, normalize_address, short

logger = structlog.get_logger()


class AssetNormalizer:
    """Maps assets onto the wrapped-token address space."""

    def __init__(
        self,
        registry: AssetRegistry,
        wrapped_native: str,
        chain: ChainReader | None = None,
        decimals_cache: TtlCache | None = None,
        retry: RetryPolicy | None = None,
    ) -> None:
        self.registry = registry
        self.wrapped_native = normalize_address(wrapped_native, validate=True)
        self._chain = chain
        self._decimals_cache = decimals_cache if decimals_cache is not None else TtlCache(0)
        self._retry = retry or RetryPolicy()

    def normalize(self, asset: Asset | str) -> str:
        """Canonical token address for an asset.

        The native asset (or the zero-address marker) becomes the wrapped
        native token; any other asset keeps its own address.
        """
        if isinstance(asset, NativeAsset):
            return self.wrapped_native
        if isinstance(asset, Erc20Asset):
            return asset.address
        address = normalize_address(asset, validate=True)
        return self.wrapped_native if address == NATIVE_MARKER else address

    def normalize_path(self, path: tuple[Asset, ...] | list[Asset]) -> tuple[str, ...]:
        return tuple(self.normalize(asset) for asset in path)

    async def resolve(self, identifier: Asset | str) -> Asset:
        """Turn a symbol or address into an Asset.

        Registry entries win. An unregistered but valid address becomes an
        Erc20Asset whose decimals are read from the chain.

        Raises:
            UnknownAsset: If the identifier is neither a known symbol nor an address
        """
        if isinstance(identifier, (NativeAsset, Erc20Asset)):
            return identifier

        asset = self.registry.resolve(identifier)
        if asset is not None:
            return asset

        if not is_valid_address(normalize_address(identifier)):
            raise UnknownAsset(f"Unknown token: {identifier}")

        address = normalize_address(identifier)
        decimals = await self.decimals(address)
        logger.debug("resolved_unlisted_token", token=short(address), decimals=decimals)
        return Erc20Asset(address=address, symbol=short(address), decimals=decimals)

    async def decimals(self, asset: Asset | str, force_refresh: bool = False) -> int:
        """Decimal precision, from the asset itself, the registry or the chain."""
        if isinstance(asset, (NativeAsset, Erc20Asset)):
            return asset.decimals

        address = normalize_address(asset)
        known = self.registry.get(address)
        if known is not None:
            return known.decimals

        if not force_refresh:
            cached = self._decimals_cache.get(address)
            if cached is not MISSING:
                return cached

        if self._chain is None:
            raise UnknownAsset(f"Decimals unknown for {address} and no chain reader configured")

        chain = self._chain
        decimals = await call_with_retry(
            self._retry, lambda: chain.get_decimals(address), operation="get_decimals"
        )
        self._decimals_cache.set(address, decimals)
        return decimals


__all__ = ["AssetNormalizer"]
