"""Data models: addresses, assets, routes and receipts.

Submodules are imported directly (``from dexroute.models.assets import ...``)
so that low-level modules such as constants can depend on the address
helpers without pulling in the rest of the package.
"""

from dexroute.models.types import Address, Uint256, is_valid_address, normalize_address

__all__ = ["Address", "Uint256", "is_valid_address", "normalize_address"]
