"""dexroute - constant-product DEX routing, quoting and swap execution."""

from dexroute.service import SwapService, get_default_service

__version__ = "0.1.0"
__all__ = ["SwapService", "get_default_service", "__version__"]
