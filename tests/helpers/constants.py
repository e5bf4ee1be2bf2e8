"""Shared token constants for tests.

All addresses are lowercase for consistency with normalize_address().

Usage:
    from tests.helpers import WETH, USDC
    # or
    from tests.helpers.constants import WETH, USDC
"""

# =============================================================================
# Mainnet tokens (registered in the default asset registry)
# =============================================================================

WETH = "0xc02aaa39b223fe8d0a0e5c4f27ead9083c756cc2"  # Wrapped Ether (18 decimals)
USDC = "0xa0b86991c6218b36c1d19d4a2e9eb0ce3606eb48"  # USD Coin (6 decimals)
DAI = "0x6b175474e89094c44da98b954eedeac495271d0f"  # Dai Stablecoin (18 decimals)
USDT = "0xdac17f958d2ee523a2206206994597c13d831ec7"  # Tether USD (6 decimals)
WBTC = "0x2260fac5e5542a773aa44fbcfedf7c193bc2c599"  # Wrapped Bitcoin (8 decimals)

# Mainnet WETH/USDC pair, derived by CREATE2 from the V2 factory
WETH_USDC_PAIR = "0xb4e16d0168e52d35cacd2c6185b44281ec28c9dc"

# =============================================================================
# Unlisted test tokens (not in the default registry)
# =============================================================================

TKA = "0x1111111111111111111111111111111111111111"
TKB = "0x2222222222222222222222222222222222222222"
TKC = "0x3333333333333333333333333333333333333333"

TOKEN_DECIMALS = {
    WETH: 18,
    USDC: 6,
    DAI: 18,
    USDT: 6,
    WBTC: 8,
    TKA: 18,
    TKB: 18,
    TKC: 18,
}

# =============================================================================
# Accounts
# =============================================================================

ALICE = "0x00000000000000000000000000000000000a11ce"  # InMemoryChain default account
BOB = "0x0000000000000000000000000000000000000b0b"

# =============================================================================
# Common amounts
# =============================================================================

ONE_ETH = 10**18
ONE_USDC = 10**6
