"""Protocol constants for the constant-product router.

Centralizes well-known addresses and protocol parameters.
"""

from dexroute.models.types import is_valid_address

# Zero address doubles as the native-asset marker in token lists
ZERO_ADDRESS = "0x0000000000000000000000000000000000000000"
NATIVE_MARKER = ZERO_ADDRESS

# 0.3% fee taken from the input side: amount_in * 997 / 1000
FEE_NUMERATOR = 997
FEE_DENOMINATOR = 1000

# Price impact is carried in basis points before the final division by 100
BPS_DENOMINATOR = 10_000

UINT256_MAX = 2**256 - 1

# Hop bound used by the path search regardless of what the caller asks for
MAX_HOPS_CAP = 3


def _validate_address(name: str, address: str) -> str:
    """Validate and return a contract or token address.

    Raises:
        ValueError: If the address is invalid
    """
    if not is_valid_address(address):
        raise ValueError(f"Invalid {name} address: {address} (must be 0x + 40 hex chars)")
    return address


# UniswapV2 deployment on Ethereum mainnet (lowercase for consistency)
UNISWAP_V2_FACTORY = _validate_address("factory", "0x5c69bee701ef814a2b6a3edd4b1652cb9cc5aa6f")
UNISWAP_V2_ROUTER = _validate_address("router", "0x7a250d5630b4cf539739df2c5dacb4c659f2488d")
UNISWAP_V2_INIT_CODE_HASH = "0x96e8ac4277198ff8b6f785478aa9a39f403cb768dd02cbee326c3e7da348845f"
MAINNET_CHAIN_ID = 1

# Well-known token addresses on mainnet
WETH = _validate_address("WETH", "0xc02aaa39b223fe8d0a0e5c4f27ead9083c756cc2")
USDC = _validate_address("USDC", "0xa0b86991c6218b36c1d19d4a2e9eb0ce3606eb48")
USDT = _validate_address("USDT", "0xdac17f958d2ee523a2206206994597c13d831ec7")
DAI = _validate_address("DAI", "0x6b175474e89094c44da98b954eedeac495271d0f")
WBTC = _validate_address("WBTC", "0x2260fac5e5542a773aa44fbcfedf7c193bc2c599")

# Intermediate assets tried by the multi-hop search, in enumeration order
DEFAULT_HUB_SYMBOLS = ("WETH", "USDC", "USDT", "DAI")

# Price impact thresholds (percent) for user-facing risk levels
MODERATE_PRICE_IMPACT = 2
HIGH_PRICE_IMPACT = 5

# Slippage above this many basis points is flagged as a front-running risk
HIGH_SLIPPAGE_BPS = 500

# Gas limits used when estimation fails
DEFAULT_GAS_LIMITS = {
    "approve": 100_000,
    "swapExactTokensForTokens": 250_000,
    "swapExactETHForTokens": 250_000,
    "swapExactTokensForETH": 250_000,
}
# Estimated gas is padded by this percentage
GAS_BUFFER_PERCENT = 130
