"""Engine configuration.

EngineConfig holds every tunable of the routing engine in one frozen
value, so tests can build variations without touching the environment.
load_config() reads it from DEXROUTE_* environment variables.
"""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass, field

from dexroute.chain.retry import RetryPolicy
from dexroute.constants import (
    DEFAULT_HUB_SYMBOLS,
    MAINNET_CHAIN_ID,
    MAX_HOPS_CAP,
    UNISWAP_V2_FACTORY,
    UNISWAP_V2_INIT_CODE_HASH,
    UNISWAP_V2_ROUTER,
    WETH,
)
from dexroute.models.types import is_valid_address, normalize_address

ENV_PREFIX = "DEXROUTE_"

_TRUE_VALUES = ("true", "1", "yes")
_FALSE_VALUES = ("false", "0", "no")


@dataclass(frozen=True)
class EngineConfig:
    """Configuration for quoting and execution.

    Attributes:
        rpc_url: JSON-RPC endpoint; None means no live chain is configured
        chain_id: Chain the addresses below belong to
        factory_address: Pair factory used to locate pools
        router_address: Router contract that executes swaps
        wrapped_native: Wrapped form of the native asset
        init_code_hash: Pair init code hash for CREATE2 address derivation
        hub_symbols: Intermediate assets for multi-hop routes, in order
        max_hops: Default hop bound (at most 3)
        default_slippage_bps: Slippage used when a swap request gives none
        deadline_seconds: Default validity window for swaps
        retry: Retry policy for chain reads
        pool_cache_ttl: Seconds a pool lookup (including "no pool") is reused
        reserves_cache_ttl: Seconds a reserve snapshot is reused (0 = always fresh)
        decimals_cache_ttl: Seconds an on-chain decimals read is reused
        max_concurrent_reads: Candidate paths priced at the same time
        preflight_quote: Re-quote the route before submitting a swap
        infinite_approval: Approve the maximum amount instead of amount_in
        token_list_path: Optional JSON token list replacing the built-in assets
        account: Sender for a node-managed account
        private_key: Key for local signing (takes precedence over account)
    """

    rpc_url: str | None = None
    chain_id: int = MAINNET_CHAIN_ID
    factory_address: str = UNISWAP_V2_FACTORY
    router_address: str = UNISWAP_V2_ROUTER
    wrapped_native: str = WETH
    init_code_hash: str = UNISWAP_V2_INIT_CODE_HASH
    hub_symbols: tuple[str, ...] = DEFAULT_HUB_SYMBOLS
    max_hops: int = MAX_HOPS_CAP
    default_slippage_bps: int = 50
    deadline_seconds: int = 1800
    retry: RetryPolicy = field(default_factory=RetryPolicy)
    pool_cache_ttl: float = 60.0
    reserves_cache_ttl: float = 0.0
    decimals_cache_ttl: float = 300.0
    max_concurrent_reads: int = 8
    preflight_quote: bool = True
    infinite_approval: bool = False
    token_list_path: str | None = None
    account: str | None = None
    private_key: str | None = field(default=None, repr=False)

    def __post_init__(self) -> None:
        for name in ("factory_address", "router_address", "wrapped_native"):
            value = getattr(self, name)
            if not is_valid_address(normalize_address(value)):
                raise ValueError(f"Invalid {name}: {value}")
            object.__setattr__(self, name, normalize_address(value))
        if not 1 <= self.max_hops <= MAX_HOPS_CAP:
            raise ValueError(f"max_hops must be between 1 and {MAX_HOPS_CAP}, got {self.max_hops}")
        if not 0 <= self.default_slippage_bps <= 10_000:
            raise ValueError(f"default_slippage_bps out of range: {self.default_slippage_bps}")
        if self.deadline_seconds <= 0:
            raise ValueError(f"deadline_seconds must be positive, got {self.deadline_seconds}")
        if self.max_concurrent_reads < 1:
            raise ValueError(f"max_concurrent_reads must be >= 1, got {self.max_concurrent_reads}")


@dataclass(frozen=True)
class ApiSettings:
    """Host/port for the HTTP server."""

    host: str = "0.0.0.0"
    port: int = 8000
    debug: bool = False


def _parse_int(environ: Mapping[str, str], name: str, default: int) -> int:
    raw = environ.get(ENV_PREFIX + name)
    if raw is None or raw == "":
        return default
    try:
        return int(raw)
    except ValueError as err:
        raise ValueError(f"{ENV_PREFIX}{name} must be an integer, got {raw!r}") from err


def _parse_float(environ: Mapping[str, str], name: str, default: float) -> float:
    raw = environ.get(ENV_PREFIX + name)
    if raw is None or raw == "":
        return default
    try:
        return float(raw)
    except ValueError as err:
        raise ValueError(f"{ENV_PREFIX}{name} must be a number, got {raw!r}") from err


def _parse_bool(environ: Mapping[str, str], name: str, default: bool) -> bool:
    raw = environ.get(ENV_PREFIX + name)
    if raw is None or raw == "":
        return default
    if raw.lower() in _TRUE_VALUES:
        return True
    if raw.lower() in _FALSE_VALUES:
        return False
    raise ValueError(f"{ENV_PREFIX}{name} must be a boolean, got {raw!r}")


def _parse_address(environ: Mapping[str, str], name: str, default: str) -> str:
    raw = environ.get(ENV_PREFIX + name)
    if raw is None or raw == "":
        return default
    if not is_valid_address(normalize_address(raw)):
        raise ValueError(f"{ENV_PREFIX}{name} is not a valid address: {raw!r}")
    return normalize_address(raw)


def _parse_hash(environ: Mapping[str, str], name: str, default: str) -> str:
    raw = environ.get(ENV_PREFIX + name)
    if raw is None or raw == "":
        return default
    value = raw.lower()
    if not value.startswith("0x"):
        value = "0x" + value
    if len(value) != 66 or any(c not in "0123456789abcdef" for c in value[2:]):
        raise ValueError(f"{ENV_PREFIX}{name} is not a 32-byte hex hash: {raw!r}")
    return value


def load_config(environ: Mapping[str, str] | None = None) -> EngineConfig:
    """Build an EngineConfig from DEXROUTE_* environment variables.

    Unset variables keep the mainnet defaults.

    Raises:
        ValueError: If a variable is set to an invalid value (the message names it)
    """
    env = os.environ if environ is None else environ

    hubs_raw = env.get(ENV_PREFIX + "HUBS")
    hub_symbols = (
        tuple(s.strip() for s in hubs_raw.split(",") if s.strip())
        if hubs_raw
        else DEFAULT_HUB_SYMBOLS
    )

    retry_settings = {
        "max_attempts": _parse_int(env, "RETRY_ATTEMPTS", 3),
        "base_delay": _parse_float(env, "RETRY_BASE_DELAY", 0.5),
        "multiplier": _parse_float(env, "RETRY_MULTIPLIER", 2.0),
        "max_delay": _parse_float(env, "RETRY_MAX_DELAY", 8.0),
    }
    try:
        retry = RetryPolicy(**retry_settings)
    except ValueError as err:
        raise ValueError(f"Invalid {ENV_PREFIX}RETRY_* setting: {err}") from err

    settings = dict(
        rpc_url=env.get(ENV_PREFIX + "RPC_URL") or None,
        chain_id=_parse_int(env, "CHAIN_ID", MAINNET_CHAIN_ID),
        factory_address=_parse_address(env, "FACTORY", UNISWAP_V2_FACTORY),
        router_address=_parse_address(env, "ROUTER", UNISWAP_V2_ROUTER),
        wrapped_native=_parse_address(env, "WRAPPED_NATIVE", WETH),
        init_code_hash=_parse_hash(env, "INIT_CODE_HASH", UNISWAP_V2_INIT_CODE_HASH),
        hub_symbols=hub_symbols,
        max_hops=_parse_int(env, "MAX_HOPS", MAX_HOPS_CAP),
        default_slippage_bps=_parse_int(env, "SLIPPAGE_BPS", 50),
        deadline_seconds=_parse_int(env, "DEADLINE_SECONDS", 1800),
        retry=retry,
        pool_cache_ttl=_parse_float(env, "POOL_CACHE_TTL", 60.0),
        reserves_cache_ttl=_parse_float(env, "RESERVES_CACHE_TTL", 0.0),
        decimals_cache_ttl=_parse_float(env, "DECIMALS_CACHE_TTL", 300.0),
        max_concurrent_reads=_parse_int(env, "MAX_CONCURRENT_READS", 8),
        preflight_quote=_parse_bool(env, "PREFLIGHT_QUOTE", True),
        infinite_approval=_parse_bool(env, "INFINITE_APPROVAL", False),
        token_list_path=env.get(ENV_PREFIX + "TOKEN_LIST") or None,
        account=_parse_address(env, "ACCOUNT", "") or None,
        private_key=env.get(ENV_PREFIX + "PRIVATE_KEY") or None,
    )
    try:
        return EngineConfig(**settings)
    except ValueError as err:
        raise ValueError(f"Invalid {ENV_PREFIX}* setting: {err}") from err


def load_api_settings(environ: Mapping[str, str] | None = None) -> ApiSettings:
    env = os.environ if environ is None else environ
    return ApiSettings(
        host=env.get(ENV_PREFIX + "HOST", "0.0.0.0"),
        port=_parse_int(env, "PORT", 8000),
        debug=_parse_bool(env, "DEBUG", False),
    )


__all__ = ["EngineConfig", "ApiSettings", "load_config", "load_api_settings", "ENV_PREFIX"]
