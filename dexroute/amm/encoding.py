"""ABI encoding of router and ERC-20 calls.

Only the asset path is sent to the router: each hop's pair is re-derived
on-chain from consecutive path elements.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from eth_abi import encode  # type: ignore[attr-defined]

from dexroute.models.types import is_valid_address
from dexroute.safe_int import S


class SwapMethod(str, Enum):
    """Router02 exact-input entry points."""

    TOKENS_FOR_TOKENS = "swapExactTokensForTokens"
    ETH_FOR_TOKENS = "swapExactETHForTokens"
    TOKENS_FOR_ETH = "swapExactTokensForETH"

    @property
    def selector(self) -> str:
        return _SELECTORS[self]

    @property
    def pays_value(self) -> bool:
        """Whether the input is sent as transaction value instead of transferFrom."""
        return self is SwapMethod.ETH_FOR_TOKENS


_SELECTORS = {
    # swapExactTokensForTokens(uint256,uint256,address[],address,uint256)
    SwapMethod.TOKENS_FOR_TOKENS: "0x38ed1739",
    # swapExactETHForTokens(uint256,address[],address,uint256)
    SwapMethod.ETH_FOR_TOKENS: "0x7ff36ab5",
    # swapExactTokensForETH(uint256,uint256,address[],address,uint256)
    SwapMethod.TOKENS_FOR_ETH: "0x18cbafe5",
}

# approve(address,uint256)
APPROVE_SELECTOR = "0x095ea7b3"


@dataclass(frozen=True)
class SwapCall:
    """A fully parameterized router swap, ready to encode and submit."""

    method: SwapMethod
    amount_in: int
    amount_out_min: int
    path: tuple[str, ...]
    recipient: str
    deadline: int

    @property
    def value(self) -> int:
        """Native value attached to the transaction."""
        return self.amount_in if self.method.pays_value else 0


def _address_bytes(name: str, address: str) -> bytes:
    if not is_valid_address(address):
        raise ValueError(f"Invalid {name} address: {address}")
    return bytes.fromhex(address[2:])


def encode_swap_call(call: SwapCall) -> str:
    """Encode a SwapCall as router calldata.

    Raises:
        ValueError: If any address is invalid
        Uint256Overflow: If an amount or the deadline does not fit in uint256
    """
    path_bytes = [_address_bytes(f"path[{i}]", addr) for i, addr in enumerate(call.path)]
    recipient_bytes = _address_bytes("recipient", call.recipient)

    if call.method.pays_value:
        encoded_args = encode(
            ["uint256", "address[]", "address", "uint256"],
            [
                S(call.amount_out_min).to_uint256(),
                path_bytes,
                recipient_bytes,
                S(call.deadline).to_uint256(),
            ],
        )
    else:
        encoded_args = encode(
            ["uint256", "uint256", "address[]", "address", "uint256"],
            [
                S(call.amount_in).to_uint256(),
                S(call.amount_out_min).to_uint256(),
                path_bytes,
                recipient_bytes,
                S(call.deadline).to_uint256(),
            ],
        )

    return call.method.selector + encoded_args.hex()


def encode_approve(spender: str, amount: int) -> str:
    """Encode ERC-20 approve(spender, amount) calldata."""
    encoded_args = encode(
        ["address", "uint256"], [_address_bytes("spender", spender), S(amount).to_uint256()]
    )
    return APPROVE_SELECTOR + encoded_args.hex()


__all__ = ["SwapMethod", "SwapCall", "encode_swap_call", "encode_approve", "APPROVE_SELECTOR"]
