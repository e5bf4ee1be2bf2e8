"""Request and response bodies for the HTTP API.

Amounts cross the wire as base-unit decimal strings; field names are
camelCase on the wire and snake_case in Python.
"""

from __future__ import annotations

from pydantic import BaseModel, Field

from dexroute.execution.executor import TxHandle
from dexroute.models.assets import Asset
from dexroute.models.route import Route, RouteResult
from dexroute.models.types import Address, Uint256


class TokenInfo(BaseModel):
    address: Address
    symbol: str
    decimals: int
    is_native: bool = Field(default=False, alias="isNative")

    model_config = {"populate_by_name": True}

    @classmethod
    def from_asset(cls, asset: Asset) -> TokenInfo:
        return cls(
            address=asset.address,
            symbol=asset.symbol,
            decimals=asset.decimals,
            is_native=asset.is_native,
        )


class TokenListResponse(BaseModel):
    tokens: list[TokenInfo]
    hubs: list[str] = Field(description="Hub symbols used for multi-hop routes, in order")


class RouteModel(BaseModel):
    """A priced route as returned to clients."""

    path: list[TokenInfo]
    pairs: list[Address]
    amounts: list[Uint256]
    amount_in: Uint256 = Field(alias="amountIn")
    amount_out: Uint256 = Field(alias="amountOut")
    price_impact: str = Field(
        alias="priceImpact",
        description="Sum of per-hop price impacts, percent with two decimals",
    )
    severity: str = Field(description="none, moderate or high")
    hops: int

    model_config = {"populate_by_name": True}

    @classmethod
    def from_route(cls, route: Route) -> RouteModel:
        return cls(
            path=[TokenInfo.from_asset(asset) for asset in route.path],
            pairs=list(route.pairs),
            amounts=[str(a) for a in route.amounts],
            amount_in=str(route.amount_in),
            amount_out=str(route.amount_out),
            price_impact=f"{route.price_impact:.2f}",
            severity=route.severity.value,
            hops=route.hop_count,
        )


class QuoteRequest(BaseModel):
    token_in: str = Field(alias="tokenIn", description="Symbol or address")
    token_out: str = Field(alias="tokenOut", description="Symbol or address")
    amount_in: Uint256 = Field(alias="amountIn")
    max_hops: int | None = Field(default=None, alias="maxHops")

    model_config = {"populate_by_name": True}


class QuoteResponse(BaseModel):
    found: bool
    best_route: RouteModel | None = Field(default=None, alias="bestRoute")
    all_routes: list[RouteModel] = Field(default_factory=list, alias="allRoutes")

    model_config = {"populate_by_name": True}

    @classmethod
    def from_result(cls, result: RouteResult) -> QuoteResponse:
        return cls(
            found=result.found,
            best_route=RouteModel.from_route(result.best_route) if result.best_route else None,
            all_routes=[RouteModel.from_route(route) for route in result.all_routes],
        )


class SwapRequest(BaseModel):
    """Execute a swap along `path` (or the best route when omitted)."""

    token_in: str = Field(alias="tokenIn")
    token_out: str = Field(alias="tokenOut")
    amount_in: Uint256 = Field(alias="amountIn")
    min_amount_out: Uint256 = Field(
        alias="minAmountOut",
        description="Expected output before slippage, usually the quoted amountOut",
    )
    slippage_bps: int | None = Field(default=None, alias="slippageBps")
    recipient: Address | None = None
    deadline_seconds: int | None = Field(default=None, alias="deadlineSeconds", gt=0)
    path: list[str] | None = Field(default=None, description="Symbols or addresses, in order")
    max_hops: int | None = Field(default=None, alias="maxHops")

    model_config = {"populate_by_name": True}


class SwapResponse(BaseModel):
    tx_hash: str = Field(alias="txHash")
    approval_tx_hash: str | None = Field(default=None, alias="approvalTxHash")
    min_amount_out: Uint256 = Field(alias="minAmountOut")
    deadline: int
    block_number: int | None = Field(default=None, alias="blockNumber")
    route: RouteModel

    model_config = {"populate_by_name": True}

    @classmethod
    def from_handle(cls, handle: TxHandle) -> SwapResponse:
        return cls(
            tx_hash=handle.tx_hash,
            approval_tx_hash=handle.approval_tx_hash,
            min_amount_out=str(handle.min_amount_out),
            deadline=handle.deadline,
            block_number=handle.block_number,
            route=RouteModel.from_route(handle.route),
        )


class ErrorResponse(BaseModel):
    code: str
    title: str
    message: str
    recoverable: bool


__all__ = [
    "TokenInfo",
    "TokenListResponse",
    "RouteModel",
    "QuoteRequest",
    "QuoteResponse",
    "SwapRequest",
    "SwapResponse",
    "ErrorResponse",
]
