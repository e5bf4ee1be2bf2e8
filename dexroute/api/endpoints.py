"""API endpoints for quoting and swapping."""

import structlog
from fastapi import APIRouter, Depends

from dexroute.api.schemas import (
    QuoteRequest,
    QuoteResponse,
    SwapRequest,
    SwapResponse,
    TokenInfo,
    TokenListResponse,
)
from dexroute.errors import InsufficientLiquidity
from dexroute.service import SwapService, get_default_service

logger = structlog.get_logger()

router = APIRouter()


def get_service() -> SwapService:
    """Dependency provider for the swap service.

    Override this in tests to inject a service over an in-memory chain:
        app.dependency_overrides[get_service] = lambda: service

    Returns:
        The service used to quote and execute swaps.
    """
    return get_default_service()


@router.get("/tokens", response_model_exclude_none=True)
async def list_tokens(service: SwapService = Depends(get_service)) -> TokenListResponse:
    """Known assets and the hub set used for routing."""
    return TokenListResponse(
        tokens=[TokenInfo.from_asset(asset) for asset in service.list_assets()],
        hubs=[hub.symbol for hub in service.hubs],
    )


@router.post("/quote")
async def quote(
    request: QuoteRequest,
    service: SwapService = Depends(get_service),
) -> QuoteResponse:
    """Best route for a trade plus every candidate that priced.

    "No route" is a normal response with found=false, not an error.

    Error Handling:
        - Unknown token, identical tokens, zero amount, max_hops < 1: 400
        - Chain unreachable after retries: 503
    """
    logger.info(
        "received_quote_request",
        token_in=request.token_in,
        token_out=request.token_out,
        amount_in=request.amount_in,
        max_hops=request.max_hops,
    )
    result = await service.request_quote(
        request.token_in,
        request.token_out,
        int(request.amount_in),
        max_hops=request.max_hops,
    )
    return QuoteResponse.from_result(result)


@router.post("/swap", response_model_exclude_none=True)
async def swap(
    request: SwapRequest,
    service: SwapService = Depends(get_service),
) -> SwapResponse:
    """Execute a swap from the service's account.

    The route is re-priced against fresh reserves: along `path` when
    given, otherwise the best route is searched again.

    Error Handling:
        - Slippage exceeded, expired deadline, balance or allowance problems: 409
        - Signature rejected or invalid input: 400
        - Chain unreachable after retries: 503
    """
    amount_in = int(request.amount_in)
    logger.info(
        "received_swap_request",
        token_in=request.token_in,
        token_out=request.token_out,
        amount_in=amount_in,
        min_amount_out=request.min_amount_out,
        slippage_bps=request.slippage_bps,
    )

    if request.path:
        route = await service.quote_route(request.path, amount_in)
    else:
        result = await service.request_quote(
            request.token_in, request.token_out, amount_in, max_hops=request.max_hops
        )
        if result.best_route is None:
            raise InsufficientLiquidity("No route with enough liquidity for this trade")
        route = result.best_route

    handle = await service.confirm_swap(
        route,
        amount_in,
        int(request.min_amount_out),
        slippage_bps=request.slippage_bps,
        recipient=request.recipient,
        deadline_seconds=request.deadline_seconds,
    )
    return SwapResponse.from_handle(handle)
