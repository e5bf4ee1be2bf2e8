"""FastAPI application for quoting and swap execution.

Note: Rate limiting is intentionally not implemented at the application level.
It should be handled at the infrastructure layer (reverse proxy / load balancer).
"""

import structlog
import uvicorn
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from dexroute import __version__
from dexroute.api.endpoints import router
from dexroute.api.schemas import ErrorResponse
from dexroute.config import load_api_settings
from dexroute.errors import (
    DeadlineExpired,
    InsufficientAllowance,
    InsufficientBalance,
    InsufficientInputAmount,
    InsufficientLiquidity,
    InsufficientOutput,
    InvalidPath,
    NoLiquidity,
    NoPool,
    SwapError,
    TransactionReverted,
    TransientNetworkError,
    UnknownAsset,
    UserRejected,
)

logger = structlog.get_logger()

# Maximum request body size (1 MB)
MAX_REQUEST_SIZE = 1024 * 1024

# First matching class wins; SwapError itself falls through to 400
ERROR_STATUS: tuple[tuple[type[SwapError], int], ...] = (
    (TransientNetworkError, 503),
    (InsufficientOutput, 409),
    (DeadlineExpired, 409),
    (InsufficientBalance, 409),
    (InsufficientAllowance, 409),
    (InsufficientLiquidity, 409),
    (NoPool, 409),
    (NoLiquidity, 409),
    (TransactionReverted, 409),
    (UserRejected, 400),
    (InvalidPath, 400),
    (InsufficientInputAmount, 400),
    (UnknownAsset, 400),
)


def status_for(error: SwapError) -> int:
    for error_cls, status in ERROR_STATUS:
        if isinstance(error, error_cls):
            return status
    return 400


app = FastAPI(
    title="dexroute",
    description="Constant-product DEX routing, quoting and swap execution",
    version=__version__,
)


@app.middleware("http")
async def limit_request_size(request: Request, call_next):  # type: ignore[no-untyped-def]
    """Reject requests with body larger than MAX_REQUEST_SIZE."""
    content_length = request.headers.get("content-length")
    if content_length:
        try:
            size = int(content_length)
        except ValueError:
            return JSONResponse(status_code=400, content={"detail": "Invalid Content-Length"})
        if size > MAX_REQUEST_SIZE:
            return JSONResponse(status_code=413, content={"detail": "Request too large"})
    return await call_next(request)


@app.exception_handler(SwapError)
async def swap_error_handler(request: Request, exc: SwapError) -> JSONResponse:
    status = status_for(exc)
    logger.warning(
        "request_failed",
        path=request.url.path,
        code=exc.code,
        status=status,
        cause=str(exc.__cause__) if exc.__cause__ else None,
    )
    return JSONResponse(status_code=status, content=ErrorResponse(**exc.to_dict()).model_dump())


@app.exception_handler(Exception)
async def unexpected_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("unexpected_error", path=request.url.path)
    body = ErrorResponse(
        code="INTERNAL_ERROR",
        title="Unexpected Error",
        message="An unexpected error occurred",
        recoverable=True,
    )
    return JSONResponse(status_code=500, content=body.model_dump())


app.include_router(router)


@app.get("/health")
async def health() -> dict[str, object]:
    """Health check endpoint."""
    return {"status": "ok", "version": __version__}


def run() -> None:
    """Run the API server.

    Configuration via environment variables:
    - DEXROUTE_HOST: Host to bind to (default: 0.0.0.0)
    - DEXROUTE_PORT: Port to bind to (default: 8000)
    - DEXROUTE_DEBUG: Enable debug/reload mode (default: false)
    """
    settings = load_api_settings()
    uvicorn.run(
        "dexroute.api.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.debug,
    )


if __name__ == "__main__":
    run()
