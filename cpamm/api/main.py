"""FastAPI application exposing pool operations.

Note: this surface runs every pool on the in-memory ledger and store. A
deployment against a real ledger injects its own registry through the
``get_registry`` dependency. With AMM_DEBUG set, accounts on the in-memory
ledger can be funded through ``POST /accounts/{account}/credit``.
"""

import os

import structlog
import uvicorn
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from cpamm import __version__
from cpamm.api.endpoints import accounts_router, router
from cpamm.errors import (
    AlreadyInitialized,
    InvariantViolation,
    LiquidityNotSupported,
    PoolError,
    PoolNotFound,
    TransferFailed,
    Unauthorized,
)
from cpamm.log import configure_logging
from cpamm.models import ErrorResponse

logger = structlog.get_logger()

# Configuration from environment variables with sensible defaults
HOST = os.environ.get("AMM_HOST", "0.0.0.0")
PORT = int(os.environ.get("AMM_PORT", "8000"))
DEBUG = os.environ.get("AMM_DEBUG", "false").lower() in ("true", "1", "yes")
LOG_LEVEL = os.environ.get("AMM_LOG_LEVEL", "INFO")

# HTTP status per error class; anything else derived from PoolError is a 400
ERROR_STATUS: dict[type[PoolError], int] = {
    PoolNotFound: 404,
    Unauthorized: 403,
    AlreadyInitialized: 409,
    LiquidityNotSupported: 409,
    TransferFailed: 422,
    InvariantViolation: 500,
}

app = FastAPI(
    title="cpamm",
    description="Constant-product pool with liquidity shares and bonding-curve launches",
    version=__version__,
)


def status_for(error: PoolError) -> int:
    for error_type, status in ERROR_STATUS.items():
        if isinstance(error, error_type):
            return status
    return 400


@app.exception_handler(PoolError)
async def pool_error_handler(request: Request, exc: PoolError) -> JSONResponse:
    """Surface pool errors verbatim as ``{"error": code, "detail": message}``."""
    status = status_for(exc)
    if status >= 500:
        logger.error("pool_error", path=request.url.path, error=exc.code, detail=str(exc))
    return JSONResponse(
        status_code=status,
        content=ErrorResponse(error=exc.code, detail=str(exc)).model_dump(),
    )


app.include_router(router)
app.include_router(accounts_router)


@app.get("/health")
async def health() -> dict[str, object]:
    """Health check endpoint."""
    return {"status": "ok", "version": __version__}


def run() -> None:
    """Run the API server.

    Configuration via environment variables:
    - AMM_HOST: Host to bind to (default: 0.0.0.0)
    - AMM_PORT: Port to bind to (default: 8000)
    - AMM_DEBUG: Enable reload and in-memory account funding (default: false)
    - AMM_LOG_LEVEL: Log level (default: INFO)
    """
    configure_logging(LOG_LEVEL)
    uvicorn.run(
        "cpamm.api.main:app",
        host=HOST,
        port=PORT,
        reload=DEBUG,
    )


if __name__ == "__main__":
    run()
