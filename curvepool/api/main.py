"""FastAPI application exposing pool state and quotes."""

import structlog
import uvicorn
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from curvepool.api.endpoints import router
from curvepool.config import EngineConfig
from curvepool.errors import PoolError, SafeIntError
from curvepool.logging import configure_logging

logger = structlog.get_logger()

# Configuration from CURVEPOOL_* environment variables with sensible defaults
CONFIG = EngineConfig.from_env()

app = FastAPI(
    title="curvepool",
    description="StableSwap and piecewise constant-product pool engine",
    version="0.1.0",
)

app.include_router(router)


@app.exception_handler(PoolError)
async def pool_error_handler(request: Request, exc: PoolError) -> JSONResponse:
    """Rejected pool operations are client errors."""
    logger.warning("pool_error", path=request.url.path, error=type(exc).__name__, detail=str(exc))
    return JSONResponse(status_code=400, content={"error": type(exc).__name__, "detail": str(exc)})


@app.exception_handler(SafeIntError)
async def arithmetic_error_handler(request: Request, exc: SafeIntError) -> JSONResponse:
    """Amounts the integer math cannot represent."""
    logger.warning("arithmetic_error", path=request.url.path, error=type(exc).__name__, detail=str(exc))
    return JSONResponse(status_code=422, content={"error": type(exc).__name__, "detail": str(exc)})


@app.get("/health")
async def health() -> dict[str, object]:
    """Health check endpoint."""
    return {"status": "ok"}


def run() -> None:
    """Run the API server.

    Configuration via environment variables:
    - CURVEPOOL_HOST: Host to bind to (default: 0.0.0.0)
    - CURVEPOOL_PORT: Port to bind to (default: 8000)
    - CURVEPOOL_DEBUG: Enable debug logging and reload mode (default: false)
    - CURVEPOOL_LOG_LEVEL: Log level (default: INFO)
    """
    configure_logging("DEBUG" if CONFIG.debug else CONFIG.log_level)
    uvicorn.run(
        "curvepool.api.main:app",
        host=CONFIG.host,
        port=CONFIG.port,
        reload=CONFIG.debug,
    )


if __name__ == "__main__":
    run()
