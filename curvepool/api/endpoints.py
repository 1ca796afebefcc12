"""API endpoints for inspecting pools and quoting operations."""

from functools import lru_cache

import structlog
from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, Field

from curvepool.config import EngineConfig
from curvepool.ledger import InMemoryLedger, SystemClock
from curvepool.models.records import PoolRecord
from curvepool.models.types import AssetId, Uint256
from curvepool.pools import Pool, PoolAccounting, PoolRegistry

logger = structlog.get_logger()

router = APIRouter()


# =============================================================================
# Request / response bodies
# =============================================================================


class SwapQuoteRequest(BaseModel):
    asset_in: AssetId
    amount_in: Uint256


class SwapQuoteResponse(BaseModel):
    amount_out: Uint256
    fee: Uint256 = Field(description="Total fee withheld from the output")
    admin_fee: Uint256 = Field(description="Part of the fee accrued for the admin")


class AddLiquidityQuoteRequest(BaseModel):
    amount_x: Uint256
    amount_y: Uint256


class AddLiquidityQuoteResponse(BaseModel):
    taken_x: Uint256
    taken_y: Uint256
    refund_x: Uint256
    refund_y: Uint256
    shares: Uint256


class RemoveLiquidityQuoteRequest(BaseModel):
    burn_shares: Uint256


class RemoveLiquidityQuoteResponse(BaseModel):
    amount_x: Uint256
    amount_y: Uint256


class VirtualPriceResponse(BaseModel):
    virtual_price: Uint256 = Field(description="Value of one share, scaled by 10^18")


# =============================================================================
# Dependencies
# =============================================================================


@lru_cache(maxsize=1)
def get_default_registry() -> PoolRegistry:
    """Process-wide empty registry on an in-memory ledger and the wall clock."""
    ledger = InMemoryLedger()
    return PoolRegistry(ledger, PoolAccounting(ledger, SystemClock()), EngineConfig.from_env())


def get_registry() -> PoolRegistry:
    """Dependency provider for the pool registry.

    Override this in tests to inject a populated registry:
        app.dependency_overrides[get_registry] = lambda: registry

    Returns:
        The registry to serve pools from.
    """
    return get_default_registry()


def _lookup(registry: PoolRegistry, pool_id: str) -> Pool:
    pool = registry.by_id(pool_id)
    if pool is None:
        raise HTTPException(status_code=404, detail=f"Unknown pool: {pool_id}")
    return pool


# =============================================================================
# Routes
# =============================================================================

# Plain def routes: FastAPI runs them in its threadpool, off the event loop.


@router.get("/pools")
def list_pools(registry: PoolRegistry = Depends(get_registry)) -> list[PoolRecord]:
    """All registered pools."""
    return [pool.to_record() for pool in registry.list()]


@router.get("/pools/{pool_id}")
def get_pool(pool_id: str, registry: PoolRegistry = Depends(get_registry)) -> PoolRecord:
    """One pool's current state."""
    return _lookup(registry, pool_id).to_record()


@router.get("/pools/{pool_id}/virtual_price")
def get_virtual_price(pool_id: str, registry: PoolRegistry = Depends(get_registry)) -> VirtualPriceResponse:
    """Current share value of a pool."""
    pool = _lookup(registry, pool_id)
    return VirtualPriceResponse(virtual_price=str(registry.accounting.virtual_price(pool)))


@router.post("/pools/{pool_id}/quote/swap")
def quote_swap(
    pool_id: str,
    body: SwapQuoteRequest,
    registry: PoolRegistry = Depends(get_registry),
) -> SwapQuoteResponse:
    """Quote an exact-input swap without executing it.

    Error Handling:
        - Unknown pool: 404
        - Pool errors (asset not in pool, empty reserve, disabled): 400
        - Arithmetic errors: 422
    """
    pool = _lookup(registry, pool_id)
    outcome = registry.accounting.quote_swap(pool, body.asset_in, int(body.amount_in))
    logger.debug("swap_quoted", pool=pool_id, asset_in=body.asset_in, amount_out=outcome.amount_out)
    return SwapQuoteResponse(
        amount_out=str(outcome.amount_out),
        fee=str(outcome.fee),
        admin_fee=str(outcome.admin_fee),
    )


@router.post("/pools/{pool_id}/quote/add_liquidity")
def quote_add_liquidity(
    pool_id: str,
    body: AddLiquidityQuoteRequest,
    registry: PoolRegistry = Depends(get_registry),
) -> AddLiquidityQuoteResponse:
    """Quote a deposit without executing it."""
    pool = _lookup(registry, pool_id)
    amount_x, amount_y = int(body.amount_x), int(body.amount_y)
    outcome = registry.accounting.quote_add_liquidity(pool, amount_x, amount_y)
    if outcome.shares == 0:
        taken_x = taken_y = 0
    else:
        taken_x, taken_y = outcome.taken_x, outcome.taken_y
    return AddLiquidityQuoteResponse(
        taken_x=str(taken_x),
        taken_y=str(taken_y),
        refund_x=str(amount_x - taken_x),
        refund_y=str(amount_y - taken_y),
        shares=str(outcome.shares),
    )


@router.post("/pools/{pool_id}/quote/remove_liquidity")
def quote_remove_liquidity(
    pool_id: str,
    body: RemoveLiquidityQuoteRequest,
    registry: PoolRegistry = Depends(get_registry),
) -> RemoveLiquidityQuoteResponse:
    """Quote a withdrawal without executing it."""
    pool = _lookup(registry, pool_id)
    amount_x, amount_y = registry.accounting.quote_remove_liquidity(pool, int(body.burn_shares))
    return RemoveLiquidityQuoteResponse(amount_x=str(amount_x), amount_y=str(amount_y))
