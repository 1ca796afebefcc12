"""Factory functions for creating test objects.

Usage:
    from tests.helpers import make_engine, make_stable_pool
    # or
    from tests.helpers.factories import make_engine, seed_pool

    engine = make_engine()
    pool = make_stable_pool(engine)
    seed_pool(engine, pool, 10**18, 10**18)
"""

from dataclasses import dataclass

from curvepool.ledger import InMemoryLedger, ManualClock
from curvepool.pools import Pool, PoolAccounting, PoolRegistry, RampController
from tests.helpers.constants import ADMIN, ASSET_DECIMALS, DAI, FRAX, START_TIME

# Liquidity provider used by seed_pool
SEED_ACCOUNT = "seed"


@dataclass
class Engine:
    """Everything a test needs to drive pools: collaborators and services."""

    ledger: InMemoryLedger
    clock: ManualClock
    accounting: PoolAccounting
    registry: PoolRegistry
    ramp: RampController


def make_engine(start: int = START_TIME) -> Engine:
    """Create an empty engine on an in-memory ledger and a manual clock.

    Args:
        start: Initial clock time (default: START_TIME, well past the ramp
            cooldown so a first ramp is allowed immediately)
    """
    ledger = InMemoryLedger()
    clock = ManualClock(start)
    accounting = PoolAccounting(ledger, clock)
    return Engine(
        ledger=ledger,
        clock=clock,
        accounting=accounting,
        registry=PoolRegistry(ledger, accounting),
        ramp=RampController(clock),
    )


def make_stable_pool(
    engine: Engine,
    asset_x: str = DAI,
    asset_y: str = FRAX,
    a: int = 100,
    fee: int = 0,
    admin_fee: int = 0,
) -> Pool:
    """Create a stable pool (default: DAI/FRAX, 18 decimals, A=100, no fees)."""
    return engine.registry.create_stable_pool(
        asset_x,
        asset_y,
        decimals_x=ASSET_DECIMALS[asset_x],
        decimals_y=ASSET_DECIMALS[asset_y],
        admin=ADMIN,
        a=a,
        fee=fee,
        admin_fee=admin_fee,
    )


def make_piecewise_pool(
    engine: Engine,
    asset_x: str = DAI,
    asset_y: str = FRAX,
    k: int = 10**12,
    w1: int = 20_000,
    w2: int = 20_000,
    fee: int = 0,
    admin_fee: int = 0,
) -> Pool:
    """Create a piecewise pool (default: shallow band from x0/2 to 2*x0, no fees)."""
    return engine.registry.create_piecewise_pool(
        asset_x,
        asset_y,
        decimals_x=ASSET_DECIMALS[asset_x],
        decimals_y=ASSET_DECIMALS[asset_y],
        admin=ADMIN,
        k=k,
        w1=w1,
        w2=w2,
        fee=fee,
        admin_fee=admin_fee,
    )


def fund(engine: Engine, account: str, **amounts: int) -> None:
    """Credit raw amounts to an account, keyed by asset id."""
    for asset, amount in amounts.items():
        engine.ledger.credit(account, asset, amount)


def seed_pool(engine: Engine, pool: Pool, amount_x: int, amount_y: int, account: str = SEED_ACCOUNT) -> int:
    """Fund `account` and deposit into the pool.

    Returns:
        Shares minted
    """
    engine.ledger.credit(account, pool.asset_x, amount_x)
    engine.ledger.credit(account, pool.asset_y, amount_y)
    _, _, shares = engine.accounting.add_liquidity(pool, account, amount_x, amount_y)
    return shares
