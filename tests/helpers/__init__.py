"""Test helpers module for shared test utilities.

- constants: Asset ids, accounts and common amounts
- factories: Engine and pool factory functions
"""

from tests.helpers.constants import ADMIN, ALICE, ASSET_DECIMALS, BOB, DAI, DAY, FRAX, ONE, START_TIME, USDC, USDT
from tests.helpers.factories import (
    SEED_ACCOUNT,
    Engine,
    fund,
    make_engine,
    make_piecewise_pool,
    make_stable_pool,
    seed_pool,
)

__all__ = [
    # Constants
    "ADMIN",
    "ALICE",
    "ASSET_DECIMALS",
    "BOB",
    "DAI",
    "DAY",
    "FRAX",
    "ONE",
    "START_TIME",
    "USDC",
    "USDT",
    # Factories
    "SEED_ACCOUNT",
    "Engine",
    "fund",
    "make_engine",
    "make_piecewise_pool",
    "make_stable_pool",
    "seed_pool",
]
