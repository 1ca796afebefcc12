"""Pytest configuration and fixtures."""

import pytest

from curvepool.pools import Pool
from tests.helpers.factories import Engine, make_engine, make_piecewise_pool, make_stable_pool


@pytest.fixture
def engine() -> Engine:
    """Empty engine with a manual clock at START_TIME."""
    return make_engine()


@pytest.fixture
def stable_pool(engine: Engine) -> Pool:
    """Empty DAI/FRAX stable pool with A=100 and no fees."""
    return make_stable_pool(engine)


@pytest.fixture
def piecewise_pool(engine: Engine) -> Pool:
    """Empty DAI/FRAX piecewise pool with K=10^12 and 2x widths."""
    return make_piecewise_pool(engine)
