"""curvepool - StableSwap and piecewise constant-product pool engine."""

from curvepool.ledger import InMemoryLedger, ManualClock, SystemClock
from curvepool.pools import PoolAccounting, PoolRegistry, RampController

__version__ = "0.1.0"
__all__ = [
    "InMemoryLedger",
    "ManualClock",
    "PoolAccounting",
    "PoolRegistry",
    "RampController",
    "SystemClock",
    "__version__",
]
