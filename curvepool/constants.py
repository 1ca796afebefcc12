"""Protocol constants for curvepool.

Centralizes fee, amplification and precision parameters shared by the
solvers and the accounting layer.
"""

# Fees are expressed in parts per FEE_DENOMINATOR (1_000_000 = 100%)
FEE_DENOMINATOR = 10**6
MAX_FEE = FEE_DENOMINATOR // 2
MAX_ADMIN_FEE = FEE_DENOMINATOR

# Amplification values are stored multiplied by A_PRECISION
A_PRECISION = 100
MAX_A = 10**6
MAX_A_CHANGE = 10
MIN_RAMP_TIME = 86400

# Newton-Raphson iteration cap (convergence usually takes < 10 rounds)
MAX_ITERATIONS = 255

# Number of assets in a pool
N_COINS = 2

# Normalized balances share this many decimals
PRECISION_DECIMALS = 18
PRECISION = 10**PRECISION_DECIMALS

# Piecewise curve width ratios are scaled by WIDTH_PRECISION (10_000 = 1.0x)
WIDTH_PRECISION = 10**4


def decimal_multiplier(decimals: int) -> int:
    """Multiplier that lifts an asset with `decimals` to PRECISION_DECIMALS.

    Raises:
        ValueError: If decimals is negative or above PRECISION_DECIMALS
    """
    if decimals < 0 or decimals > PRECISION_DECIMALS:
        raise ValueError(f"Asset decimals must be in [0, {PRECISION_DECIMALS}], got {decimals}")
    return 10 ** (PRECISION_DECIMALS - decimals)
