"""Shared asset and account constants for tests.

Usage:
    from tests.helpers import USDC, USDT
    # or
    from tests.helpers.constants import USDC, USDT
"""

# =============================================================================
# Assets
# =============================================================================

USDC = "usdc"  # 6 decimals
USDT = "usdt"  # 6 decimals
DAI = "dai"  # 18 decimals
FRAX = "frax"  # 18 decimals

ASSET_DECIMALS = {
    USDC: 6,
    USDT: 6,
    DAI: 18,
    FRAX: 18,
}

# =============================================================================
# Accounts
# =============================================================================

ADMIN = "admin"
ALICE = "alice"
BOB = "bob"

# =============================================================================
# Common values
# =============================================================================

ONE = 10**18  # One unit of an 18-decimal asset
START_TIME = 1_700_000_000
DAY = 86_400
