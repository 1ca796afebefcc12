"""Reserve, fee and share bookkeeping shared by both curve families.

PoolAccounting executes the public pool operations. Each one reads the
clock once, asks the pool's curve solver for the full outcome, validates
caller bounds, and only then moves balances through the Ledger and writes
the Pool record. A failure at any step before the commit leaves both the
Pool and the Ledger untouched.

The pool's Ledger account always holds reserve + admin fee accrual for each
asset; fees are carved from what a trader or depositor hands over, never
minted.
"""

from __future__ import annotations

from collections.abc import Iterable

import structlog

from curvepool.errors import AlreadyInitialized, InsufficientBalance, Precondition, PrivilegeInsufficient
from curvepool.ledger import Balance, Clock, Ledger, LiquidityAuthority
from curvepool.safe_int import S

from .curves import DepositOutcome, SwapOutcome, solver_for
from .types import Pool

logger = structlog.get_logger()


class PoolAccounting:
    """Executes swaps and liquidity operations against pools.

    Holds the liquidity authorities of every pool it opens; they never leave
    this object.
    """

    def __init__(self, ledger: Ledger, clock: Clock) -> None:
        self._ledger = ledger
        self._clock = clock
        self._authorities: dict[str, LiquidityAuthority] = {}

    def open_pool(self, pool: Pool, authority: LiquidityAuthority) -> None:
        """Take custody of a new pool's share authority.

        Raises:
            AlreadyInitialized: If the share asset already has an authority here
            PrivilegeInsufficient: If the authority is for another asset
        """
        if pool.lp_asset in self._authorities:
            raise AlreadyInitialized(f"Pool {pool.pool_id} already opened")
        if authority.asset != pool.lp_asset:
            raise PrivilegeInsufficient(f"Authority for {authority.asset} cannot serve {pool.lp_asset}")
        self._authorities[pool.lp_asset] = authority

    # =========================================================================
    # Quotes (no state change)
    # =========================================================================

    def quote_swap(self, pool: Pool, asset_in: str, amount_in: int) -> SwapOutcome:
        """Outcome of swapping `amount_in` of `asset_in`, without executing it."""
        return self._compute_swap(pool, asset_in, amount_in, self._clock.now())

    def quote_add_liquidity(self, pool: Pool, amount_x: int, amount_y: int) -> DepositOutcome:
        """Outcome of depositing, without executing it."""
        return self._compute_deposit(pool, amount_x, amount_y, self._clock.now())

    def quote_remove_liquidity(self, pool: Pool, burn_shares: int) -> tuple[int, int]:
        """Raw amounts paid for burning `burn_shares`, without executing it."""
        return self._compute_withdrawal(pool, burn_shares)

    def virtual_price(self, pool: Pool) -> int:
        """Value of one share in normalized invariant units, scaled by 10^18."""
        return solver_for(pool).compute_virtual_price(pool, self._clock.now())

    # =========================================================================
    # Operations
    # =========================================================================

    def add_liquidity(
        self,
        pool: Pool,
        account: str,
        amount_x: int,
        amount_y: int,
        min_shares: int = 0,
    ) -> tuple[int, int, int]:
        """Deposit into a pool.

        Args:
            pool: Target pool
            account: Depositor's ledger account
            amount_x: Raw X offered
            amount_y: Raw Y offered
            min_shares: Fewest shares the depositor accepts

        Returns:
            (refund_x, refund_y, shares_minted). Refunds are the offered
            amounts the pool did not take; when no shares would be minted
            nothing is taken and the whole offer is refunded.

        Raises:
            Precondition: If the pool is disabled or fewer than min_shares mint
            AddLiquidityInvalid: If the first deposit is one-sided
            InvalidDerivation: If the deposit does not grow the invariant
            InsufficientBalance: If the depositor cannot pay
        """
        now = self._clock.now()
        outcome = self._compute_deposit(pool, amount_x, amount_y, now)

        if outcome.shares == 0:
            logger.debug("add_liquidity_noop", pool=pool.pool_id, amount_x=amount_x, amount_y=amount_y)
            return amount_x, amount_y, 0
        if outcome.shares < min_shares:
            logger.warning(
                "add_liquidity_rejected",
                pool=pool.pool_id,
                shares=outcome.shares,
                min_shares=min_shares,
            )
            raise Precondition(f"Deposit mints {outcome.shares} shares, below minimum {min_shares}")

        authority = self._authority(pool)
        self._collect(account, pool.account, ((pool.asset_x, outcome.taken_x), (pool.asset_y, outcome.taken_y)))
        minted = authority.mint(outcome.shares)
        self._ledger.deposit(account, pool.lp_asset, minted)

        pool.reserve_x = (S(pool.reserve_x) + S(outcome.taken_x) - S(outcome.admin_fee_x)).value
        pool.reserve_y = (S(pool.reserve_y) + S(outcome.taken_y) - S(outcome.admin_fee_y)).value
        pool.fee_x = (S(pool.fee_x) + S(outcome.admin_fee_x)).value
        pool.fee_y = (S(pool.fee_y) + S(outcome.admin_fee_y)).value
        pool.total_shares = (S(pool.total_shares) + S(outcome.shares)).value

        refund_x = amount_x - outcome.taken_x
        refund_y = amount_y - outcome.taken_y
        logger.info(
            "liquidity_added",
            pool=pool.pool_id,
            account=account,
            taken_x=outcome.taken_x,
            taken_y=outcome.taken_y,
            refund_x=refund_x,
            refund_y=refund_y,
            shares=outcome.shares,
        )
        return refund_x, refund_y, outcome.shares

    def remove_liquidity(
        self,
        pool: Pool,
        account: str,
        burn_shares: int,
        min_x: int = 0,
        min_y: int = 0,
    ) -> tuple[int, int]:
        """Burn shares for a pro-rata share of both reserves.

        Withdrawals stay open on disabled pools.

        Returns:
            (amount_x, amount_y) paid to `account`

        Raises:
            Precondition: If burn_shares is zero or above supply, or an amount
                is not strictly greater than its minimum
            InsufficientBalance: If `account` does not hold the shares
        """
        if burn_shares == 0:
            raise Precondition("Must burn a positive number of shares")
        amount_x, amount_y = self._compute_withdrawal(pool, burn_shares)
        if amount_x <= min_x or amount_y <= min_y:
            logger.warning(
                "remove_liquidity_rejected",
                pool=pool.pool_id,
                amount_x=amount_x,
                amount_y=amount_y,
                min_x=min_x,
                min_y=min_y,
            )
            raise Precondition(
                f"Withdrawal ({amount_x}, {amount_y}) does not exceed minimum ({min_x}, {min_y})"
            )

        authority = self._authority(pool)
        shares = self._ledger.withdraw(account, pool.lp_asset, burn_shares)
        authority.burn(shares)
        pool.total_shares = (S(pool.total_shares) - S(burn_shares)).value

        pool.reserve_x = (S(pool.reserve_x) - S(amount_x)).value
        pool.reserve_y = (S(pool.reserve_y) - S(amount_y)).value
        self._pay(pool.account, account, ((pool.asset_x, amount_x), (pool.asset_y, amount_y)))

        logger.info(
            "liquidity_removed",
            pool=pool.pool_id,
            account=account,
            burned=burn_shares,
            amount_x=amount_x,
            amount_y=amount_y,
        )
        return amount_x, amount_y

    def swap(self, pool: Pool, account: str, asset_in: str, amount_in: int, min_out: int = 0) -> int:
        """Exact-input swap.

        Returns:
            Raw amount of the other asset paid to `account`

        Raises:
            InvalidTokenPair: If asset_in is not in the pool
            InsufficientLiquidity: If a reserve is empty
            Precondition: If the pool is disabled, the input is zero, the
                output rounds to zero, or the output is below min_out
            InsufficientBalance: If `account` cannot pay
        """
        now = self._clock.now()
        outcome = self._compute_swap(pool, asset_in, amount_in, now)
        if outcome.amount_out == 0:
            raise Precondition(f"Swap of {amount_in} {asset_in} rounds to zero output")
        if outcome.amount_out < min_out:
            logger.warning(
                "swap_rejected",
                pool=pool.pool_id,
                amount_out=outcome.amount_out,
                min_out=min_out,
            )
            raise Precondition(f"Swap output {outcome.amount_out} below minimum {min_out}")

        asset_out = pool.other_asset(asset_in)
        self._collect(account, pool.account, ((asset_in, amount_in),))
        self._pay(pool.account, account, ((asset_out, outcome.amount_out),))

        extracted = S(outcome.amount_out) + S(outcome.admin_fee)
        if pool.is_x(asset_in):
            pool.reserve_x = (S(pool.reserve_x) + S(amount_in)).value
            pool.reserve_y = (S(pool.reserve_y) - extracted).value
            pool.fee_y = (S(pool.fee_y) + S(outcome.admin_fee)).value
        else:
            pool.reserve_y = (S(pool.reserve_y) + S(amount_in)).value
            pool.reserve_x = (S(pool.reserve_x) - extracted).value
            pool.fee_x = (S(pool.fee_x) + S(outcome.admin_fee)).value

        logger.info(
            "swap_executed",
            pool=pool.pool_id,
            account=account,
            asset_in=asset_in,
            amount_in=amount_in,
            amount_out=outcome.amount_out,
            fee=outcome.fee,
            admin_fee=outcome.admin_fee,
        )
        return outcome.amount_out

    def withdraw_admin_fees(self, pool: Pool, admin: str) -> tuple[int, int]:
        """Pay the accrued admin fees to the pool admin.

        Raises:
            PrivilegeInsufficient: If `admin` is not the pool admin
        """
        if admin != pool.admin:
            raise PrivilegeInsufficient(f"{admin} is not the admin of {pool.pool_id}")
        fee_x, fee_y = pool.fee_x, pool.fee_y
        self._pay(pool.account, admin, ((pool.asset_x, fee_x), (pool.asset_y, fee_y)))
        pool.fee_x = 0
        pool.fee_y = 0
        logger.info("admin_fees_withdrawn", pool=pool.pool_id, fee_x=fee_x, fee_y=fee_y)
        return fee_x, fee_y

    # =========================================================================
    # Internals
    # =========================================================================

    def _compute_swap(self, pool: Pool, asset_in: str, amount_in: int, now: int) -> SwapOutcome:
        x_to_y = pool.is_x(asset_in)
        if pool.disabled:
            raise Precondition(f"Pool {pool.pool_id} is disabled")
        if amount_in == 0:
            raise Precondition("Swap input must be positive")
        outcome = solver_for(pool).compute_swap_out(pool, x_to_y, amount_in, now)
        logger.debug(
            "swap_computed",
            pool=pool.pool_id,
            asset_in=asset_in,
            amount_in=amount_in,
            amount_out=outcome.amount_out,
        )
        return outcome

    def _compute_deposit(self, pool: Pool, amount_x: int, amount_y: int, now: int) -> DepositOutcome:
        if pool.disabled:
            raise Precondition(f"Pool {pool.pool_id} is disabled")
        return solver_for(pool).compute_add_liquidity(pool, amount_x, amount_y, now)

    def _compute_withdrawal(self, pool: Pool, burn_shares: int) -> tuple[int, int]:
        if burn_shares > pool.total_shares:
            raise Precondition(f"Cannot burn {burn_shares} of {pool.total_shares} shares")
        return solver_for(pool).compute_remove_liquidity(pool, burn_shares)

    def _authority(self, pool: Pool) -> LiquidityAuthority:
        authority = self._authorities.get(pool.lp_asset)
        if authority is None:
            raise PrivilegeInsufficient(f"Pool {pool.pool_id} was not opened by this accounting")
        return authority

    def _collect(self, source: str, target: str, amounts: Iterable[tuple[str, int]]) -> None:
        """Move every amount from source to target, or none of them."""
        taken: list[Balance] = []
        try:
            for asset, amount in amounts:
                if amount > 0:
                    taken.append(self._ledger.withdraw(source, asset, amount))
        except InsufficientBalance:
            for balance in taken:
                self._ledger.deposit(source, balance.asset, balance)
            raise
        for balance in taken:
            self._ledger.deposit(target, balance.asset, balance)

    def _pay(self, source: str, target: str, amounts: Iterable[tuple[str, int]]) -> None:
        self._collect(source, target, amounts)
