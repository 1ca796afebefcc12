"""Amplification ramp administration for stable pools.

A stable pool's A never jumps: changes are scheduled as a linear ramp from
the current value to a future value over at least MIN_RAMP_TIME, ramps are
spaced at least MIN_RAMP_TIME apart, and each ramp may move A by at most a
factor of MAX_A_CHANGE.
"""

from __future__ import annotations

from dataclasses import replace
from enum import Enum

import structlog

from curvepool.constants import A_PRECISION, MAX_A, MAX_A_CHANGE, MIN_RAMP_TIME
from curvepool.errors import AValueViolation, Precondition, PrivilegeInsufficient, RampTimeViolation
from curvepool.ledger import Clock

from .types import Pool, StableCurveParams

logger = structlog.get_logger()


class RampState(Enum):
    """Whether A is currently moving."""

    STABLE = "stable"
    RAMP_IN_PROGRESS = "ramp_in_progress"


class RampController:
    """Privileged controls over a pool: A ramps and the disabled flag."""

    def __init__(self, clock: Clock) -> None:
        self._clock = clock

    def state(self, pool: Pool) -> RampState:
        params = _stable_params(pool)
        if params.is_ramping(self._clock.now()):
            return RampState.RAMP_IN_PROGRESS
        return RampState.STABLE

    def ramp_amplification(self, pool: Pool, admin: str, new_future_a: int, future_time: int) -> None:
        """Start ramping A towards `new_future_a`, reached at `future_time`.

        Args:
            pool: Stable pool to ramp
            admin: Caller identity, must be the pool admin
            new_future_a: Target raw A (not scaled by A_PRECISION)
            future_time: When the target is reached

        Raises:
            PrivilegeInsufficient: If `admin` is not the pool admin
            Precondition: If the pool is not a stable pool
            RampTimeViolation: If the previous ramp started less than
                MIN_RAMP_TIME ago or the new one is shorter than MIN_RAMP_TIME
            AValueViolation: If the target is out of range or more than
                MAX_A_CHANGE times away from the current A
        """
        _check_admin(pool, admin)
        params = _stable_params(pool)
        now = self._clock.now()

        if now < params.initial_a_time + MIN_RAMP_TIME:
            next_allowed = params.initial_a_time + MIN_RAMP_TIME
            raise RampTimeViolation(f"Last ramp started at {params.initial_a_time}; next allowed at {next_allowed}")
        if future_time < now + MIN_RAMP_TIME:
            raise RampTimeViolation(f"Ramp must last at least {MIN_RAMP_TIME}s, ends at {future_time} (now {now})")
        if not 0 < new_future_a < MAX_A:
            raise AValueViolation(f"A must be in (0, {MAX_A}), got {new_future_a}")

        initial_a = params.amplification(now)
        future_a = new_future_a * A_PRECISION
        if future_a < initial_a:
            if future_a * MAX_A_CHANGE < initial_a:
                raise AValueViolation(f"A may drop at most {MAX_A_CHANGE}x: {initial_a} -> {future_a}")
        elif future_a > initial_a * MAX_A_CHANGE:
            raise AValueViolation(f"A may rise at most {MAX_A_CHANGE}x: {initial_a} -> {future_a}")

        pool.curve = replace(
            params,
            initial_a=initial_a,
            future_a=future_a,
            initial_a_time=now,
            future_a_time=future_time,
        )
        logger.info(
            "ramp_started",
            pool=pool.pool_id,
            initial_a=initial_a,
            future_a=future_a,
            start=now,
            end=future_time,
        )

    def stop_ramp(self, pool: Pool, admin: str) -> None:
        """Freeze A at its current interpolated value.

        Raises:
            PrivilegeInsufficient: If `admin` is not the pool admin
            Precondition: If the pool is not a stable pool
        """
        _check_admin(pool, admin)
        params = _stable_params(pool)
        now = self._clock.now()
        current_a = params.amplification(now)

        pool.curve = replace(
            params,
            initial_a=current_a,
            future_a=current_a,
            initial_a_time=now,
            future_a_time=now,
        )
        logger.info("ramp_stopped", pool=pool.pool_id, a=current_a, at=now)

    def set_disabled(self, pool: Pool, admin: str, disabled: bool) -> None:
        """Stop (or resume) swaps and deposits on a pool.

        Raises:
            PrivilegeInsufficient: If `admin` is not the pool admin
        """
        _check_admin(pool, admin)
        pool.disabled = disabled
        logger.info("pool_disabled_changed", pool=pool.pool_id, disabled=disabled)


def _check_admin(pool: Pool, admin: str) -> None:
    if admin != pool.admin:
        logger.warning("admin_check_failed", pool=pool.pool_id, caller=admin)
        raise PrivilegeInsufficient(f"{admin} is not the admin of {pool.pool_id}")


def _stable_params(pool: Pool) -> StableCurveParams:
    if not isinstance(pool.curve, StableCurveParams):
        raise Precondition(f"Pool {pool.pool_id} has no amplification to ramp")
    return pool.curve
