"""Tests for amplification ramps and pool administration."""

import pytest

from curvepool.constants import A_PRECISION, MAX_A, MIN_RAMP_TIME
from curvepool.errors import AValueViolation, Precondition, PrivilegeInsufficient, RampTimeViolation
from curvepool.pools import RampState
from tests.helpers import ADMIN, ALICE, DAY, FRAX, ONE, seed_pool


class TestRampAmplification:
    """Tests for ramp_amplification."""

    def test_ramp_interpolates(self, engine, stable_pool):
        """A moves linearly from the current value to the target."""
        start = engine.clock.now()
        engine.ramp.ramp_amplification(stable_pool, ADMIN, 200, start + DAY)

        assert engine.ramp.state(stable_pool) is RampState.RAMP_IN_PROGRESS
        assert stable_pool.curve.amplification(start) == 100 * A_PRECISION
        assert stable_pool.curve.amplification(start + DAY // 2) == 150 * A_PRECISION
        assert stable_pool.curve.amplification(start + DAY) == 200 * A_PRECISION

        engine.clock.advance(DAY)
        assert engine.ramp.state(stable_pool) is RampState.STABLE

    def test_new_pool_is_stable(self, engine, stable_pool):
        assert engine.ramp.state(stable_pool) is RampState.STABLE

    def test_second_ramp_within_cooldown_fails(self, engine, stable_pool):
        """Two ramps less than MIN_RAMP_TIME apart are rejected."""
        start = engine.clock.now()
        engine.ramp.ramp_amplification(stable_pool, ADMIN, 200, start + DAY)

        engine.clock.advance(MIN_RAMP_TIME - 1)
        with pytest.raises(RampTimeViolation):
            engine.ramp.ramp_amplification(stable_pool, ADMIN, 300, engine.clock.now() + DAY)

    def test_second_ramp_after_cooldown(self, engine, stable_pool):
        start = engine.clock.now()
        engine.ramp.ramp_amplification(stable_pool, ADMIN, 200, start + DAY)

        engine.clock.advance(MIN_RAMP_TIME)
        engine.ramp.ramp_amplification(stable_pool, ADMIN, 400, engine.clock.now() + DAY)
        assert stable_pool.curve.initial_a == 200 * A_PRECISION
        assert stable_pool.curve.future_a == 400 * A_PRECISION

    def test_ramp_from_interpolated_value(self, engine, stable_pool):
        """A new ramp starts from wherever the previous one has reached."""
        start = engine.clock.now()
        engine.ramp.ramp_amplification(stable_pool, ADMIN, 200, start + 2 * DAY)

        engine.clock.advance(DAY)
        engine.ramp.ramp_amplification(stable_pool, ADMIN, 100, engine.clock.now() + DAY)
        assert stable_pool.curve.initial_a == 150 * A_PRECISION

    def test_ramp_too_short(self, engine, stable_pool):
        with pytest.raises(RampTimeViolation):
            engine.ramp.ramp_amplification(stable_pool, ADMIN, 200, engine.clock.now() + MIN_RAMP_TIME - 1)

    @pytest.mark.parametrize("new_a", [1_001, 9])
    def test_change_above_ten_x(self, engine, stable_pool, new_a):
        """A may move at most 10x in either direction."""
        with pytest.raises(AValueViolation):
            engine.ramp.ramp_amplification(stable_pool, ADMIN, new_a, engine.clock.now() + DAY)

    @pytest.mark.parametrize("new_a", [1_000, 10])
    def test_change_of_exactly_ten_x(self, engine, stable_pool, new_a):
        engine.ramp.ramp_amplification(stable_pool, ADMIN, new_a, engine.clock.now() + DAY)
        assert stable_pool.curve.future_a == new_a * A_PRECISION

    @pytest.mark.parametrize("new_a", [0, MAX_A])
    def test_out_of_range(self, engine, stable_pool, new_a):
        with pytest.raises(AValueViolation):
            engine.ramp.ramp_amplification(stable_pool, ADMIN, new_a, engine.clock.now() + DAY)

    def test_only_admin(self, engine, stable_pool):
        with pytest.raises(PrivilegeInsufficient):
            engine.ramp.ramp_amplification(stable_pool, ALICE, 200, engine.clock.now() + DAY)

    def test_piecewise_pool_has_no_ramp(self, engine, piecewise_pool):
        with pytest.raises(Precondition):
            engine.ramp.ramp_amplification(piecewise_pool, ADMIN, 200, engine.clock.now() + DAY)
        with pytest.raises(Precondition):
            engine.ramp.state(piecewise_pool)

    def test_higher_a_tightens_swaps(self, engine, stable_pool):
        """Ramping A up brings the abundant asset closer to par."""
        seed_pool(engine, stable_pool, ONE, 3 * ONE)
        before = engine.accounting.quote_swap(stable_pool, FRAX, ONE // 10).amount_out

        engine.ramp.ramp_amplification(stable_pool, ADMIN, 1_000, engine.clock.now() + DAY)
        engine.clock.advance(DAY)
        after = engine.accounting.quote_swap(stable_pool, FRAX, ONE // 10).amount_out

        assert after > before


class TestStopRamp:
    """Tests for stop_ramp."""

    def test_freezes_current_value(self, engine, stable_pool):
        start = engine.clock.now()
        engine.ramp.ramp_amplification(stable_pool, ADMIN, 200, start + DAY)
        engine.clock.advance(DAY // 2)

        engine.ramp.stop_ramp(stable_pool, ADMIN)

        curve = stable_pool.curve
        assert curve.initial_a == curve.future_a == 150 * A_PRECISION
        assert curve.initial_a_time == curve.future_a_time == start + DAY // 2
        assert engine.ramp.state(stable_pool) is RampState.STABLE
        engine.clock.advance(DAY)
        assert curve.amplification(engine.clock.now()) == 150 * A_PRECISION

    def test_only_admin(self, engine, stable_pool):
        with pytest.raises(PrivilegeInsufficient):
            engine.ramp.stop_ramp(stable_pool, ALICE)


class TestSetDisabled:
    """Tests for set_disabled."""

    def test_toggle(self, engine, piecewise_pool):
        engine.ramp.set_disabled(piecewise_pool, ADMIN, True)
        assert piecewise_pool.disabled
        engine.ramp.set_disabled(piecewise_pool, ADMIN, False)
        assert not piecewise_pool.disabled

    def test_only_admin(self, engine, stable_pool):
        with pytest.raises(PrivilegeInsufficient):
            engine.ramp.set_disabled(stable_pool, ALICE, True)
        assert not stable_pool.disabled
