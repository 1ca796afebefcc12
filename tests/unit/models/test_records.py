"""Tests for pool records and uint256 field validation."""

import pytest
from pydantic import ValidationError

from curvepool.models import PiecewiseCurveRecord, PoolRecord, StableCurveRecord, validate_uint256
from curvepool.pools import CurveKind, Pool
from curvepool.safe_int import UINT256_MAX
from tests.helpers import ADMIN, ALICE, DAI, ONE, fund, make_piecewise_pool, make_stable_pool, seed_pool


class TestValidateUint256:
    """Tests for validate_uint256."""

    @pytest.mark.parametrize("value,expected", [(0, "0"), ("0", "0"), (42, "42"), ("1000", "1000")])
    def test_valid(self, value, expected):
        assert validate_uint256(value) == expected

    def test_max_value(self):
        assert validate_uint256(str(UINT256_MAX)) == str(UINT256_MAX)

    @pytest.mark.parametrize("value", [-1, "-1", "1.5", "abc", "", UINT256_MAX + 1, True, 1.0, None])
    def test_invalid(self, value):
        with pytest.raises(ValueError):
            validate_uint256(value)


class TestPoolRecord:
    """Tests for PoolRecord conversion."""

    def test_stable_round_trip(self, engine):
        pool = make_stable_pool(engine, fee=400, admin_fee=500_000)
        seed_pool(engine, pool, ONE, 2 * ONE)
        fund(engine, ALICE, dai=ONE)
        engine.accounting.swap(pool, ALICE, DAI, ONE // 10)
        assert pool.fee_y > 0

        record = pool.to_record()
        assert record.curve_kind is CurveKind.STABLE
        assert isinstance(record.curve, StableCurveRecord)
        assert record.pool_id == pool.pool_id
        assert Pool.from_record(record) == pool

    def test_piecewise_round_trip(self, engine):
        pool = make_piecewise_pool(engine)
        seed_pool(engine, pool, 3 * ONE, ONE)

        record = pool.to_record()
        assert isinstance(record.curve, PiecewiseCurveRecord)
        assert record.to_pool() == pool

    def test_json_round_trip(self, engine):
        """Amounts travel as decimal strings and parse back exactly."""
        pool = make_stable_pool(engine)
        seed_pool(engine, pool, ONE, ONE)

        payload = pool.to_record().model_dump(mode="json")
        assert payload["reserve_x"] == str(ONE)
        assert payload["total_shares"] == str(2 * ONE)
        assert payload["curve_kind"] == "stable"
        assert payload["curve"]["kind"] == "stable"
        assert payload["curve"]["initial_a"] == "10000"

        restored = PoolRecord.model_validate(payload).to_pool()
        assert restored == pool

    def test_curve_parsed_by_kind(self, engine):
        """The curve union is resolved from its kind tag."""
        payload = make_piecewise_pool(engine).to_record().model_dump(mode="json")
        record = PoolRecord.model_validate(payload)
        assert isinstance(record.curve, PiecewiseCurveRecord)
        assert record.curve.k == str(10**12)

    def test_integer_amounts_accepted(self, engine):
        payload = make_stable_pool(engine).to_record().model_dump(mode="json")
        payload["reserve_x"] = 5
        assert PoolRecord.model_validate(payload).reserve_x == "5"

    @pytest.mark.parametrize("field", ["reserve_x", "total_shares", "multiplier_y"])
    @pytest.mark.parametrize("value", ["-1", str(UINT256_MAX + 1), "12ab"])
    def test_invalid_amount(self, engine, field, value):
        payload = make_stable_pool(engine).to_record().model_dump(mode="json")
        payload[field] = value
        with pytest.raises(ValidationError):
            PoolRecord.model_validate(payload)

    def test_unknown_curve_kind(self, engine):
        payload = make_stable_pool(engine).to_record().model_dump(mode="json")
        payload["curve"]["kind"] = "weighted"
        with pytest.raises(ValidationError):
            PoolRecord.model_validate(payload)

    def test_empty_asset_rejected(self, engine):
        payload = make_stable_pool(engine).to_record().model_dump(mode="json")
        payload["asset_x"] = ""
        with pytest.raises(ValidationError):
            PoolRecord.model_validate(payload)

    def test_kind_mismatch(self, engine):
        """A record whose curve_kind disagrees with its curve cannot become a Pool."""
        payload = make_stable_pool(engine).to_record().model_dump(mode="json")
        payload["curve_kind"] = "piecewise"
        record = PoolRecord.model_validate(payload)
        with pytest.raises(ValueError):
            record.to_pool()

    def test_admin_preserved(self, engine):
        assert make_stable_pool(engine).to_record().admin == ADMIN
