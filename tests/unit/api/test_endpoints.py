"""Unit tests for the pool API."""

import inspect

import pytest
from fastapi.testclient import TestClient

from curvepool.api.endpoints import get_registry, router
from curvepool.api.main import app
from tests.helpers import FRAX, ONE, USDC, USDT, make_engine, make_piecewise_pool, make_stable_pool, seed_pool


@pytest.fixture
def engine():
    """Engine with a seeded DAI/FRAX stable pool and an empty USDC/USDT piecewise pool."""
    engine = make_engine()
    stable = make_stable_pool(engine, fee=400, admin_fee=500_000)
    seed_pool(engine, stable, ONE, ONE)
    make_piecewise_pool(engine, USDC, USDT)
    return engine


@pytest.fixture
def client(engine):
    """Test client serving the engine's registry."""
    app.dependency_overrides[get_registry] = lambda: engine.registry
    yield TestClient(app)
    app.dependency_overrides.clear()


STABLE_ID = "stable:dai:frax"
PIECEWISE_ID = "piecewise:usdc:usdt"


class TestHealth:
    def test_health(self, client):
        response = client.get("/health")
        assert response.status_code == 200
        assert response.json() == {"status": "ok"}


class TestPools:
    """Tests for pool listing and lookup."""

    def test_list(self, client):
        response = client.get("/pools")
        assert response.status_code == 200
        pools = response.json()
        assert [(p["asset_x"], p["asset_y"], p["curve_kind"]) for p in pools] == [
            ("dai", "frax", "stable"),
            ("usdc", "usdt", "piecewise"),
        ]

    def test_get(self, client):
        response = client.get(f"/pools/{STABLE_ID}")
        assert response.status_code == 200
        data = response.json()
        assert data["reserve_x"] == str(ONE)
        assert data["reserve_y"] == str(ONE)
        assert data["total_shares"] == str(2 * ONE)
        assert data["lp_asset"] == f"lp:{STABLE_ID}"
        assert data["curve"]["fee"] == 400

    def test_unknown_pool(self, client):
        response = client.get("/pools/stable:dai:usdc")
        assert response.status_code == 404
        assert "Unknown pool" in response.json()["detail"]


class TestVirtualPrice:
    """Tests for GET /pools/{pool_id}/virtual_price."""

    def test_balanced_stable_pool(self, client):
        response = client.get(f"/pools/{STABLE_ID}/virtual_price")
        assert response.status_code == 200
        assert response.json() == {"virtual_price": str(10**18)}

    def test_empty_pool(self, client):
        response = client.get(f"/pools/{PIECEWISE_ID}/virtual_price")
        assert response.status_code == 200
        assert response.json() == {"virtual_price": "0"}

    def test_unknown_pool(self, client):
        assert client.get("/pools/stable:dai:usdc/virtual_price").status_code == 404


class TestRouteHandlers:
    def test_handlers_are_synchronous(self):
        """Solver work must run in the threadpool, not on the event loop."""
        handlers = [route.endpoint for route in router.routes]
        assert handlers
        assert not any(inspect.iscoroutinefunction(handler) for handler in handlers)


class TestSwapQuote:
    """Tests for POST /pools/{pool_id}/quote/swap."""

    def test_quote_matches_accounting(self, client, engine):
        """The endpoint reports exactly what the accounting layer would do."""
        pool = engine.registry.by_id(STABLE_ID)
        expected = engine.accounting.quote_swap(pool, FRAX, ONE // 10)

        response = client.post(f"/pools/{STABLE_ID}/quote/swap", json={"asset_in": FRAX, "amount_in": str(ONE // 10)})

        assert response.status_code == 200
        assert response.json() == {
            "amount_out": str(expected.amount_out),
            "fee": str(expected.fee),
            "admin_fee": str(expected.admin_fee),
        }

    def test_quote_does_not_change_state(self, client, engine):
        pool = engine.registry.by_id(STABLE_ID)
        client.post(f"/pools/{STABLE_ID}/quote/swap", json={"asset_in": FRAX, "amount_in": str(ONE)})
        assert pool.reserve_x == pool.reserve_y == ONE
        assert pool.fee_x == pool.fee_y == 0

    def test_integer_amount_accepted(self, client):
        response = client.post(f"/pools/{STABLE_ID}/quote/swap", json={"asset_in": "dai", "amount_in": 10**6})
        assert response.status_code == 200

    def test_asset_not_in_pool(self, client):
        response = client.post(f"/pools/{STABLE_ID}/quote/swap", json={"asset_in": USDC, "amount_in": "1000"})
        assert response.status_code == 400
        assert response.json()["error"] == "InvalidTokenPair"

    def test_empty_pool(self, client):
        response = client.post(f"/pools/{PIECEWISE_ID}/quote/swap", json={"asset_in": USDC, "amount_in": "1000"})
        assert response.status_code == 400
        assert response.json()["error"] == "InsufficientLiquidity"

    def test_disabled_pool(self, client, engine):
        engine.registry.by_id(STABLE_ID).disabled = True
        response = client.post(f"/pools/{STABLE_ID}/quote/swap", json={"asset_in": FRAX, "amount_in": "1000"})
        assert response.status_code == 400
        assert response.json()["error"] == "Precondition"

    @pytest.mark.parametrize("amount", ["-1", "1e18", "abc"])
    def test_invalid_amount(self, client, amount):
        response = client.post(f"/pools/{STABLE_ID}/quote/swap", json={"asset_in": FRAX, "amount_in": amount})
        assert response.status_code == 422

    def test_arithmetic_overflow(self, client):
        """Amounts too large for the invariant math are rejected as 422."""
        response = client.post(f"/pools/{STABLE_ID}/quote/swap", json={"asset_in": FRAX, "amount_in": str(2**255)})
        assert response.status_code == 422
        assert response.json()["error"] == "Overflow"

    def test_unknown_pool(self, client):
        response = client.post("/pools/nope/quote/swap", json={"asset_in": FRAX, "amount_in": "1"})
        assert response.status_code == 404


class TestLiquidityQuotes:
    """Tests for the add and remove liquidity quotes."""

    def test_add_balanced(self, client):
        """A balanced deposit into a balanced stable pool mints in proportion to D."""
        response = client.post(
            f"/pools/{STABLE_ID}/quote/add_liquidity",
            json={"amount_x": str(ONE), "amount_y": str(ONE)},
        )
        assert response.status_code == 200
        assert response.json() == {
            "taken_x": str(ONE),
            "taken_y": str(ONE),
            "refund_x": "0",
            "refund_y": "0",
            "shares": str(2 * ONE),
        }

    def test_add_one_sided_bootstrap(self, client):
        response = client.post(
            f"/pools/{PIECEWISE_ID}/quote/add_liquidity",
            json={"amount_x": "1000000", "amount_y": "0"},
        )
        assert response.status_code == 400
        assert response.json()["error"] == "AddLiquidityInvalid"

    def test_remove(self, client):
        response = client.post(f"/pools/{STABLE_ID}/quote/remove_liquidity", json={"burn_shares": str(ONE)})
        assert response.status_code == 200
        assert response.json() == {"amount_x": str(ONE // 2), "amount_y": str(ONE // 2)}

    def test_remove_more_than_supply(self, client):
        response = client.post(f"/pools/{STABLE_ID}/quote/remove_liquidity", json={"burn_shares": str(3 * ONE)})
        assert response.status_code == 400
        assert response.json()["error"] == "Precondition"
