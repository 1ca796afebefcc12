"""In-memory pool registry.

Pools are keyed by (asset_x, asset_y, curve kind): at most one pool of each
curve family per ordered pair. Creating a pool issues its liquidity-share
authority on the ledger and hands it to the accounting layer.
"""

from __future__ import annotations

from collections.abc import Iterator

import structlog

from curvepool.config import DEFAULT_ENGINE_CONFIG, EngineConfig
from curvepool.constants import decimal_multiplier
from curvepool.errors import AlreadyInitialized, InvalidTokenPair
from curvepool.ledger import InMemoryLedger
from curvepool.math.piecewise import derive_piecewise_params

from .accounting import PoolAccounting
from .types import CurveKind, CurveParams, Pool, StableCurveParams, pool_id_for

logger = structlog.get_logger()


class PoolRegistry:
    """Registry of pools sharing one ledger and one accounting service.

    Fees and A left unset at creation fall back to the EngineConfig defaults.
    """

    def __init__(
        self,
        ledger: InMemoryLedger,
        accounting: PoolAccounting,
        config: EngineConfig = DEFAULT_ENGINE_CONFIG,
    ) -> None:
        self._ledger = ledger
        self._accounting = accounting
        self._config = config
        self._pools: dict[tuple[str, str, CurveKind], Pool] = {}
        # Secondary index: pool_id -> key
        self._ids: dict[str, tuple[str, str, CurveKind]] = {}

    @property
    def config(self) -> EngineConfig:
        return self._config

    @property
    def accounting(self) -> PoolAccounting:
        return self._accounting

    def __len__(self) -> int:
        return len(self._pools)

    def __iter__(self) -> Iterator[Pool]:
        return iter(self._pools.values())

    def create_stable_pool(
        self,
        asset_x: str,
        asset_y: str,
        *,
        decimals_x: int,
        decimals_y: int,
        admin: str,
        a: int | None = None,
        fee: int | None = None,
        admin_fee: int | None = None,
    ) -> Pool:
        """Create a StableSwap pool with constant raw A.

        Raises:
            InvalidTokenPair: If the assets are empty or identical
            AlreadyInitialized: If a stable pool for the pair exists
            AValueViolation: If A is out of range
            Precondition: If a fee is out of range
        """
        config = self._config
        params = StableCurveParams.create(
            config.default_a if a is None else a,
            config.default_fee if fee is None else fee,
            config.default_admin_fee if admin_fee is None else admin_fee,
        )
        return self._create(asset_x, asset_y, decimals_x, decimals_y, admin, params)

    def create_piecewise_pool(
        self,
        asset_x: str,
        asset_y: str,
        *,
        decimals_x: int,
        decimals_y: int,
        admin: str,
        k: int,
        w1: int,
        w2: int,
        fee: int | None = None,
        admin_fee: int | None = None,
    ) -> Pool:
        """Create a piecewise constant-product pool.

        Raises:
            InvalidTokenPair: If the assets are empty or identical
            AlreadyInitialized: If a piecewise pool for the pair exists
            Precondition: If the curve constants or fees are invalid
        """
        params = derive_piecewise_params(
            k,
            w1,
            w2,
            fee=self._config.default_fee if fee is None else fee,
            admin_fee=self._config.default_admin_fee if admin_fee is None else admin_fee,
        )
        return self._create(asset_x, asset_y, decimals_x, decimals_y, admin, params)

    def register(self, pool: Pool) -> None:
        """Add an existing pool, e.g. one restored from a record.

        The pool's share asset must not have an authority yet.

        Raises:
            InvalidTokenPair: If the assets are empty or identical
            AlreadyInitialized: If the key is taken or the share asset
                already has an authority
        """
        _check_pair(pool.asset_x, pool.asset_y)
        if pool.key in self._pools:
            raise AlreadyInitialized(f"Pool {pool.pool_id} already exists")

        authority = self._ledger.issue_authority(pool.lp_asset)
        self._accounting.open_pool(pool, authority)
        self._pools[pool.key] = pool
        self._ids[pool.pool_id] = pool.key
        logger.info(
            "pool_registered",
            pool=pool.pool_id,
            kind=pool.kind.value,
            asset_x=pool.asset_x,
            asset_y=pool.asset_y,
        )

    def get(self, asset_x: str, asset_y: str, kind: CurveKind) -> Pool | None:
        return self._pools.get((asset_x, asset_y, kind))

    def by_id(self, pool_id: str) -> Pool | None:
        key = self._ids.get(pool_id)
        if key is None:
            return None
        return self._pools[key]

    def list(self) -> list[Pool]:
        return list(self._pools.values())

    def _create(
        self,
        asset_x: str,
        asset_y: str,
        decimals_x: int,
        decimals_y: int,
        admin: str,
        params: CurveParams,
    ) -> Pool:
        _check_pair(asset_x, asset_y)
        kind = CurveKind.STABLE if isinstance(params, StableCurveParams) else CurveKind.PIECEWISE
        pool_id = pool_id_for(asset_x, asset_y, kind)
        pool = Pool(
            asset_x=asset_x,
            asset_y=asset_y,
            curve=params,
            multiplier_x=decimal_multiplier(decimals_x),
            multiplier_y=decimal_multiplier(decimals_y),
            lp_asset=f"lp:{pool_id}",
            account=f"pool:{pool_id}",
            admin=admin,
        )
        self.register(pool)
        return pool


def _check_pair(asset_x: str, asset_y: str) -> None:
    if not asset_x or not asset_y:
        raise InvalidTokenPair("Asset ids must be non-empty")
    if asset_x == asset_y:
        raise InvalidTokenPair(f"Pool needs two distinct assets, got {asset_x} twice")
