"""Engine configuration."""

import os
from collections.abc import Mapping
from dataclasses import dataclass

_TRUE_VALUES = ("true", "1", "yes")


@dataclass(frozen=True)
class EngineConfig:
    """Defaults for new pools and settings for the HTTP surface.

    Attributes:
        default_fee: Swap fee for new pools, parts per FEE_DENOMINATOR
            (default: 400, i.e. 0.04%)
        default_admin_fee: Admin share of the fee, parts per FEE_DENOMINATOR
            (default: 500,000, i.e. half)
        default_a: Raw amplification for new stable pools (default: 100)
        host: API bind host
        port: API bind port
        debug: Enables uvicorn reload and debug logging
        log_level: Log level name for configure_logging
    """

    # Pool defaults
    default_fee: int = 400
    default_admin_fee: int = 500_000
    default_a: int = 100

    # HTTP surface
    host: str = "0.0.0.0"
    port: int = 8000
    debug: bool = False
    log_level: str = "INFO"

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> "EngineConfig":
        """Build a config from CURVEPOOL_* environment variables.

        Unset variables keep their defaults:
        - CURVEPOOL_DEFAULT_FEE, CURVEPOOL_DEFAULT_ADMIN_FEE, CURVEPOOL_DEFAULT_A
        - CURVEPOOL_HOST, CURVEPOOL_PORT, CURVEPOOL_DEBUG, CURVEPOOL_LOG_LEVEL

        Raises:
            ValueError: If a numeric variable is not an integer
        """
        env = os.environ if environ is None else environ
        defaults = cls()
        return cls(
            default_fee=int(env.get("CURVEPOOL_DEFAULT_FEE", defaults.default_fee)),
            default_admin_fee=int(env.get("CURVEPOOL_DEFAULT_ADMIN_FEE", defaults.default_admin_fee)),
            default_a=int(env.get("CURVEPOOL_DEFAULT_A", defaults.default_a)),
            host=env.get("CURVEPOOL_HOST", defaults.host),
            port=int(env.get("CURVEPOOL_PORT", defaults.port)),
            debug=env.get("CURVEPOOL_DEBUG", "false").lower() in _TRUE_VALUES,
            log_level=env.get("CURVEPOOL_LOG_LEVEL", defaults.log_level).upper(),
        )


# Default configuration instance
DEFAULT_ENGINE_CONFIG = EngineConfig()
