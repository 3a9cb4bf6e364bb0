"""
Centralized configuration with environment variable overrides.

Business rules (payout rates, currency), store backend selection and
API binding are all configurable here. Nothing is hardcoded in the
lifecycle or service logic.
"""

import logging
import os
from dataclasses import dataclass, field

from dotenv import load_dotenv

load_dotenv()

logger = logging.getLogger(__name__)

STORE_BACKENDS = ("memory", "json")


def _safe_int(env_var: str, default: str) -> int:
    """Parse an integer from an env var with a clear error on bad values."""
    raw = os.getenv(env_var, default)
    try:
        return int(raw)
    except (ValueError, TypeError):
        raise ValueError(
            f"Invalid integer for {env_var}: {raw!r}"
        ) from None


def _safe_float(env_var: str, default: str) -> float:
    """Parse a float from an env var with a clear error on bad values."""
    raw = os.getenv(env_var, default)
    try:
        return float(raw)
    except (ValueError, TypeError):
        raise ValueError(
            f"Invalid float for {env_var}: {raw!r}"
        ) from None


def _safe_bool(env_var: str, default: str) -> bool:
    """Parse a boolean flag (1/0, true/false, yes/no, on/off)."""
    raw = os.getenv(env_var, default).strip().lower()
    if raw in ("1", "true", "yes", "on"):
        return True
    if raw in ("0", "false", "no", "off"):
        return False
    raise ValueError(f"Invalid boolean for {env_var}: {raw!r}")


@dataclass(frozen=True)
class BusinessConfig:
    """Business-specific settings loaded from environment or defaults."""

    name: str = os.getenv("BUSINESS_NAME", "Uniq Air Conditioner System")
    service_area: str = os.getenv("SERVICE_AREA", "Noida")
    currency_symbol: str = os.getenv("CURRENCY_SYMBOL", "₹")
    payout_per_visit: float = _safe_float("PAYOUT_PER_VISIT", "300")
    payout_labor_share: float = _safe_float("PAYOUT_LABOR_SHARE", "0.20")


@dataclass(frozen=True)
class StoreConfig:
    """Where and how booking state is kept."""

    backend: str = os.getenv("STORE_BACKEND", "memory")
    data_dir: str = os.getenv("STORE_DATA_DIR", "./data")
    key_prefix: str = os.getenv("STORE_KEY_PREFIX", "uniq")
    key_version: int = _safe_int("STORE_KEY_VERSION", "1")
    seed_technicians: bool = _safe_bool("SEED_TECHNICIANS", "true")


@dataclass(frozen=True)
class ApiConfig:
    """HTTP boundary settings."""

    host: str = os.getenv("API_HOST", "127.0.0.1")
    port: int = _safe_int("API_PORT", "8000")


@dataclass(frozen=True)
class AppConfig:
    """Root configuration aggregating all sub-configs."""

    business: BusinessConfig = field(default_factory=BusinessConfig)
    store: StoreConfig = field(default_factory=StoreConfig)
    api: ApiConfig = field(default_factory=ApiConfig)
    log_level: str = os.getenv("LOG_LEVEL", "INFO")


def _validate_config(config: AppConfig) -> None:
    """Validate configuration values are within acceptable ranges."""
    if config.store.backend not in STORE_BACKENDS:
        raise ValueError(
            f"STORE_BACKEND must be one of {STORE_BACKENDS}, got {config.store.backend!r}"
        )
    if not config.store.key_prefix.strip():
        raise ValueError("STORE_KEY_PREFIX must not be empty")
    if config.store.key_version < 1:
        raise ValueError(
            f"STORE_KEY_VERSION must be >= 1, got {config.store.key_version}"
        )
    if config.business.payout_per_visit < 0:
        raise ValueError(
            f"PAYOUT_PER_VISIT must be >= 0, got {config.business.payout_per_visit}"
        )
    if not 0.0 <= config.business.payout_labor_share <= 1.0:
        raise ValueError(
            "PAYOUT_LABOR_SHARE must be between 0.0 and 1.0, "
            f"got {config.business.payout_labor_share}"
        )
    if not 1 <= config.api.port <= 65535:
        raise ValueError(f"API_PORT must be between 1 and 65535, got {config.api.port}")


def load_config() -> AppConfig:
    """Load and validate application configuration."""
    config = AppConfig()
    _validate_config(config)
    logging.basicConfig(
        level=getattr(logging, config.log_level.upper(), logging.INFO),
        format="%(asctime)s [%(name)s] %(levelname)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    logger.info("Configuration loaded for '%s'", config.business.name)
    return config


# Singleton instance
settings = load_config()
