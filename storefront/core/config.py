"""Environment-driven configuration objects for the storefront core."""
from __future__ import annotations

import os
from dataclasses import dataclass, field
from decimal import Decimal, InvalidOperation

from dotenv import load_dotenv

from storefront.core.constants import (
    CART_STORAGE_KEY,
    DEFAULT_API_TIMEOUT_SECONDS,
    FAVORITES_STORAGE_KEY,
    FLAT_SHIPPING_FEE,
    FREE_SHIPPING_THRESHOLD,
    STORAGE_TTL_SECONDS,
    TAX_RATE,
)
from storefront.core.exceptions import ConfigurationException
from storefront.core.order_math import PricingConfig


def _env_decimal(name: str, default: Decimal) -> Decimal:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        value = Decimal(raw.strip())
    except InvalidOperation as exc:
        raise ConfigurationException(f"{name} must be a decimal number, got {raw!r}") from exc
    if value < 0:
        raise ConfigurationException(f"{name} must be non-negative, got {raw!r}")
    return value


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return int(raw.strip())
    except ValueError as exc:
        raise ConfigurationException(f"{name} must be an integer, got {raw!r}") from exc


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return float(raw.strip())
    except ValueError as exc:
        raise ConfigurationException(f"{name} must be a number, got {raw!r}") from exc


@dataclass(slots=True)
class StorageConfig:
    redis_url: str | None
    cart_key: str = CART_STORAGE_KEY
    favorites_key: str = FAVORITES_STORAGE_KEY
    ttl_seconds: int = STORAGE_TTL_SECONDS


@dataclass(slots=True)
class Settings:
    api_url: str | None
    api_timeout: float
    storage: StorageConfig
    pricing: PricingConfig = field(default_factory=PricingConfig)
    log_level: str = "INFO"
    sentry_dsn: str | None = None
    environment: str = "production"

    @property
    def redis_url(self) -> str | None:
        """Shortcut for storage.redis_url."""
        return self.storage.redis_url


def load_settings() -> Settings:
    """Load environment variables once and expose typed settings."""
    load_dotenv()

    pricing = PricingConfig(
        free_shipping_threshold=_env_decimal("FREE_SHIPPING_THRESHOLD", FREE_SHIPPING_THRESHOLD),
        flat_shipping_fee=_env_decimal("FLAT_SHIPPING_FEE", FLAT_SHIPPING_FEE),
        tax_rate=_env_decimal("TAX_RATE", TAX_RATE),
    )
    if pricing.tax_rate >= 1:
        raise ConfigurationException("TAX_RATE is a fraction (0.07 for 7%), not a percentage")

    ttl_seconds = _env_int("STORAGE_TTL_SECONDS", STORAGE_TTL_SECONDS)
    if ttl_seconds <= 0:
        raise ConfigurationException("STORAGE_TTL_SECONDS must be positive")

    storage = StorageConfig(
        redis_url=os.getenv("REDIS_URL") or None,
        cart_key=os.getenv("CART_STORAGE_KEY", CART_STORAGE_KEY) or CART_STORAGE_KEY,
        favorites_key=os.getenv("FAVORITES_STORAGE_KEY", FAVORITES_STORAGE_KEY)
        or FAVORITES_STORAGE_KEY,
        ttl_seconds=ttl_seconds,
    )

    return Settings(
        api_url=os.getenv("STOREFRONT_API_URL") or None,
        api_timeout=_env_float("STOREFRONT_API_TIMEOUT", DEFAULT_API_TIMEOUT_SECONDS),
        storage=storage,
        pricing=pricing,
        log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
        sentry_dsn=os.getenv("SENTRY_DSN") or None,
        environment=os.getenv("ENVIRONMENT", "production"),
    )
