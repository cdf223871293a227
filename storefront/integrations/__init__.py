"""Integrations package - persistence medium and storefront API client."""

from storefront.integrations.storage import (
    KeyValueStorage,
    MemoryStorage,
    RedisStorage,
    create_storage,
)
from storefront.integrations.storefront_api import StorefrontApiClient

__all__ = [
    "KeyValueStorage",
    "MemoryStorage",
    "RedisStorage",
    "create_storage",
    "StorefrontApiClient",
]
