"""Key-value persistence for client-side stores.

Stores serialize themselves to a string and hand it to a
``KeyValueStorage``. ``RedisStorage`` keeps every key with a TTL and
falls back to process memory when Redis is unreachable.
"""
from __future__ import annotations

import time
from typing import Protocol, runtime_checkable

import redis

from logging_config import logger
from storefront.core.constants import STORAGE_TTL_SECONDS
from storefront.core.exceptions import PersistenceException


@runtime_checkable
class KeyValueStorage(Protocol):
    """Persistence medium contract used by the stores."""

    def save(self, key: str, serialized: str) -> None:
        ...

    def load(self, key: str) -> str | None:
        ...

    def delete(self, key: str) -> None:
        ...


class MemoryStorage:
    """In-process storage with optional per-key expiry and size quota.

    ``max_bytes`` mimics a browser storage quota: a write larger than the
    quota raises ``PersistenceException``.
    """

    def __init__(self, ttl_seconds: int | None = None, max_bytes: int | None = None):
        self._ttl_seconds = ttl_seconds
        self._max_bytes = max_bytes
        self._data: dict[str, str] = {}
        self._last_access: dict[str, float] = {}

    def _cleanup_expired(self) -> None:
        if not self._ttl_seconds:
            return
        now = time.time()
        expired = [
            key
            for key, last_access in self._last_access.items()
            if now - last_access > self._ttl_seconds
        ]
        for key in expired:
            self._data.pop(key, None)
            self._last_access.pop(key, None)
            logger.debug("Expired storage key %s", key)

    def save(self, key: str, serialized: str) -> None:
        if self._max_bytes is not None and len(serialized.encode("utf-8")) > self._max_bytes:
            raise PersistenceException(key, "storage quota exceeded")
        self._data[key] = serialized
        self._last_access[key] = time.time()

    def load(self, key: str) -> str | None:
        self._cleanup_expired()
        value = self._data.get(key)
        if value is not None:
            self._last_access[key] = time.time()
        return value

    def delete(self, key: str) -> None:
        self._data.pop(key, None)
        self._last_access.pop(key, None)

    def keys(self) -> list[str]:
        self._cleanup_expired()
        return list(self._data)


class RedisStorage:
    """Storage persisted in Redis with a TTL refreshed on every write."""

    KEY_PREFIX = "storefront:"

    def __init__(self, redis_url: str | None = None, ttl_seconds: int = STORAGE_TTL_SECONDS):
        self._redis_url = redis_url
        self._ttl_seconds = ttl_seconds
        self._memory = MemoryStorage(ttl_seconds=ttl_seconds)
        self._client = self._init_client()

    @property
    def is_redis(self) -> bool:
        return self._client is not None

    def _init_client(self):
        if not self._redis_url:
            logger.warning("REDIS_URL is not set; storage uses in-memory fallback")
            return None

        try:
            client = redis.from_url(
                self._redis_url,
                decode_responses=True,
                socket_connect_timeout=5,
                socket_timeout=5,
            )
            client.ping()
            logger.info("Redis storage enabled")
            return client
        except Exception as exc:
            logger.warning("Redis storage init failed, fallback to in-memory: %s", exc)
            return None

    def _switch_to_memory_fallback(self, reason: Exception | str) -> None:
        logger.warning("Redis storage fallback to memory mode: %s", reason)
        self._client = None

    def _redis_key(self, key: str) -> str:
        return f"{self.KEY_PREFIX}{key}"

    def save(self, key: str, serialized: str) -> None:
        if self._client:
            try:
                self._client.setex(self._redis_key(key), self._ttl_seconds, serialized)
                return
            except Exception as exc:
                self._switch_to_memory_fallback(exc)
        self._memory.save(key, serialized)

    def load(self, key: str) -> str | None:
        if not self._client:
            return self._memory.load(key)
        try:
            return self._client.get(self._redis_key(key))
        except Exception as exc:
            self._switch_to_memory_fallback(exc)
            return self._memory.load(key)

    def delete(self, key: str) -> None:
        if self._client:
            try:
                self._client.delete(self._redis_key(key))
                return
            except Exception as exc:
                self._switch_to_memory_fallback(exc)
        self._memory.delete(key)


def create_storage(redis_url: str | None, ttl_seconds: int = STORAGE_TTL_SECONDS) -> KeyValueStorage:
    """Redis-backed storage when configured, memory otherwise."""
    if redis_url:
        return RedisStorage(redis_url=redis_url, ttl_seconds=ttl_seconds)
    return MemoryStorage(ttl_seconds=ttl_seconds)
