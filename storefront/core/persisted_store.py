"""Base class for client-side stores persisted to key-value storage.

A store owns its in-memory state; after every successful mutation it
serializes that state to storage and then notifies subscribers. Neither a
failed write nor a failing subscriber propagates to the caller.
"""
from __future__ import annotations

import json
import time
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any

from logging_config import logger
from storefront.domain.value_objects import StoreEventType
from storefront.integrations.storage import KeyValueStorage


@dataclass(frozen=True)
class StoreEvent:
    """Change notification delivered to store subscribers."""

    type: StoreEventType
    product_id: Any = None
    quantity: int | None = None
    name: str = ""
    data: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return {
            "type": self.type.value,
            "product_id": self.product_id,
            "quantity": self.quantity,
            "name": self.name,
            "data": self.data,
        }


StoreListener = Callable[[StoreEvent], None]


class PersistedStore:
    """Observer list plus fire-and-forget persistence under a fixed key."""

    def __init__(self, storage: KeyValueStorage, key: str) -> None:
        self._storage = storage
        self._key = key
        self._listeners: list[StoreListener] = []

    @property
    def key(self) -> str:
        return self._key

    # ----- serialization hooks -----

    def _items_payload(self) -> list[dict[str, Any]]:
        raise NotImplementedError

    def _restore_items(self, items: list[dict[str, Any]]) -> None:
        raise NotImplementedError

    def _has_items(self) -> bool:
        raise NotImplementedError

    # ----- persistence -----

    def _persist(self) -> bool:
        """Write current state; empty state deletes the key."""
        try:
            if not self._has_items():
                self._storage.delete(self._key)
                return True
            payload = {"items": self._items_payload(), "updated_at": int(time.time())}
            self._storage.save(self._key, json.dumps(payload, ensure_ascii=False))
            return True
        except Exception as exc:
            logger.error("Failed to persist %s: %s", self._key, exc)
            return False

    def load(self) -> None:
        """Rehydrate from storage; a corrupt payload is discarded."""
        try:
            raw = self._storage.load(self._key)
        except Exception as exc:
            logger.error("Failed to load %s: %s", self._key, exc)
            self._restore_items([])
            return

        if not raw:
            self._restore_items([])
            return

        try:
            payload = json.loads(raw)
            items = payload.get("items") if isinstance(payload, dict) else None
            if not isinstance(items, list):
                raise ValueError("payload has no items list")
            self._restore_items(items)
        except (ValueError, TypeError, AttributeError) as exc:
            logger.warning("Discarding corrupt %s payload: %s", self._key, exc)
            self._restore_items([])
            try:
                self._storage.delete(self._key)
            except Exception as delete_exc:
                logger.error("Failed to delete corrupt %s: %s", self._key, delete_exc)

    # ----- observers -----

    def subscribe(self, listener: StoreListener) -> Callable[[], None]:
        """Register a listener; returns a callable that unregisters it."""
        self._listeners.append(listener)

        def _unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return _unsubscribe

    @property
    def subscriber_count(self) -> int:
        return len(self._listeners)

    def _emit(self, event: StoreEvent) -> None:
        for listener in list(self._listeners):
            try:
                listener(event)
            except Exception as exc:
                logger.error("Listener error on %s (%s): %s", self._key, event.type.value, exc)

    def _commit(self, event: StoreEvent) -> None:
        self._persist()
        self._emit(event)

    def close(self) -> None:
        """Drop all subscribers at session teardown."""
        self._listeners.clear()
