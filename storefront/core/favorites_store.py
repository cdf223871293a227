"""Favorites store: a persisted set of products, deduplicated by id."""
from __future__ import annotations

from dataclasses import replace
from typing import Any

from logging_config import logger
from storefront.core.constants import FAVORITES_STORAGE_KEY
from storefront.core.persisted_store import PersistedStore, StoreEvent
from storefront.core.utils import get_product_id, normalize_product_id
from storefront.domain.entities import FavoriteItem
from storefront.domain.value_objects import StoreEventType
from storefront.integrations.storage import KeyValueStorage


class FavoritesStore(PersistedStore):
    def __init__(self, storage: KeyValueStorage, key: str = FAVORITES_STORAGE_KEY) -> None:
        super().__init__(storage, key)
        self._items: list[FavoriteItem] = []

    def _items_payload(self) -> list[dict[str, Any]]:
        return [item.to_dict() for item in self._items]

    def _has_items(self) -> bool:
        return bool(self._items)

    def _restore_items(self, items: list[dict[str, Any]]) -> None:
        restored: list[FavoriteItem] = []
        for raw in items:
            try:
                item = FavoriteItem.from_dict(raw)
            except (TypeError, ValueError, AttributeError) as exc:
                logger.warning("Skipping unreadable favorite %r: %s", raw, exc)
                continue
            if any(existing.product_id == item.product_id for existing in restored):
                continue
            restored.append(item)
        self._items = restored

    def _find(self, product_id: Any) -> FavoriteItem | None:
        product_id = normalize_product_id(product_id)
        for item in self._items:
            if item.product_id == product_id:
                return item
        return None

    @property
    def items(self) -> list[FavoriteItem]:
        return [replace(item) for item in self._items]

    @property
    def count(self) -> int:
        return len(self._items)

    def ids(self) -> list[Any]:
        return [item.product_id for item in self._items]

    def contains(self, product_id: Any) -> bool:
        return self._find(product_id) is not None

    def add(self, product: Any) -> bool:
        """Add a product; returns False when it is already a favorite."""
        product_id = get_product_id(product)
        if self._find(product_id) is not None:
            return False
        item = FavoriteItem.from_product(product)
        self._items.append(item)
        logger.info("Added product %s to favorites", product_id)
        self._commit(
            StoreEvent(type=StoreEventType.FAVORITE_ADDED, product_id=product_id, name=item.name)
        )
        return True

    def remove(self, product_id: Any) -> bool:
        item = self._find(product_id)
        if item is None:
            return False
        self._items.remove(item)
        logger.info("Removed product %s from favorites", product_id)
        self._commit(
            StoreEvent(type=StoreEventType.FAVORITE_REMOVED, product_id=item.product_id, name=item.name)
        )
        return True

    def toggle(self, product: Any) -> bool:
        """Flip favorite state; returns True when the product is now a favorite."""
        product_id = get_product_id(product)
        if self.contains(product_id):
            self.remove(product_id)
            return False
        self.add(product)
        return True

    def clear(self) -> None:
        self._items = []
        self._commit(StoreEvent(type=StoreEventType.FAVORITES_CLEARED))
