"""Toast notifications derived from store change events.

The stores only emit ``StoreEvent``s. ``ToastNotifier`` subscribes to them,
turns the interesting ones into ``Toast`` messages and hands each toast to
a display sink; the UI layer decides how (and whether) to show it.
"""
from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any

from logging_config import logger
from storefront.core.persisted_store import PersistedStore, StoreEvent
from storefront.domain.value_objects import StoreEventType


class ToastVariant(str, Enum):
    DEFAULT = "default"
    DESTRUCTIVE = "destructive"


@dataclass
class Toast:
    """Toast payload."""

    title: str
    description: str
    variant: ToastVariant = ToastVariant.DEFAULT
    event: StoreEventType | None = None
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "title": self.title,
            "description": self.description,
            "variant": self.variant.value,
            "event": self.event.value if self.event else None,
            "created_at": self.created_at.isoformat(),
        }


ToastSink = Callable[[Toast], None]


def toast_for_event(event: StoreEvent) -> Toast | None:
    """Map a store event to a toast; events without a message return None."""
    name = event.name or "Item"
    if event.type == StoreEventType.ITEM_ADDED:
        return Toast("Added to cart", f"{name} has been added to your cart.", event=event.type)
    if event.type == StoreEventType.ITEM_REMOVED:
        return Toast("Removed from cart", f"{name} has been removed from your cart.", event=event.type)
    if event.type == StoreEventType.FAVORITE_ADDED:
        return Toast(
            "Added to favorites", f"{name} has been added to your favorites.", event=event.type
        )
    if event.type == StoreEventType.FAVORITE_REMOVED:
        return Toast(
            "Removed from favorites",
            f"{name} has been removed from your favorites.",
            event=event.type,
        )
    return None


def error_toast(description: str) -> Toast:
    return Toast("Error", description, variant=ToastVariant.DESTRUCTIVE)


class ToastNotifier:
    """Subscribes to stores and forwards their toasts to a sink."""

    def __init__(self, sink: ToastSink) -> None:
        self._sink = sink
        self._unsubscribers: list[Callable[[], None]] = []

    def attach(self, store: PersistedStore) -> None:
        self._unsubscribers.append(store.subscribe(self.handle))

    def handle(self, event: StoreEvent) -> None:
        toast = toast_for_event(event)
        if toast is None:
            return
        self.notify(toast)

    def notify(self, toast: Toast) -> None:
        try:
            self._sink(toast)
        except Exception as e:
            logger.error(f"Toast sink error: {e}")

    def detach_all(self) -> None:
        for unsubscribe in self._unsubscribers:
            unsubscribe()
        self._unsubscribers.clear()
