"""Value Objects for domain model."""
from __future__ import annotations

from enum import Enum


class StoreEventType(str, Enum):
    """Changes emitted by the client-side stores."""

    ITEM_ADDED = "item_added"
    QUANTITY_CHANGED = "quantity_changed"
    ITEM_REMOVED = "item_removed"
    CLEARED = "cleared"
    ITEMS_ORDERED = "items_ordered"

    FAVORITE_ADDED = "favorite_added"
    FAVORITE_REMOVED = "favorite_removed"
    FAVORITES_CLEARED = "favorites_cleared"


class OrderStatus(str, Enum):
    """Order statuses used by the order API."""

    PENDING = "pending"
    PROCESSING = "processing"
    SHIPPED = "shipped"
    DELIVERED = "delivered"
    CANCELLED = "cancelled"


class PaymentMethod(str, Enum):
    """Payment methods accepted at checkout."""

    CREDIT_CARD = "credit-card"
    PAYPAL = "paypal"
    CASH_ON_DELIVERY = "cash-on-delivery"
