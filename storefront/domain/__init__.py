"""Domain package."""

from .entities import CartLine, FavoriteItem, OrderDraft, OrderDraftItem, Product
from .value_objects import OrderStatus, PaymentMethod, StoreEventType

__all__ = [
    # Entities
    "Product",
    "CartLine",
    "FavoriteItem",
    "OrderDraft",
    "OrderDraftItem",
    # Value Objects
    "StoreEventType",
    "OrderStatus",
    "PaymentMethod",
]
