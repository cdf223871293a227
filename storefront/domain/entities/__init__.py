"""Domain entities package."""

from .cart import CartLine, FavoriteItem
from .order import OrderDraft, OrderDraftItem
from .product import Product

__all__ = [
    "Product",
    "CartLine",
    "FavoriteItem",
    "OrderDraft",
    "OrderDraftItem",
]
