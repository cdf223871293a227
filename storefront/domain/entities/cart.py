"""Cart line and favorite item entities."""
from __future__ import annotations

import time
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any

from storefront.core.order_math import to_decimal
from storefront.core.utils import get_product_id, get_val


def _snapshot_price(value: Any) -> Decimal | None:
    if value is None:
        return None
    return to_decimal(value)


def _stored_quantity(value: Any) -> int:
    """Whole-number quantity from a persisted line."""
    if isinstance(value, bool):
        raise ValueError(f"quantity must be an integer, got {value!r}")
    if isinstance(value, float) and value.is_integer():
        return int(value)
    if not isinstance(value, int):
        raise ValueError(f"quantity must be an integer, got {value!r}")
    return value


@dataclass
class CartLine:
    """Single product line in the cart.

    ``name``, ``price`` and ``image_url`` are a display snapshot taken when
    the product was first added; totals never read ``price``.
    """

    product_id: Any
    quantity: int
    name: str = ""
    price: Decimal | None = None
    image_url: str | None = None
    added_at: float = field(default_factory=time.time)

    @property
    def id(self) -> Any:
        """Line id; a cart holds at most one line per product."""
        return self.product_id

    @classmethod
    def from_product(cls, product: Any, quantity: int) -> CartLine:
        return cls(
            product_id=get_product_id(product),
            quantity=int(quantity),
            name=str(get_val(product, "name", "") or ""),
            price=_snapshot_price(get_val(product, "price")),
            image_url=get_val(product, "image_url", get_val(product, "imageUrl")),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "product_id": self.product_id,
            "quantity": int(self.quantity),
            "name": self.name,
            "price": None if self.price is None else str(self.price),
            "image_url": self.image_url,
            "added_at": float(self.added_at),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> CartLine:
        return cls(
            product_id=data.get("product_id"),
            quantity=_stored_quantity(data.get("quantity", 0)),
            name=str(data.get("name", "") or ""),
            price=_snapshot_price(data.get("price")),
            image_url=data.get("image_url"),
            added_at=float(data.get("added_at", time.time())),
        )


@dataclass
class FavoriteItem:
    """Product reference kept in the favorites list."""

    product_id: Any
    name: str = ""
    price: Decimal | None = None
    image_url: str | None = None
    added_at: float = field(default_factory=time.time)

    @classmethod
    def from_product(cls, product: Any) -> FavoriteItem:
        return cls(
            product_id=get_product_id(product),
            name=str(get_val(product, "name", "") or ""),
            price=_snapshot_price(get_val(product, "price")),
            image_url=get_val(product, "image_url", get_val(product, "imageUrl")),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "product_id": self.product_id,
            "name": self.name,
            "price": None if self.price is None else str(self.price),
            "image_url": self.image_url,
            "added_at": float(self.added_at),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> FavoriteItem:
        return cls(
            product_id=data.get("product_id"),
            name=str(data.get("name", "") or ""),
            price=_snapshot_price(data.get("price")),
            image_url=data.get("image_url"),
            added_at=float(data.get("added_at", time.time())),
        )
