"""Product entity model."""
from __future__ import annotations

from decimal import Decimal
from typing import Any

from pydantic import BaseModel, Field

from storefront.core.order_math import calc_discount_percent


def _api_money(value: Any) -> Any:
    """Pass JSON floats as text so Decimal keeps the printed value."""
    if isinstance(value, float):
        return str(value)
    return value


class Product(BaseModel):
    """Read-only catalog snapshot of a product."""

    id: Any = Field(..., description="Catalog product ID (opaque key)")
    name: str = Field(..., description="Product name")
    price: Decimal = Field(..., ge=0, description="Current price in dollars")
    image_url: str | None = Field(None, description="Product image URL")
    category: str | None = Field(None, description="Category name or slug")
    stock: int = Field(0, ge=0, description="Units in stock")
    rating: float = Field(0.0, ge=0, le=5, description="Average rating")
    description: str | None = Field(None, description="Product description")
    brand: str | None = Field(None, description="Brand name")
    compare_at_price: Decimal | None = Field(
        None, ge=0, description="Original price for markdown display"
    )

    class Config:
        """Pydantic config."""

        from_attributes = True
        frozen = True

    @property
    def in_stock(self) -> bool:
        """Check if product has stock left."""
        return self.stock > 0

    @property
    def discount_percent(self) -> int:
        """Markdown from compare_at_price to price, in whole percent."""
        if self.compare_at_price is None:
            return 0
        return calc_discount_percent(self.compare_at_price, self.price)

    @classmethod
    def from_api(cls, data: dict[str, Any]) -> Product:
        """Parse a catalog API record (camelCase or snake_case keys)."""
        return cls(
            id=data.get("id"),
            name=data.get("name") or data.get("title") or "",
            price=_api_money(data.get("price")),
            image_url=data.get("imageUrl") or data.get("image_url"),
            category=data.get("category"),
            stock=data.get("stock") or 0,
            rating=data.get("rating") or 0.0,
            description=data.get("description"),
            brand=data.get("brand"),
            compare_at_price=_api_money(data.get("compareAtPrice", data.get("compare_at_price"))),
        )
