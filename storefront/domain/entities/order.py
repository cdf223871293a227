"""Order draft entity model."""
from __future__ import annotations

from decimal import Decimal
from typing import Any

from pydantic import BaseModel, Field

from storefront.core.order_math import round_money
from storefront.domain.value_objects import OrderStatus, PaymentMethod


class OrderDraftItem(BaseModel):
    """Order line with the unit price captured at checkout."""

    product_id: Any = Field(..., description="Catalog product ID")
    quantity: int = Field(..., gt=0, description="Ordered quantity")
    price: Decimal = Field(..., ge=0, description="Unit price at checkout time")


class OrderDraft(BaseModel):
    """Order payload sent to the order API."""

    items: list[OrderDraftItem] = Field(..., min_length=1, description="Ordered lines")
    subtotal: Decimal = Field(..., ge=0)
    shipping: Decimal = Field(..., ge=0)
    tax: Decimal = Field(..., ge=0)
    total: Decimal = Field(..., ge=0)
    shipping_address: str = Field(..., min_length=1, description="Formatted shipping address")
    payment_method: PaymentMethod = Field(PaymentMethod.CREDIT_CARD)
    status: OrderStatus = Field(OrderStatus.PENDING)

    class Config:
        """Pydantic config."""

        use_enum_values = True
        validate_default = True

    @property
    def items_count(self) -> int:
        return sum(item.quantity for item in self.items)

    def to_payload(self) -> dict[str, Any]:
        """JSON body for ``POST /api/orders``; money rounded to cents."""
        return {
            "items": [
                {
                    "productId": item.product_id,
                    "quantity": item.quantity,
                    "price": float(round_money(item.price)),
                }
                for item in self.items
            ],
            "subtotal": float(round_money(self.subtotal)),
            "shipping": float(round_money(self.shipping)),
            "tax": float(round_money(self.tax)),
            "total": float(round_money(self.total)),
            "shippingAddress": self.shipping_address,
            "paymentMethod": self.payment_method,
            "status": self.status,
        }
