"""Checkout summary and order draft built from the cart."""
from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any

from pydantic import ValidationError

from storefront.core.cart_store import CartStore, PriceLookup, resolve_price
from storefront.core.constants import DEFAULT_PAYMENT_METHOD
from storefront.core.exceptions import CheckoutException
from storefront.core.order_math import (
    ZERO,
    OrderTotals,
    PricingConfig,
    calc_order_totals,
    format_currency,
)
from storefront.domain.entities import OrderDraft, OrderDraftItem


@dataclass(frozen=True)
class CheckoutLine:
    product_id: Any
    name: str
    quantity: int
    unit_price: Decimal | None
    image_url: str | None = None

    @property
    def missing(self) -> bool:
        """Catalog no longer returns this product."""
        return self.unit_price is None

    @property
    def line_total(self) -> Decimal:
        if self.unit_price is None:
            return ZERO
        return self.unit_price * self.quantity


@dataclass(frozen=True)
class CheckoutSummary:
    lines: list[CheckoutLine]
    totals: OrderTotals
    missing_product_ids: list[Any] = field(default_factory=list)

    @property
    def count(self) -> int:
        return sum(line.quantity for line in self.lines)

    @property
    def is_empty(self) -> bool:
        return not self.lines

    def to_dict(self) -> dict[str, Any]:
        """Display-ready summary; money is formatted only here."""
        return {
            "lines": [
                {
                    "product_id": line.product_id,
                    "name": line.name,
                    "quantity": line.quantity,
                    "image_url": line.image_url,
                    "unit_price": None if line.missing else format_currency(line.unit_price),
                    "line_total": format_currency(line.line_total),
                    "missing": line.missing,
                }
                for line in self.lines
            ],
            "count": self.count,
            "subtotal": format_currency(self.totals.subtotal),
            "shipping": format_currency(self.totals.shipping),
            "tax": format_currency(self.totals.tax),
            "total": format_currency(self.totals.total),
            "free_shipping": self.totals.free_shipping,
            "missing_product_ids": list(self.missing_product_ids),
        }


def build_checkout_summary(
    cart: CartStore,
    price_lookup: PriceLookup,
    pricing: PricingConfig | None = None,
) -> CheckoutSummary:
    """Join cart lines with live catalog prices and compute totals."""
    lines: list[CheckoutLine] = []
    for cart_line in cart.lines:
        lines.append(
            CheckoutLine(
                product_id=cart_line.product_id,
                name=cart_line.name,
                quantity=cart_line.quantity,
                unit_price=resolve_price(price_lookup, cart_line.product_id),
                image_url=cart_line.image_url,
            )
        )

    pricing_result = cart.price_cart(price_lookup)
    return CheckoutSummary(
        lines=lines,
        totals=calc_order_totals(pricing_result.subtotal, pricing),
        missing_product_ids=pricing_result.missing_product_ids,
    )


def build_order_draft(
    summary: CheckoutSummary,
    shipping_address: str,
    payment_method: str = DEFAULT_PAYMENT_METHOD,
) -> OrderDraft:
    """Order payload with unit prices captured at checkout time."""
    if summary.is_empty:
        raise CheckoutException("Your cart is empty. Add products before checkout.")
    if summary.missing_product_ids:
        raise CheckoutException(
            f"Products no longer available: {', '.join(map(str, summary.missing_product_ids))}"
        )
    if not shipping_address or not shipping_address.strip():
        raise CheckoutException("Shipping address is required")

    try:
        return OrderDraft(
            items=[
                OrderDraftItem(
                    product_id=line.product_id, quantity=line.quantity, price=line.unit_price
                )
                for line in summary.lines
            ],
            subtotal=summary.totals.subtotal,
            shipping=summary.totals.shipping,
            tax=summary.totals.tax,
            total=summary.totals.total,
            shipping_address=shipping_address.strip(),
            payment_method=payment_method,
        )
    except ValidationError as exc:
        raise CheckoutException(f"Invalid order: {exc.errors()[0].get('msg', exc)}") from exc
