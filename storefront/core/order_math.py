"""Shared helpers for order totals: shipping, tax and grand total.

All arithmetic happens on ``Decimal`` values without intermediate rounding;
``round_money`` and ``format_currency`` are for display only.
"""
from __future__ import annotations

from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Any

from storefront.core.constants import (
    FLAT_SHIPPING_FEE,
    FREE_SHIPPING_THRESHOLD,
    MONEY_QUANTUM,
    TAX_RATE,
)

ZERO = Decimal("0")


def to_decimal(value: Any, default: Decimal | None = ZERO) -> Decimal | None:
    if value is None:
        return default
    if isinstance(value, Decimal):
        return value
    try:
        return Decimal(str(value))
    except (InvalidOperation, ValueError):
        return default


@dataclass(frozen=True, slots=True)
class PricingConfig:
    """Business rules for checkout totals, injected once per session."""

    free_shipping_threshold: Decimal = FREE_SHIPPING_THRESHOLD
    flat_shipping_fee: Decimal = FLAT_SHIPPING_FEE
    tax_rate: Decimal = TAX_RATE


@dataclass(frozen=True, slots=True)
class OrderTotals:
    subtotal: Decimal
    shipping: Decimal
    tax: Decimal
    total: Decimal

    @property
    def free_shipping(self) -> bool:
        return self.shipping == ZERO

    def to_dict(self) -> dict[str, str]:
        """Rounded, display-ready representation."""
        return {
            "subtotal": str(round_money(self.subtotal)),
            "shipping": str(round_money(self.shipping)),
            "tax": str(round_money(self.tax)),
            "total": str(round_money(self.total)),
        }


def calc_shipping(subtotal: Any, config: PricingConfig | None = None) -> Decimal:
    config = config or PricingConfig()
    if to_decimal(subtotal) >= config.free_shipping_threshold:
        return ZERO
    return config.flat_shipping_fee


def calc_tax(subtotal: Any, rate: Any = TAX_RATE) -> Decimal:
    return to_decimal(subtotal) * to_decimal(rate)


def calc_total(subtotal: Any, shipping: Any, tax: Any) -> Decimal:
    return to_decimal(subtotal) + to_decimal(shipping) + to_decimal(tax)


def calc_order_totals(subtotal: Any, config: PricingConfig | None = None) -> OrderTotals:
    """Turn a cart subtotal into shipping, tax and grand total."""
    config = config or PricingConfig()
    amount = to_decimal(subtotal)
    shipping = calc_shipping(amount, config)
    tax = calc_tax(amount, config.tax_rate)
    return OrderTotals(
        subtotal=amount,
        shipping=shipping,
        tax=tax,
        total=calc_total(amount, shipping, tax),
    )


def calc_discount_percent(original_price: Any, sale_price: Any) -> int:
    """Whole-percent markdown from ``original_price`` to ``sale_price``."""
    original = to_decimal(original_price)
    sale = to_decimal(sale_price)
    if original <= ZERO or sale >= original:
        return 0
    percent = (original - sale) / original * 100
    return int(percent.quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def round_money(value: Any) -> Decimal:
    return to_decimal(value).quantize(MONEY_QUANTUM, rounding=ROUND_HALF_UP)


def format_currency(value: Any) -> str:
    """Format as USD, e.g. ``$1,234.50`` or ``-$3.00``."""
    amount = round_money(value)
    sign = "-" if amount < ZERO else ""
    return f"{sign}${abs(amount):,.2f}"
