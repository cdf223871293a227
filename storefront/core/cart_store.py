"""Cart store: the session's cart lines with derived count and subtotal."""
from __future__ import annotations

from collections.abc import Callable, Mapping
from dataclasses import dataclass, field, replace
from decimal import Decimal
from typing import Any, Union

from logging_config import logger
from storefront.core.constants import CART_STORAGE_KEY, DEFAULT_ADD_QUANTITY
from storefront.core.order_math import ZERO, to_decimal
from storefront.core.persisted_store import PersistedStore, StoreEvent
from storefront.core.utils import get_product_id, normalize_product_id
from storefront.domain.entities import CartLine
from storefront.domain.value_objects import StoreEventType
from storefront.integrations.storage import KeyValueStorage

PriceLookup = Union[Mapping[Any, Any], Callable[[Any], Any]]


def resolve_price(price_lookup: PriceLookup, product_id: Any) -> Decimal | None:
    """Live price for ``product_id``; None when unknown, non-finite or negative."""
    try:
        if isinstance(price_lookup, Mapping):
            price = price_lookup.get(product_id)
        else:
            price = price_lookup(product_id)
    except (LookupError, TypeError):
        return None
    amount = to_decimal(price, default=None)
    if amount is None or not amount.is_finite() or amount < ZERO:
        return None
    return amount


def _positive_int(value: Any) -> int | None:
    if isinstance(value, bool) or not isinstance(value, int):
        return None
    return value if value > 0 else None


@dataclass(frozen=True)
class CartPricing:
    subtotal: Decimal
    missing_product_ids: list[Any] = field(default_factory=list)

    @property
    def has_missing(self) -> bool:
        return bool(self.missing_product_ids)


class CartStore(PersistedStore):
    """Authoritative list of cart lines for one user or guest session.

    Mutations are synchronous. Each successful mutation is persisted and
    then broadcast to subscribers; invalid input is logged and ignored.
    """

    def __init__(self, storage: KeyValueStorage, key: str = CART_STORAGE_KEY) -> None:
        super().__init__(storage, key)
        self._lines: list[CartLine] = []

    # ----- serialization -----

    def _items_payload(self) -> list[dict[str, Any]]:
        return [line.to_dict() for line in self._lines]

    def _has_items(self) -> bool:
        return bool(self._lines)

    def _restore_items(self, items: list[dict[str, Any]]) -> None:
        restored: list[CartLine] = []
        for raw in items:
            try:
                line = CartLine.from_dict(raw)
            except (TypeError, ValueError, AttributeError) as exc:
                logger.warning("Skipping unreadable cart line %r: %s", raw, exc)
                continue
            if line.quantity <= 0:
                logger.warning("Skipping cart line %s with quantity %s", line.product_id, line.quantity)
                continue
            existing = self._find(line.product_id, restored)
            if existing is not None:
                existing.quantity += line.quantity
            else:
                restored.append(line)
        self._lines = restored

    # ----- queries -----

    @staticmethod
    def _find(product_id: Any, lines: list[CartLine]) -> CartLine | None:
        product_id = normalize_product_id(product_id)
        for line in lines:
            if line.product_id == product_id:
                return line
        return None

    @property
    def lines(self) -> list[CartLine]:
        """Copies of the current lines in insertion order."""
        return [replace(line) for line in self._lines]

    def get_line(self, line_id: Any) -> CartLine | None:
        line = self._find(line_id, self._lines)
        return replace(line) if line is not None else None

    def contains(self, product_id: Any) -> bool:
        return self._find(product_id, self._lines) is not None

    def is_empty(self) -> bool:
        return not self._lines

    def get_count(self) -> int:
        """Total number of units across all lines."""
        return sum(line.quantity for line in self._lines)

    def price_cart(self, price_lookup: PriceLookup) -> CartPricing:
        """Subtotal at live prices plus the products the lookup is missing."""
        subtotal = ZERO
        missing: list[Any] = []
        for line in self._lines:
            price = resolve_price(price_lookup, line.product_id)
            if price is None:
                missing.append(line.product_id)
                continue
            subtotal += price * line.quantity
        if missing:
            logger.info("Catalog has no price for cart products %s", missing)
        return CartPricing(subtotal=subtotal, missing_product_ids=missing)

    def get_subtotal(self, price_lookup: PriceLookup) -> Decimal:
        return self.price_cart(price_lookup).subtotal

    # ----- mutations -----

    def add_item(self, product: Any, quantity: int = DEFAULT_ADD_QUANTITY) -> CartLine | None:
        """Add ``quantity`` units of ``product`` or grow its existing line."""
        amount = _positive_int(quantity)
        if amount is None:
            logger.warning("Rejected add_item: invalid quantity %r", quantity)
            return None

        product_id = get_product_id(product)
        if product_id is None:
            logger.warning("Rejected add_item: product has no id")
            return None
        line = self._find(product_id, self._lines)
        if line is not None:
            line.quantity += amount
            logger.info("Updated cart line %s qty=%s", product_id, line.quantity)
        else:
            line = CartLine.from_product(product, amount)
            self._lines.append(line)
            logger.info("Added product %s to cart", product_id)

        self._commit(
            StoreEvent(
                type=StoreEventType.ITEM_ADDED,
                product_id=product_id,
                quantity=line.quantity,
                name=line.name,
                data={"added": amount},
            )
        )
        return replace(line)

    def remove_item(self, line_id: Any) -> bool:
        """Delete a line; unknown ids are ignored."""
        line = self._find(line_id, self._lines)
        if line is None:
            return False
        self._lines.remove(line)
        logger.info("Removed product %s from cart", line_id)
        self._commit(
            StoreEvent(type=StoreEventType.ITEM_REMOVED, product_id=line.product_id, name=line.name)
        )
        return True

    def set_quantity(self, line_id: Any, quantity: int) -> bool:
        """Overwrite a line's quantity; ``quantity <= 0`` removes the line."""
        if isinstance(quantity, bool) or not isinstance(quantity, int):
            logger.warning("Rejected set_quantity: invalid quantity %r", quantity)
            return False
        if quantity <= 0:
            return self.remove_item(line_id)

        line = self._find(line_id, self._lines)
        if line is None:
            return False
        if line.quantity == quantity:
            return True
        line.quantity = quantity
        self._commit(
            StoreEvent(
                type=StoreEventType.QUANTITY_CHANGED,
                product_id=line.product_id,
                quantity=quantity,
                name=line.name,
            )
        )
        return True

    def clear(self) -> None:
        self._lines = []
        logger.info("Cleared cart %s", self._key)
        self._commit(StoreEvent(type=StoreEventType.CLEARED))

    def deduct(self, quantities: Mapping[Any, int]) -> bool:
        """Take ordered units out of the cart in one commit.

        Lines drop by the ordered quantity and disappear at zero; units
        added after the order was priced stay. Returns False when nothing
        changed.
        """
        ordered: dict[Any, int] = {}
        for product_id, quantity in quantities.items():
            amount = _positive_int(quantity)
            if amount is not None:
                key = normalize_product_id(product_id)
                ordered[key] = ordered.get(key, 0) + amount

        changed = False
        remaining: list[CartLine] = []
        for line in self._lines:
            taken = ordered.get(line.product_id, 0)
            if taken:
                changed = True
                line.quantity -= taken
            if line.quantity > 0:
                remaining.append(line)
        if not changed:
            return False

        self._lines = remaining
        logger.info("Deducted ordered items %s from cart %s", sorted(map(str, ordered)), self._key)
        self._commit(
            StoreEvent(
                type=StoreEventType.ITEMS_ORDERED,
                data={"ordered": {str(pid): qty for pid, qty in ordered.items()}},
            )
        )
        return True
