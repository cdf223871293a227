"""Small helpers shared by the stores and the API client."""
from __future__ import annotations

from typing import Any


def get_val(obj: Any, key: str, default: Any = None) -> Any:
    """Universal getter for dict or object attributes."""
    if obj is None:
        return default
    if isinstance(obj, dict):
        return obj.get(key, default)
    return getattr(obj, key, default)


def normalize_product_id(value: Any) -> Any:
    """Opaque ids JSON cannot carry (UUID, ...) are keyed by their string form."""
    if value is None or isinstance(value, (int, float, str)):
        return value
    return str(value)


def get_product_id(product: Any) -> Any:
    """Product id from a model, a dict or a bare id."""
    if isinstance(product, dict):
        value = product.get("id", product.get("product_id"))
    elif product is None or isinstance(product, (int, float, str)):
        value = product
    elif hasattr(product, "id") or hasattr(product, "product_id"):
        value = getattr(product, "id", None)
        if value is None:
            value = getattr(product, "product_id", None)
    else:
        # Anything without an id attribute is the key itself
        value = product
    return normalize_product_id(value)
