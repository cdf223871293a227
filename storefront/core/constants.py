"""Storefront-wide constants and configuration defaults.

Centralizes the pricing rules and storage keys so that every call site
reads the same values.
"""
from decimal import Decimal

# ============== PRICING ==============
FREE_SHIPPING_THRESHOLD = Decimal("100")  # free shipping at or above $100
FLAT_SHIPPING_FEE = Decimal("4.99")
TAX_RATE = Decimal("0.07")

MONEY_QUANTUM = Decimal("0.01")

# ============== STORAGE ==============
CART_STORAGE_KEY = "cart"
FAVORITES_STORAGE_KEY = "favorites"
STORAGE_TTL_SECONDS = 30 * 24 * 60 * 60  # 30 days

# ============== CART ==============
DEFAULT_ADD_QUANTITY = 1

# ============== ORDERS ==============
DEFAULT_PAYMENT_METHOD = "credit-card"

# ============== API ==============
DEFAULT_API_TIMEOUT_SECONDS = 5.0
