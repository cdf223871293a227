"""Custom exceptions for the storefront core."""
from __future__ import annotations


class StorefrontException(Exception):
    """Base exception for all storefront errors."""

    def __init__(self, message: str, *args: object) -> None:
        super().__init__(message, *args)
        self.message = message


class ConfigurationException(StorefrontException):
    """Configuration errors."""

    pass


class PersistenceException(StorefrontException):
    """Key-value storage read/write errors."""

    def __init__(self, key: str, reason: str) -> None:
        super().__init__(f"Storage operation failed for key {key!r}: {reason}")
        self.key = key
        self.reason = reason


class StorefrontApiException(StorefrontException):
    """Storefront REST API request errors."""

    def __init__(self, message: str, status: int | None = None) -> None:
        super().__init__(message)
        self.status = status


class CatalogException(StorefrontApiException):
    """Catalog service request errors."""

    pass


class InvalidProductException(CatalogException):
    """Catalog returned a product record that cannot be sold (no valid price)."""

    pass


class CheckoutException(StorefrontException):
    """Cart cannot be turned into an order."""

    pass


class OrderSubmissionException(StorefrontApiException):
    """Order API rejected or failed to receive an order."""

    pass


class CartSyncException(StorefrontApiException):
    """Server-side cart request errors."""

    pass
