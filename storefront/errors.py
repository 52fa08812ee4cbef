"""
Common Error Constants and Exceptions

User-facing messages live here so the cart, checkout and API layers
surface identical wording.
"""

# Checkout
ERROR_PURCHASE_FAILED = "Purchase failed"
ERROR_ITEM_FALLBACK_NAME = "Item"
INFO_CART_EMPTY = "Cart is empty"
INFO_CART_CLEARED = "Cart cleared"
INFO_PARTIAL_FAILURE = "Some items failed to purchase. Check messages above."
INFO_CHECKOUT_IN_PROGRESS = "Checkout already in progress"

# Auth
INFO_LOGIN_REQUIRED = "Please login to purchase"
INFO_SESSION_EXPIRED = "Session expired - please login again"

# Transport
ERROR_NETWORK = "Network error - check server or your connection"
ERROR_LOAD_PRODUCTS = "Failed to load products"


class StorefrontError(Exception):
    """Base class for storefront client errors."""


class PurchaseError(StorefrontError):
    """A remote purchase call failed.

    ``message`` is the human-readable reason, preferably supplied by the server.
    """

    def __init__(self, message: str = ERROR_PURCHASE_FAILED, status_code: int | None = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code


class AuthRequiredError(PurchaseError):
    """The remote service rejected the request as unauthenticated."""

    def __init__(self, message: str = INFO_SESSION_EXPIRED, status_code: int | None = 401):
        super().__init__(message, status_code)


class CatalogError(StorefrontError):
    """Catalog listing could not be fetched."""
