"""Storefront client: catalog browsing, persisted cart and sequential checkout."""
from storefront.cart import CartLine, CartModel, CartViewState, Product
from storefront.checkout import CheckoutFailure, CheckoutOutcome, InFlightTracker, checkout
from storefront.session import StorefrontSession

__all__ = [
    "CartLine",
    "CartModel",
    "CartViewState",
    "Product",
    "CheckoutFailure",
    "CheckoutOutcome",
    "InFlightTracker",
    "checkout",
    "StorefrontSession",
]
