"""
StorefrontSession - explicit owner of one visitor's cart.

Replaces any ambient/global cart: presentation code receives the session
(or its ``cart``) and calls these methods. Wires together the cart model,
the drawer view state, the in-flight tracker, the notifier and the API.
"""

from typing import Any, List, Optional

from storefront.api import StorefrontAPI
from storefront.cart import (
    CartModel,
    CartStore,
    CartViewState,
    Product,
    build_cart_store,
    coerce_quantity,
)
from storefront.checkout import CheckoutOutcome, InFlightTracker, checkout, extract_failure_message
from storefront.config import StorefrontSettings
from storefront.errors import (
    ERROR_LOAD_PRODUCTS,
    INFO_CART_CLEARED,
    INFO_CHECKOUT_IN_PROGRESS,
    INFO_LOGIN_REQUIRED,
    CatalogError,
)
from storefront.logging import get_logger, sanitize_id_for_logging
from storefront.notifications import Notifier

logger = get_logger(__name__)


class StorefrontSession:
    def __init__(
        self,
        api: StorefrontAPI,
        notifier: Notifier,
        store: Optional[CartStore] = None,
        view: Optional[CartViewState] = None,
        settings: Optional[StorefrontSettings] = None,
    ):
        self.api = api
        self.notifier = notifier
        self.view = view if view is not None else CartViewState()
        self.in_flight = InFlightTracker()
        self.cart = CartModel(
            store if store is not None else build_cart_store(settings),
            on_add=self.view.open_cart,
        )
        self._checking_out = False

    @property
    def checking_out(self) -> bool:
        return self._checking_out

    # ---- cart ----

    def add_to_cart(self, product: Any, quantity: Any = 1) -> None:
        """Add to cart; opens the cart view."""
        self.cart.add_item(product, quantity)

    def clear_cart(self) -> None:
        self.cart.clear_cart()
        self.notifier.info(INFO_CART_CLEARED)

    # ---- purchase flows ----

    async def checkout(self) -> CheckoutOutcome:
        """
        Check out the whole cart.

        Requires a logged-in visitor and refuses to overlap with a running
        checkout. The cart view closes only when every line went through.
        """
        if self._checking_out:
            self.notifier.info(INFO_CHECKOUT_IN_PROGRESS)
            return CheckoutOutcome()

        if self.cart and not self.api.is_authenticated:
            self.notifier.info(INFO_LOGIN_REQUIRED)
            return CheckoutOutcome()

        self._checking_out = True
        try:
            outcome = await checkout(self.cart, self.api.purchase, self.notifier, self.in_flight)
        finally:
            self._checking_out = False

        if outcome.all_succeeded:
            self.view.close_cart()
        return outcome

    async def buy_now(self, product: Product, quantity: Any = 1) -> bool:
        """Purchase a single product directly, bypassing the cart."""
        if not self.api.is_authenticated:
            self.notifier.info(INFO_LOGIN_REQUIRED)
            return False

        qty = coerce_quantity(quantity)
        self.in_flight.add(product.id)
        try:
            await self.api.purchase(product.id, qty)
        except Exception as e:
            message = extract_failure_message(e)
            logger.warning(f"Direct purchase failed for {sanitize_id_for_logging(product.id)}")
            self.notifier.error(message)
            return False
        finally:
            self.in_flight.discard(product.id)

        self.notifier.success(f"Purchased {qty} × {product.name}")
        return True

    # ---- catalog ----

    async def search(
        self,
        q: Optional[str] = None,
        category: Optional[str] = None,
        min_price: Optional[float] = None,
        max_price: Optional[float] = None,
    ) -> List[Product]:
        """Catalog listing; failures are reported to the notifier and yield an empty list."""
        try:
            return await self.api.search_products(
                q=q, category=category, min_price=min_price, max_price=max_price
            )
        except CatalogError as e:
            logger.error(f"Catalog load failed: {e}")
            self.notifier.error(ERROR_LOAD_PRODUCTS)
            return []
