"""
Checkout Orchestrator

Turns the cart into one remote purchase call per line, strictly one at a
time and in cart order. Each line succeeds or fails on its own: failures are
collected with their message and stay in the cart, successful lines are
removed once the whole batch has been attempted.
"""

from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, FrozenSet, List, Optional, Set

from storefront.cart import CartLine, CartModel
from storefront.errors import (
    ERROR_ITEM_FALLBACK_NAME,
    ERROR_PURCHASE_FAILED,
    INFO_CART_EMPTY,
    INFO_PARTIAL_FAILURE,
    PurchaseError,
)
from storefront.logging import (
    get_logger,
    sanitize_id_for_logging,
    sanitize_string_for_logging,
)
from storefront.notifications import Notifier

logger = get_logger(__name__)

PurchaseFn = Callable[[str, int], Awaitable[Any]]


@dataclass(frozen=True)
class CheckoutFailure:
    line: CartLine
    message: str


@dataclass
class CheckoutOutcome:
    """Result of one checkout run, both lists in processing order."""
    successes: List[CartLine] = field(default_factory=list)
    failures: List[CheckoutFailure] = field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        return not self.successes and not self.failures

    @property
    def all_succeeded(self) -> bool:
        return bool(self.successes) and not self.failures

    @property
    def purchased_units(self) -> int:
        return sum(line.quantity for line in self.successes)


class InFlightTracker:
    """Observable set of product ids with a purchase call outstanding."""

    def __init__(self):
        self._ids: Set[str] = set()
        self._listeners: List[Callable[[FrozenSet[str]], None]] = []

    def subscribe(self, listener: Callable[[FrozenSet[str]], None]) -> Callable[[], None]:
        """Register a listener called with the new id set; returns an unsubscribe function."""
        self._listeners.append(listener)
        return lambda: self._listeners.remove(listener)

    def _emit(self) -> None:
        current = frozenset(self._ids)
        for listener in list(self._listeners):
            listener(current)

    def add(self, product_id: str) -> None:
        self._ids.add(product_id)
        self._emit()

    def discard(self, product_id: str) -> None:
        if product_id in self._ids:
            self._ids.discard(product_id)
            self._emit()

    def snapshot(self) -> FrozenSet[str]:
        return frozenset(self._ids)

    def __contains__(self, product_id: object) -> bool:
        return product_id in self._ids

    def __len__(self) -> int:
        return len(self._ids)


def extract_failure_message(exc: BaseException) -> str:
    """Prefer the server-supplied message, fall back to a generic one."""
    if isinstance(exc, PurchaseError) and exc.message:
        return exc.message

    response = getattr(exc, "response", None)
    if response is not None:
        try:
            data = response.json()
        except ValueError:
            data = None
        if isinstance(data, dict) and data.get("message"):
            return str(data["message"])

    return ERROR_PURCHASE_FAILED


def _report(outcome: CheckoutOutcome, notifier: Notifier) -> None:
    if outcome.successes:
        notifier.success(f"Purchased {len(outcome.successes)} item(s)")

    if outcome.failures:
        for failure in outcome.failures:
            name = failure.line.name or ERROR_ITEM_FALLBACK_NAME
            notifier.error(f"{name}: {failure.message}")
        notifier.info(INFO_PARTIAL_FAILURE)


async def checkout(
    cart: CartModel,
    purchase_fn: PurchaseFn,
    notifier: Notifier,
    in_flight: Optional[InFlightTracker] = None,
) -> CheckoutOutcome:
    """
    Purchase every cart line, one remote call at a time.

    Args:
        cart: Cart to check out; only successful lines are removed from it
        purchase_fn: ``await purchase_fn(product_id, quantity)``, raises on failure
        notifier: Sink for the success/error/info summary
        in_flight: Optional tracker marking the line currently being purchased

    Returns:
        CheckoutOutcome with successes and failures in cart order.
        Per-line errors never propagate; errors from cart or notifier do.
    """
    outcome = CheckoutOutcome()
    lines = cart.lines

    if not lines:
        notifier.info(INFO_CART_EMPTY)
        return outcome

    tracker = in_flight if in_flight is not None else InFlightTracker()
    logger.info(f"Checkout started: {len(lines)} line(s)")

    for line in lines:
        tracker.add(line.product_id)
        try:
            await purchase_fn(line.product_id, line.quantity)
            outcome.successes.append(line)
            logger.info(
                f"Purchased {line.quantity} x {sanitize_id_for_logging(line.product_id)}"
            )
        except Exception as e:
            message = extract_failure_message(e)
            outcome.failures.append(CheckoutFailure(line=line, message=message))
            logger.warning(
                f"Purchase failed for {sanitize_id_for_logging(line.product_id)}: "
                f"{sanitize_string_for_logging(message)}"
            )
        finally:
            tracker.discard(line.product_id)

    for line in outcome.successes:
        cart.remove_item(line.product_id)

    _report(outcome, notifier)

    logger.info(
        f"Checkout finished: {len(outcome.successes)} succeeded, {len(outcome.failures)} failed"
    )
    return outcome
