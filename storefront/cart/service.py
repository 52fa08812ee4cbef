"""Cart model: the single owner of cart lines, with write-through persistence."""
import threading
from dataclasses import replace
from decimal import Decimal
from typing import Any, Callable, Iterator, List, Optional, Tuple

from storefront.logging import get_logger, sanitize_id_for_logging

from .models import MAX_QUANTITY, CartLine, coerce_quantity
from .storage import CartStore, MemoryCartStore

logger = get_logger(__name__)


class CartModel:
    """
    In-memory cart keyed by product id, in insertion order.

    Features:
    - Quantities coerced into [1, MAX_QUANTITY], never an error
    - Totals recomputed from the lines on every read
    - Every mutation is saved to the store before returning
    - Mutations serialized with a re-entrant lock

    Callers only ever see copies of the lines; all changes go through
    add_item / remove_item / update_quantity / clear_cart.
    """

    def __init__(
        self,
        store: Optional[CartStore] = None,
        on_add: Optional[Callable[[], None]] = None,
    ):
        self._store = store if store is not None else MemoryCartStore()
        self._lines: dict[str, CartLine] = {}
        self._lock = threading.RLock()
        # Presentation hook fired after add_item (e.g. open the cart view)
        self.on_add = on_add
        self._rehydrate()

    def _rehydrate(self) -> None:
        for line in self._store.load():
            if line.product_id in self._lines:
                logger.warning(
                    f"Duplicate cart line {sanitize_id_for_logging(line.product_id)} in store, keeping first"
                )
                continue
            self._lines[line.product_id] = line
        if self._lines:
            logger.info(f"Restored cart with {len(self._lines)} line(s)")

    def _persist(self) -> None:
        try:
            self._store.save(list(self._lines.values()))
        except Exception as e:
            logger.warning(f"Cart persistence failed, keeping in-memory state: {e}")

    # ---- mutations ----

    def add_item(self, product: Any, quantity: Any = 1) -> None:
        """
        Add a product, or increase its quantity if it is already in the cart.

        The resulting quantity is clamped to MAX_QUANTITY.
        """
        qty = coerce_quantity(quantity)
        with self._lock:
            new_line = CartLine.from_product(product, qty)
            existing = self._lines.get(new_line.product_id)
            if existing:
                existing.quantity = min(existing.quantity + qty, MAX_QUANTITY)
            else:
                self._lines[new_line.product_id] = new_line
            self._persist()

        if self.on_add is not None:
            self.on_add()

    def remove_item(self, product_id: str) -> None:
        """Remove a line; no-op when absent."""
        with self._lock:
            if self._lines.pop(str(product_id), None) is not None:
                self._persist()

    def update_quantity(self, product_id: str, quantity: Any) -> None:
        """Set a line's quantity. Zero or garbage collapses to 1; use remove_item to delete."""
        with self._lock:
            line = self._lines.get(str(product_id))
            if line is None:
                return
            line.quantity = coerce_quantity(quantity)
            self._persist()

    def clear_cart(self) -> None:
        """Empty the cart."""
        with self._lock:
            self._lines.clear()
            self._persist()

    # ---- derived reads ----

    def total_items(self) -> int:
        """Total number of units in cart."""
        with self._lock:
            return sum(line.quantity for line in self._lines.values())

    def subtotal(self) -> Decimal:
        """Sum of unit_price * quantity over all lines."""
        with self._lock:
            return sum((line.total_price for line in self._lines.values()), Decimal("0"))

    @property
    def lines(self) -> Tuple[CartLine, ...]:
        """Snapshot of the lines in insertion order."""
        with self._lock:
            return tuple(replace(line) for line in self._lines.values())

    def get_line(self, product_id: str) -> Optional[CartLine]:
        with self._lock:
            line = self._lines.get(str(product_id))
            return replace(line) if line is not None else None

    def product_ids(self) -> List[str]:
        with self._lock:
            return list(self._lines)

    def __len__(self) -> int:
        return len(self._lines)

    def __contains__(self, product_id: object) -> bool:
        return str(product_id) in self._lines

    def __iter__(self) -> Iterator[CartLine]:
        return iter(self.lines)

    def __bool__(self) -> bool:
        return bool(self._lines)


class CartViewState:
    """Open/closed flag for the cart drawer, kept apart from the cart data."""

    def __init__(self, is_open: bool = False):
        self._open = is_open
        self._listeners: List[Callable[[bool], None]] = []

    @property
    def is_open(self) -> bool:
        return self._open

    def subscribe(self, listener: Callable[[bool], None]) -> Callable[[], None]:
        """Register a listener; returns a function that unregisters it."""
        self._listeners.append(listener)
        return lambda: self._listeners.remove(listener)

    def _set(self, value: bool) -> None:
        if value == self._open:
            return
        self._open = value
        for listener in list(self._listeners):
            listener(value)

    def open_cart(self) -> None:
        self._set(True)

    def close_cart(self) -> None:
        self._set(False)

    def toggle(self) -> None:
        self._set(not self._open)
