"""
Tests for the checkout orchestrator
"""

from unittest.mock import AsyncMock, Mock, call

import httpx
import pytest

from storefront.checkout import (
    CheckoutOutcome,
    InFlightTracker,
    checkout,
    extract_failure_message,
)
from storefront.errors import INFO_CART_EMPTY, INFO_PARTIAL_FAILURE, PurchaseError


@pytest.fixture
def two_line_cart(cart, make_product):
    """Cart [A:qty2, B:qty1]"""
    cart.add_item(make_product("A", name="Kaju Katli"), 2)
    cart.add_item(make_product("B", name="Soan Papdi"), 1)
    return cart


@pytest.mark.asyncio
async def test_partial_failure(two_line_cart, notifier):
    """A succeeds, B fails with a server message; only A leaves the cart."""
    async def purchase(product_id, quantity):
        if product_id == "B":
            raise PurchaseError("out of stock", 400)
        return {"ok": True}

    outcome = await checkout(two_line_cart, purchase, notifier)

    assert [line.product_id for line in outcome.successes] == ["A"]
    assert [(f.line.product_id, f.message) for f in outcome.failures] == [("B", "out of stock")]
    assert two_line_cart.product_ids() == ["B"]
    assert two_line_cart.get_line("B").quantity == 1


@pytest.mark.asyncio
async def test_partial_failure_notifications(two_line_cart, notifier):
    purchase = AsyncMock(side_effect=[None, PurchaseError("out of stock")])

    await checkout(two_line_cart, purchase, notifier)

    notifier.success.assert_called_once_with("Purchased 1 item(s)")
    notifier.error.assert_called_once_with("Soan Papdi: out of stock")
    notifier.info.assert_called_once_with(INFO_PARTIAL_FAILURE)


@pytest.mark.asyncio
async def test_empty_cart(cart, notifier):
    purchase = AsyncMock()

    outcome = await checkout(cart, purchase, notifier)

    purchase.assert_not_called()
    assert outcome.successes == []
    assert outcome.failures == []
    assert outcome.is_empty
    notifier.info.assert_called_once_with(INFO_CART_EMPTY)


@pytest.mark.asyncio
async def test_all_success_empties_cart(two_line_cart, notifier):
    purchase = AsyncMock(return_value=None)

    outcome = await checkout(two_line_cart, purchase, notifier)

    assert outcome.all_succeeded
    assert outcome.purchased_units == 3
    assert len(two_line_cart) == 0
    purchase.assert_has_awaits([call("A", 2), call("B", 1)])
    notifier.success.assert_called_once_with("Purchased 2 item(s)")
    notifier.error.assert_not_called()
    notifier.info.assert_not_called()


@pytest.mark.asyncio
async def test_all_failures_keep_cart(two_line_cart, notifier):
    purchase = AsyncMock(side_effect=RuntimeError("boom"))

    outcome = await checkout(two_line_cart, purchase, notifier)

    assert [f.message for f in outcome.failures] == ["Purchase failed", "Purchase failed"]
    assert two_line_cart.product_ids() == ["A", "B"]
    assert two_line_cart.get_line("A").quantity == 2
    notifier.success.assert_not_called()
    assert notifier.error.call_count == 2


@pytest.mark.asyncio
async def test_calls_in_order_one_at_a_time(cart, make_product, notifier):
    """Line i is cleared from the in-flight set before line i+1's call starts."""
    for pid in ["p1", "p2", "p3"]:
        cart.add_item(make_product(pid))

    tracker = InFlightTracker()
    changes = []
    tracker.subscribe(changes.append)
    seen = []

    async def purchase(product_id, quantity):
        seen.append((product_id, tracker.snapshot()))
        if product_id == "p2":
            raise PurchaseError("sold out")

    await checkout(cart, purchase, notifier, in_flight=tracker)

    assert seen == [
        ("p1", frozenset({"p1"})),
        ("p2", frozenset({"p2"})),
        ("p3", frozenset({"p3"})),
    ]
    assert changes == [
        frozenset({"p1"}), frozenset(),
        frozenset({"p2"}), frozenset(),
        frozenset({"p3"}), frozenset(),
    ]
    assert len(tracker) == 0


@pytest.mark.asyncio
async def test_notifier_errors_propagate(two_line_cart):
    notifier = Mock()
    notifier.success.side_effect = RuntimeError("toast layer broken")

    with pytest.raises(RuntimeError):
        await checkout(two_line_cart, AsyncMock(), notifier)


@pytest.mark.asyncio
async def test_cart_changes_during_checkout_are_not_purchased(two_line_cart, make_product, notifier):
    """The processed lines are the cart as it was when checkout started."""
    async def purchase(product_id, quantity):
        if product_id == "A":
            two_line_cart.add_item(make_product("C"))

    outcome = await checkout(two_line_cart, purchase, notifier)

    assert [line.product_id for line in outcome.successes] == ["A", "B"]
    assert two_line_cart.product_ids() == ["C"]


class TestExtractFailureMessage:
    def test_purchase_error(self):
        assert extract_failure_message(PurchaseError("Insufficient stock")) == "Insufficient stock"

    def test_http_status_error_body(self):
        request = httpx.Request("POST", "http://shop.test/api/sweets/x/purchase")
        response = httpx.Response(400, json={"message": "quantity too high"}, request=request)
        error = httpx.HTTPStatusError("bad", request=request, response=response)

        assert extract_failure_message(error) == "quantity too high"

    def test_non_json_body(self):
        request = httpx.Request("POST", "http://shop.test/api/sweets/x/purchase")
        response = httpx.Response(500, text="<html>oops</html>", request=request)
        error = httpx.HTTPStatusError("bad", request=request, response=response)

        assert extract_failure_message(error) == "Purchase failed"

    def test_generic_exception(self):
        assert extract_failure_message(ValueError("x")) == "Purchase failed"


class TestInFlightTracker:
    def test_add_discard(self):
        tracker = InFlightTracker()
        tracker.add("p1")
        assert "p1" in tracker

        tracker.discard("p1")
        tracker.discard("p1")
        assert "p1" not in tracker

    def test_unsubscribe(self):
        tracker = InFlightTracker()
        listener = Mock()
        unsubscribe = tracker.subscribe(listener)

        tracker.add("p1")
        unsubscribe()
        tracker.discard("p1")

        listener.assert_called_once_with(frozenset({"p1"}))


def test_outcome_defaults():
    outcome = CheckoutOutcome()
    assert outcome.is_empty
    assert not outcome.all_succeeded
