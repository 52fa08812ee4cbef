"""Pytest configuration and fixtures"""
import os
import pytest
from unittest.mock import Mock, AsyncMock

# Keep tests away from a developer's real cart and API
os.environ.setdefault("STOREFRONT_API_URL", "http://shop.test/api")
os.environ.setdefault("STOREFRONT_CART_PATH", "/tmp/storefront-test-cart.json")
os.environ.pop("UPSTASH_REDIS_REST_URL", None)
os.environ.pop("UPSTASH_REDIS_REST_TOKEN", None)

from storefront.cart import CartModel, MemoryCartStore, Product  # noqa: E402


@pytest.fixture
def sample_product():
    """Sample product as returned by the shop API"""
    return {
        "_id": "65f1c0a1b2",
        "name": "Kaju Katli",
        "category": "Barfi",
        "price": 450.0,
        "image": "https://cdn.test/kaju.jpg",
        "description": "Cashew fudge",
        "quantity": 25,
    }


@pytest.fixture
def make_product():
    """Factory for Product models"""
    def _make(product_id: str, name: str = "", price: float = 100.0, **extra) -> Product:
        return Product(id=product_id, name=name or f"Sweet {product_id}", price=price, **extra)
    return _make


@pytest.fixture
def memory_store():
    return MemoryCartStore()


@pytest.fixture
def cart(memory_store):
    """Empty cart backed by an in-memory slot"""
    return CartModel(memory_store)


@pytest.fixture
def notifier():
    """Notifier double recording success/error/info calls"""
    sink = Mock()
    sink.success = Mock()
    sink.error = Mock()
    sink.info = Mock()
    return sink


@pytest.fixture
def mock_api():
    """Authenticated StorefrontAPI double"""
    api = Mock()
    api.is_authenticated = True
    api.purchase = AsyncMock(return_value={"ok": True})
    api.search_products = AsyncMock(return_value=[])
    return api
