"""Cart package: models, storage, and the cart model."""
from .models import MAX_QUANTITY, CartLine, Product, coerce_quantity
from .service import CartModel, CartViewState
from .storage import (
    CartStore,
    FileCartStore,
    MemoryCartStore,
    RedisCartStore,
    build_cart_store,
)

__all__ = [
    "MAX_QUANTITY",
    "CartLine",
    "Product",
    "coerce_quantity",
    "CartModel",
    "CartViewState",
    "CartStore",
    "FileCartStore",
    "MemoryCartStore",
    "RedisCartStore",
    "build_cart_store",
]
