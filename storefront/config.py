"""Storefront client configuration loaded from environment variables."""
import os
from dataclasses import dataclass, field
from functools import lru_cache
from pathlib import Path

DEFAULT_API_URL = "http://127.0.0.1:5001/api"
DEFAULT_API_TIMEOUT = 20.0
DEFAULT_CART_KEY = "sweetify_cart_v1"
DEFAULT_CART_PATH = "~/.storefront/cart.json"
DEFAULT_CART_TTL = 86400  # 24 hours
DEFAULT_CURRENCY = "INR"


def _env_float(name: str, default: float) -> float:
    raw = os.environ.get(name)
    if not raw:
        return default
    try:
        return float(raw)
    except ValueError:
        return default


def _env_int(name: str, default: int) -> int:
    raw = os.environ.get(name)
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        return default


@dataclass(frozen=True)
class StorefrontSettings:
    """
    Settings for the storefront client.

    Env vars:
      - STOREFRONT_API_URL: base URL of the remote shop API
      - STOREFRONT_API_TIMEOUT: request timeout in seconds
      - STOREFRONT_CART_KEY: fixed slot name the cart is stored under
      - STOREFRONT_CART_PATH: JSON file backing the local cart slot
      - UPSTASH_REDIS_REST_URL / UPSTASH_REDIS_REST_TOKEN: optional Redis slot
      - CART_TTL: Redis TTL for abandoned carts, seconds (0 disables)
      - STOREFRONT_CURRENCY: currency code used for display
    """

    api_url: str = DEFAULT_API_URL
    api_timeout: float = DEFAULT_API_TIMEOUT
    cart_key: str = DEFAULT_CART_KEY
    cart_path: Path = field(default_factory=lambda: Path(DEFAULT_CART_PATH).expanduser())
    redis_url: str = ""
    redis_token: str = ""
    cart_ttl: int = DEFAULT_CART_TTL
    currency: str = DEFAULT_CURRENCY

    @property
    def redis_enabled(self) -> bool:
        return bool(self.redis_url and self.redis_token)

    @classmethod
    def from_env(cls) -> "StorefrontSettings":
        return cls(
            api_url=os.environ.get("STOREFRONT_API_URL") or DEFAULT_API_URL,
            api_timeout=_env_float("STOREFRONT_API_TIMEOUT", DEFAULT_API_TIMEOUT),
            cart_key=os.environ.get("STOREFRONT_CART_KEY") or DEFAULT_CART_KEY,
            cart_path=Path(os.environ.get("STOREFRONT_CART_PATH") or DEFAULT_CART_PATH).expanduser(),
            redis_url=os.environ.get("UPSTASH_REDIS_REST_URL", ""),
            redis_token=os.environ.get("UPSTASH_REDIS_REST_TOKEN", ""),
            cart_ttl=_env_int("CART_TTL", DEFAULT_CART_TTL),
            currency=os.environ.get("STOREFRONT_CURRENCY") or DEFAULT_CURRENCY,
        )


@lru_cache
def get_settings() -> StorefrontSettings:
    """Cached settings loader."""
    return StorefrontSettings.from_env()
