"""Persistent slots for the cart: local JSON file, Upstash Redis, or memory.

Every store fails soft. A slot that cannot be read or parsed loads as an
empty cart and a failed write is logged and dropped; the in-memory cart
stays authoritative for the session.
"""
import json
from decimal import InvalidOperation
import os
import tempfile
from pathlib import Path
from typing import Any, Iterable, List, Optional, Protocol

from upstash_redis import Redis

from storefront.config import DEFAULT_CART_TTL, StorefrontSettings, get_settings
from storefront.db import RedisKeys, get_redis_sync
from storefront.logging import get_logger

from .models import CartLine

logger = get_logger(__name__)


class CartStore(Protocol):
    """Durable key-value slot holding the serialized cart."""

    def load(self) -> List[CartLine]: ...

    def save(self, lines: Iterable[CartLine]) -> None: ...


def serialize_lines(lines: Iterable[CartLine]) -> list:
    return [line.to_dict() for line in lines]


def deserialize_lines(data: Any) -> List[CartLine]:
    """Parse a stored payload; raises on any malformed entry."""
    if data is None:
        return []
    if not isinstance(data, list):
        raise TypeError(f"cart payload must be a list, got {type(data).__name__}")
    return [CartLine.from_dict(entry) for entry in data]


# Errors that mean "the stored cart is unusable"
_PARSE_ERRORS = (
    json.JSONDecodeError,
    KeyError,
    TypeError,
    ValueError,
    AttributeError,
    InvalidOperation,
)


class MemoryCartStore:
    """In-process slot; keeps the raw JSON so behaviour matches the durable stores."""

    def __init__(self, raw: Optional[str] = None):
        self.raw = raw

    def load(self) -> List[CartLine]:
        if not self.raw:
            return []
        try:
            return deserialize_lines(json.loads(self.raw))
        except _PARSE_ERRORS as e:
            logger.warning(f"Corrupted cart data in memory slot: {e}")
            return []

    def save(self, lines: Iterable[CartLine]) -> None:
        self.raw = json.dumps(serialize_lines(lines))


class FileCartStore:
    """
    JSON file acting as a per-user key-value slot.

    The file holds an object; the cart lives under ``key``. Other keys are
    left untouched so several clients can share one file.
    """

    def __init__(self, path: Path | str, key: str):
        self.path = Path(path)
        self.key = key

    def _read_document(self) -> dict:
        with self.path.open("r", encoding="utf-8") as fh:
            document = json.load(fh)
        if not isinstance(document, dict):
            raise TypeError("cart file must contain a JSON object")
        return document

    def load(self) -> List[CartLine]:
        if not self.path.exists():
            return []
        try:
            return deserialize_lines(self._read_document().get(self.key))
        except OSError as e:
            logger.warning(f"Failed to read cart file {self.path}: {e}")
            return []
        except _PARSE_ERRORS as e:
            logger.warning(f"Corrupted cart data in {self.path}: {e}")
            return []

    def save(self, lines: Iterable[CartLine]) -> None:
        try:
            document = self._read_document() if self.path.exists() else {}
        except (OSError, *_PARSE_ERRORS):
            # Unreadable file gets replaced by a fresh document
            document = {}
        document[self.key] = serialize_lines(lines)

        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(prefix=".cart-", dir=self.path.parent)
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as fh:
                    json.dump(document, fh)
                os.replace(tmp_name, self.path)
            except BaseException:
                Path(tmp_name).unlink(missing_ok=True)
                raise
        except (OSError, TypeError, ValueError) as e:
            logger.warning(f"Failed to save cart to {self.path}: {e}")


class RedisCartStore:
    """Cart slot in Upstash Redis with a TTL for abandoned carts."""

    def __init__(self, slot: str, client=None, ttl: Optional[int] = DEFAULT_CART_TTL):
        self.key = RedisKeys.cart_key(slot)
        self.ttl = ttl or None
        self._redis = client  # Lazy initialization

    @property
    def redis(self):
        """Get Redis client (lazy initialization)."""
        if self._redis is None:
            self._redis = get_redis_sync()
        return self._redis

    def load(self) -> List[CartLine]:
        try:
            data = self.redis.get(self.key)
        except Exception as e:
            logger.warning(f"Failed to get cart from Redis: {e}")
            return []

        if not data:
            return []

        try:
            payload = json.loads(data) if isinstance(data, (str, bytes)) else data
            return deserialize_lines(payload)
        except _PARSE_ERRORS as e:
            # Corrupted data - clear it so the next session starts clean
            logger.warning(f"Corrupted cart data at {self.key}: {e}")
            try:
                self.redis.delete(self.key)
            except Exception as delete_error:
                logger.warning(f"Failed to delete corrupted cart: {delete_error}")
            return []

    def save(self, lines: Iterable[CartLine]) -> None:
        try:
            self.redis.set(self.key, json.dumps(serialize_lines(lines)), ex=self.ttl)
        except Exception as e:
            logger.warning(f"Failed to save cart to Redis: {e}")


def build_cart_store(settings: Optional[StorefrontSettings] = None) -> CartStore:
    """Pick the Redis slot when Upstash credentials are configured, else the local file."""
    settings = settings or get_settings()
    if settings.redis_enabled:
        client = Redis(url=settings.redis_url, token=settings.redis_token)
        return RedisCartStore(settings.cart_key, client=client, ttl=settings.cart_ttl)
    return FileCartStore(settings.cart_path, settings.cart_key)
