"""Cart models with Decimal-based pricing."""
import math
from dataclasses import dataclass
from datetime import datetime, timezone
from decimal import Decimal
from typing import Any, Mapping, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator

from storefront.services.money import multiply, to_decimal

# Upper bound for a single line, guards against runaway input
MAX_QUANTITY = 9999


def coerce_quantity(value: Any) -> int:
    """
    Normalize user-entered quantity to an integer in [1, MAX_QUANTITY].

    Non-numeric, non-finite and non-positive inputs collapse to 1;
    fractional inputs are floored.
    """
    if isinstance(value, bool):
        return 1
    if isinstance(value, int):
        return max(1, min(value, MAX_QUANTITY))
    try:
        number = float(value)
    except (TypeError, ValueError, OverflowError):
        return 1
    if not math.isfinite(number):
        return 1
    whole = math.floor(number)
    if whole < 1:
        return 1
    return min(whole, MAX_QUANTITY)


class Product(BaseModel):
    """Catalog item as served by the shop API (`_id` on the wire)."""

    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    id: str = Field(validation_alias=AliasChoices("_id", "id", "product_id"))
    name: str
    category: Optional[str] = None
    price: Decimal = Field(default=Decimal("0"), ge=0)
    image: Optional[str] = None
    description: Optional[str] = None
    quantity: Optional[int] = None  # stock on hand

    @field_validator("id", mode="before")
    @classmethod
    def _stringify_id(cls, value: Any) -> Any:
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            return str(value)
        return value

    @field_validator("price", mode="before")
    @classmethod
    def _parse_price(cls, value: Any) -> Decimal:
        return to_decimal(value)

    @property
    def in_stock(self) -> bool:
        return self.quantity is None or self.quantity > 0


@dataclass
class CartLine:
    """Single product line in the cart; display data is copied at add-time."""
    product_id: str
    name: str
    unit_price: Decimal
    quantity: int = 1
    category: str = ""
    image: Optional[str] = None
    added_at: str = ""

    def __post_init__(self):
        if not self.added_at:
            self.added_at = datetime.now(timezone.utc).isoformat()
        self.product_id = str(self.product_id)
        self.unit_price = to_decimal(self.unit_price)
        if not self.unit_price.is_finite() or self.unit_price < 0:
            raise ValueError("unit_price must be a finite non-negative amount")
        self.quantity = coerce_quantity(self.quantity)

    @property
    def total_price(self) -> Decimal:
        """Price for all units of this line."""
        return multiply(self.unit_price, self.quantity)

    def to_dict(self) -> dict:
        """Convert to a JSON-compatible dictionary."""
        return {
            "product_id": self.product_id,
            "name": self.name,
            "category": self.category,
            "image": self.image,
            "unit_price": str(self.unit_price),
            "quantity": self.quantity,
            "added_at": self.added_at,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "CartLine":
        """
        Create from dictionary.

        Also accepts the flat product shape older clients persisted
        (`_id` / `price` next to the quantity).
        """
        product_id = data.get("product_id") or data.get("_id") or data.get("id")
        if not product_id:
            raise KeyError("product_id")
        price = data["unit_price"] if "unit_price" in data else data["price"]
        return cls(
            product_id=str(product_id),
            name=str(data.get("name") or ""),
            unit_price=to_decimal(price),
            quantity=data.get("quantity", 1),
            category=str(data.get("category") or ""),
            image=data.get("image"),
            added_at=data.get("added_at", ""),
        )

    @classmethod
    def from_product(cls, product: Any, quantity: Any = 1) -> "CartLine":
        """Snapshot a Product, CartLine or raw product mapping into a new line."""
        if isinstance(product, CartLine):
            return cls(
                product_id=product.product_id,
                name=product.name,
                unit_price=product.unit_price,
                quantity=quantity,
                category=product.category,
                image=product.image,
            )
        if not isinstance(product, Product):
            product = Product.model_validate(product)
        return cls(
            product_id=product.id,
            name=product.name,
            unit_price=product.price,
            quantity=quantity,
            category=product.category or "",
            image=product.image,
        )
