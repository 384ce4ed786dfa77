"""Cart identity model.

A cart line is identified by ``(product id, type id or "none")``. Adding the
same pair again bumps the quantity of the existing line; a line whose
quantity drops to zero disappears. Lines hold a snapshot of the product as it
was when added, which is what the preview is priced from.

The cart is a plain object owned by whoever holds it (a client session, or
the order service while it merges a submitted payload). It never touches the
network or the database.
"""

from __future__ import annotations

import time
from dataclasses import dataclass, field
from typing import Any, Callable, Iterator, Mapping, Optional

NO_TYPE = "none"

# How long the "just added" flag stays up, in seconds
JUST_ADDED_TTL = 1.0
JUST_INCREMENTED_TTL = 0.6


class CartValidationError(ValueError):
    """A cart operation was given an invalid product/type selection."""


@dataclass(frozen=True)
class TypeSnapshot:
    id: int
    name: str
    image_url: str = ""
    product_id: Optional[int] = None


@dataclass(frozen=True)
class ProductSnapshot:
    """Read-only copy of the catalog fields the cart and pricing need."""

    id: int
    name: str
    price: int
    discount_percent: int = 0
    active: bool = True
    types: tuple[TypeSnapshot, ...] = ()

    @property
    def has_types(self) -> bool:
        return bool(self.types)

    def find_type(self, type_id: Optional[int]) -> Optional[TypeSnapshot]:
        return next((t for t in self.types if t.id == type_id), None)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "ProductSnapshot":
        """Build from a ``/products`` payload entry."""
        return cls(
            id=int(data["id"]),
            name=data["name"],
            price=int(data["price"]),
            discount_percent=int(data.get("discount_percent") or 0),
            active=bool(data.get("active", True)),
            types=tuple(
                TypeSnapshot(
                    id=int(t["id"]),
                    name=t["name"],
                    image_url=t.get("image_url") or "",
                    product_id=t.get("product_id"),
                )
                for t in data.get("types") or ()
            ),
        )

    @classmethod
    def from_model(cls, product) -> "ProductSnapshot":
        """Build from a ``Product`` ORM row with ``types`` loaded."""
        return cls(
            id=product.id,
            name=product.name,
            price=product.price,
            discount_percent=product.discount_percent or 0,
            active=product.active,
            types=tuple(
                TypeSnapshot(
                    id=t.id, name=t.name, image_url=t.image_url, product_id=t.product_id
                )
                for t in product.types
            ),
        )


@dataclass
class CartLine:
    key: str
    product: ProductSnapshot
    type_id: Optional[int]
    quantity: int

    @property
    def type(self) -> Optional[TypeSnapshot]:
        return self.product.find_type(self.type_id)


def cart_key(product_id: int, type_id: Optional[int]) -> str:
    return f"{product_id}:{NO_TYPE if type_id is None else type_id}"


def default_type_id(product: ProductSnapshot) -> Optional[int]:
    """The selection a product starts with: its first type, or none."""
    return product.types[0].id if product.types else None


def validate_selection(product: ProductSnapshot, type_id: Optional[int]) -> None:
    if product.has_types:
        if type_id is None:
            raise CartValidationError(f"Select a type for '{product.name}'")
        if product.find_type(type_id) is None:
            raise CartValidationError(
                f"Type {type_id} does not belong to '{product.name}'"
            )
    elif type_id is not None:
        raise CartValidationError(f"'{product.name}' has no types to select")


@dataclass
class Cart:
    """In-memory cart keyed by (product, type)."""

    clock: Callable[[], float] = time.monotonic
    _lines: dict[str, CartLine] = field(default_factory=dict)
    _flash_until: dict[str, float] = field(default_factory=dict)

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    def add(
        self,
        product: ProductSnapshot,
        type_id: Optional[int] = None,
        quantity: int = 1,
    ) -> CartLine:
        """Add ``quantity`` of a product/type, merging with an existing line."""
        if quantity < 1:
            raise CartValidationError("Quantity must be at least 1")
        validate_selection(product, type_id)

        key = cart_key(product.id, type_id)
        line = self._lines.get(key)
        if line is None:
            line = CartLine(key=key, product=product, type_id=type_id, quantity=quantity)
            self._lines[key] = line
        else:
            line.quantity += quantity
        self._flash(key, JUST_ADDED_TTL)
        return line

    def increment(self, key: str) -> None:
        line = self._lines.get(key)
        if line is None:
            return
        line.quantity += 1
        self._flash(key, JUST_INCREMENTED_TTL)

    def decrement(self, key: str) -> None:
        line = self._lines.get(key)
        if line is None:
            return
        if line.quantity - 1 <= 0:
            self.remove(key)
        else:
            line.quantity -= 1

    def remove(self, key: str) -> None:
        self._lines.pop(key, None)
        self._flash_until.pop(key, None)

    def clear(self) -> None:
        self._lines.clear()
        self._flash_until.clear()

    # ------------------------------------------------------------------
    # "Just added" flag
    # ------------------------------------------------------------------

    def _flash(self, key: str, ttl: float) -> None:
        self._flash_until[key] = self.clock() + ttl

    def just_added(self, key: str) -> bool:
        until = self._flash_until.get(key)
        if until is None:
            return False
        if self.clock() >= until:
            del self._flash_until[key]
            return False
        return True

    # ------------------------------------------------------------------
    # Views
    # ------------------------------------------------------------------

    @property
    def lines(self) -> list[CartLine]:
        return list(self._lines.values())

    def get(self, key: str) -> Optional[CartLine]:
        return self._lines.get(key)

    @property
    def is_empty(self) -> bool:
        return not self._lines

    @property
    def total_quantity(self) -> int:
        return sum(line.quantity for line in self._lines.values())

    def __len__(self) -> int:
        return len(self._lines)

    def __iter__(self) -> Iterator[CartLine]:
        return iter(self.lines)

    def __contains__(self, key: object) -> bool:
        return key in self._lines

    def to_order_items(self) -> list[dict[str, Any]]:
        """Payload for ``POST /orders``."""
        return [
            {
                "product_id": line.product.id,
                "quantity": line.quantity,
                "type_id": line.type_id,
            }
            for line in self._lines.values()
        ]
