"""Book: the catalog entry whose stock the order core guards.

Books are owned by the catalog; the order core only reads them and
moves their stock through the inventory ledger. ``reserve`` and
``release`` are the only mutators and are meant to be called by ledger
implementations, never by order logic directly.
"""

from __future__ import annotations

from dataclasses import dataclass

from bookstore.domain.exceptions import InsufficientStock, InvalidRequest
from bookstore.domain.model.value_objects import Money


@dataclass
class Book:
    """A book in the catalog.

    Invariants:
    - ``stock_quantity`` is never negative
    """

    id: int
    title: str
    price: Money
    stock_quantity: int = 0

    def __post_init__(self) -> None:
        if self.stock_quantity < 0:
            raise InvalidRequest(
                f"Stock for '{self.title}' cannot be negative, got {self.stock_quantity}"
            )

    def is_available(self, quantity: int) -> bool:
        return self.stock_quantity >= quantity

    def reserve(self, quantity: int) -> Money:
        """Take *quantity* units out of stock and return the current price."""
        if quantity <= 0:
            raise InvalidRequest("Reservation quantity must be positive")
        if not self.is_available(quantity):
            raise InsufficientStock(self.id, quantity, self.stock_quantity)
        self.stock_quantity -= quantity
        return self.price

    def release(self, quantity: int) -> None:
        """Put *quantity* units back into stock (e.g. on cancellation)."""
        if quantity <= 0:
            raise InvalidRequest("Release quantity must be positive")
        self.stock_quantity += quantity
