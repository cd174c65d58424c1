"""Abstract inventory ledger, the only writer of book stock."""

from __future__ import annotations

from abc import ABC, abstractmethod

from bookstore.domain.model.value_objects import Money


class InventoryLedger(ABC):
    """Implementations must make ``reserve`` a single atomic
    check-and-decrement relative to every other ``reserve``/``release``
    on the same book.
    """

    @abstractmethod
    def reserve(self, book_id: int, quantity: int) -> Money:
        """Decrement stock by *quantity* and return the unit price at that instant.

        Raises InsufficientStock if stock < quantity, BookNotFound if the
        book does not exist.
        """

    @abstractmethod
    def release(self, book_id: int, quantity: int) -> None:
        """Add *quantity* back to stock. Raises BookNotFound only."""

    @abstractmethod
    def stock_of(self, book_id: int) -> int:
        """Return the current stock of a book. Raises BookNotFound."""
