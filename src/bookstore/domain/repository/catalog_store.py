"""Abstract read side of the catalog consumed by the order core.

Defined in the domain layer so the domain never depends on
infrastructure. Lookups are explicit and total: a store returns a
fully-loaded record or None, never a lazily-populated proxy.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from bookstore.domain.model.book import Book
from bookstore.domain.model.user import User


class CatalogStore(ABC):

    @abstractmethod
    def find_book_by_id(self, book_id: int) -> Book | None:
        """Return a book by its ID, or None if not found."""

    @abstractmethod
    def find_user_by_id(self, user_id: int) -> User | None:
        """Return a user by its ID, or None if not found."""
