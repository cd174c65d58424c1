"""In-memory fake repositories for testing.

These implement the same abstract interfaces as the JSON and SQL
repositories but keep everything in a dict. No file I/O, no side
effects.  Orders are stored as deep copies so a loaded aggregate can be
mutated without touching the stored one, as with a real database.
"""

from __future__ import annotations

import copy
import threading
from datetime import datetime

from bookstore.domain.exceptions import BookNotFound
from bookstore.domain.model.book import Book
from bookstore.domain.model.order import Order, OrderStatus
from bookstore.domain.model.user import User
from bookstore.domain.model.value_objects import Money
from bookstore.domain.repository.catalog_store import CatalogStore
from bookstore.domain.repository.inventory_ledger import InventoryLedger
from bookstore.domain.repository.order_repository import (
    OrderRepository,
    created_within,
    newest_first,
)


class FakeCatalogStore(CatalogStore):

    def __init__(
        self,
        books: list[Book] | None = None,
        users: list[User] | None = None,
    ) -> None:
        self.books: dict[int, Book] = {b.id: b for b in books or []}
        self.users: dict[int, User] = {u.id: u for u in users or []}

    def find_book_by_id(self, book_id: int) -> Book | None:
        book = self.books.get(book_id)
        return copy.deepcopy(book) if book else None

    def find_user_by_id(self, user_id: int) -> User | None:
        return self.users.get(user_id)

    def remove_book(self, book_id: int) -> None:
        del self.books[book_id]


class FakeInventoryLedger(InventoryLedger):
    """Mutates the catalog's Book records directly, under one lock."""

    def __init__(self, catalog: FakeCatalogStore) -> None:
        self._catalog = catalog
        self._lock = threading.Lock()
        self.reserve_calls: list[tuple[int, int]] = []
        self.release_calls: list[tuple[int, int]] = []

    def reserve(self, book_id: int, quantity: int) -> Money:
        with self._lock:
            self.reserve_calls.append((book_id, quantity))
            return self._book(book_id).reserve(quantity)

    def release(self, book_id: int, quantity: int) -> None:
        with self._lock:
            self.release_calls.append((book_id, quantity))
            self._book(book_id).release(quantity)

    def stock_of(self, book_id: int) -> int:
        return self._book(book_id).stock_quantity

    def _book(self, book_id: int) -> Book:
        book = self._catalog.books.get(book_id)
        if book is None:
            raise BookNotFound(book_id)
        return book


class FakeOrderRepository(OrderRepository):

    def __init__(self) -> None:
        self._store: dict[int, Order] = {}
        self._next_id = 1
        self._lock = threading.Lock()
        self.fail_on_save: Exception | None = None

    def save(self, order: Order) -> None:
        if self.fail_on_save is not None:
            raise self.fail_on_save
        with self._lock:
            order.id = self._next_id
            self._next_id += 1
            self._store[order.id] = copy.deepcopy(order)

    def get_by_id(self, order_id: int) -> Order | None:
        order = self._store.get(order_id)
        return copy.deepcopy(order) if order else None

    def list_by_user(self, user_id: int) -> list[Order]:
        return newest_first(
            [copy.deepcopy(o) for o in self._store.values() if o.user_id == user_id]
        )

    def list_by_status(self, status: OrderStatus) -> list[Order]:
        return newest_first(
            [copy.deepcopy(o) for o in self._store.values() if o.status == status]
        )

    def list_all(
        self,
        start: datetime | None = None,
        end: datetime | None = None,
    ) -> list[Order]:
        return newest_first(
            [
                copy.deepcopy(o)
                for o in self._store.values()
                if created_within(o, start, end)
            ]
        )

    def compare_and_set_status(
        self,
        order_id: int,
        expected: OrderStatus,
        new: OrderStatus,
    ) -> bool:
        with self._lock:
            stored = self._store.get(order_id)
            if stored is None or stored.status != expected:
                return False
            stored.status = new
            return True

    def put(self, order: Order) -> None:
        """Store an order as-is (used to seed historical orders)."""
        self._store[order.id] = copy.deepcopy(order)  # type: ignore[index]
        self._next_id = max(self._next_id, order.id + 1)  # type: ignore[operator]


def bookstore(*books: tuple[int, str, int], users: tuple[int, ...] = (1, 2)):
    """Fake catalog + ledger + order repo over (book_id, price, stock) tuples."""
    catalog = FakeCatalogStore(
        [
            Book(id=bid, title=f"Book {bid}", price=Money.of(price), stock_quantity=stock)
            for bid, price, stock in books
        ],
        [User(id=uid, username=f"user{uid}") for uid in users],
    )
    return catalog, FakeInventoryLedger(catalog), FakeOrderRepository()
