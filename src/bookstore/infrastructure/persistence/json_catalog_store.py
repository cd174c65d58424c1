"""JSON-file-backed implementation of CatalogStore.

Also offers the few write helpers the CLI needs to seed a catalog;
those are not part of the order core's contract.
"""

from __future__ import annotations

from decimal import Decimal
from pathlib import Path

from bookstore.domain.exceptions import InvalidRequest
from bookstore.domain.model.book import Book
from bookstore.domain.model.user import User
from bookstore.domain.model.value_objects import Money
from bookstore.domain.repository.catalog_store import CatalogStore
from bookstore.infrastructure.persistence.json_file import JsonFile, next_id


class JsonCatalogStore(CatalogStore):

    def __init__(self, books_path: Path, users_path: Path) -> None:
        self._books = JsonFile(books_path)
        self._users = JsonFile(users_path)

    # --- CatalogStore interface -----------------------------------------------

    def find_book_by_id(self, book_id: int) -> Book | None:
        for raw in self._books.load():
            if raw["id"] == book_id:
                return book_from_raw(raw)
        return None

    def find_user_by_id(self, user_id: int) -> User | None:
        for raw in self._users.load():
            if raw["id"] == user_id:
                return User(id=raw["id"], username=raw["username"])
        return None

    # --- Seeding helpers ------------------------------------------------------

    def list_books(self) -> list[Book]:
        return [book_from_raw(raw) for raw in self._books.load()]

    def add_book(self, title: str, price: Money, stock_quantity: int) -> Book:
        if not title or not title.strip():
            raise InvalidRequest("Book title is required")
        with self._books.update() as records:
            book = Book(
                id=next_id(records),
                title=title.strip(),
                price=price,
                stock_quantity=stock_quantity,
            )
            records.append(book_to_raw(book))
        return book

    def add_user(self, username: str) -> User:
        if not username or not username.strip():
            raise InvalidRequest("Username is required")
        with self._users.update() as records:
            if any(r["username"] == username.strip() for r in records):
                raise InvalidRequest(f"User '{username}' already exists")
            user = User(id=next_id(records), username=username.strip())
            records.append({"id": user.id, "username": user.username})
        return user


# --- Serialization ------------------------------------------------------------


def book_to_raw(book: Book) -> dict:
    return {
        "id": book.id,
        "title": book.title,
        "price": str(book.price.amount),
        "currency": book.price.currency,
        "stock_quantity": book.stock_quantity,
    }


def book_from_raw(raw: dict) -> Book:
    return Book(
        id=raw["id"],
        title=raw["title"],
        price=Money(Decimal(raw["price"]), raw.get("currency", "USD")),
        stock_quantity=raw["stock_quantity"],
    )
