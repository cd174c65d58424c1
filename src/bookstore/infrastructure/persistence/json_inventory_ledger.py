"""JSON-file-backed implementation of InventoryLedger.

Stock lives in the same ``books.json`` the catalog reads.  Each
operation loads, mutates and writes the file while holding the file's
lock, so check-and-decrement is one step relative to other callers.
"""

from __future__ import annotations

from pathlib import Path

from bookstore.domain.exceptions import BookNotFound
from bookstore.domain.model.value_objects import Money
from bookstore.domain.repository.inventory_ledger import InventoryLedger
from bookstore.infrastructure.persistence.json_catalog_store import (
    book_from_raw,
    book_to_raw,
)
from bookstore.infrastructure.persistence.json_file import JsonFile


class JsonInventoryLedger(InventoryLedger):

    def __init__(self, books_path: Path) -> None:
        self._books = JsonFile(books_path)

    def reserve(self, book_id: int, quantity: int) -> Money:
        with self._books.update() as records:
            index, book = self._find(records, book_id)
            unit_price = book.reserve(quantity)
            records[index] = book_to_raw(book)
        return unit_price

    def release(self, book_id: int, quantity: int) -> None:
        with self._books.update() as records:
            index, book = self._find(records, book_id)
            book.release(quantity)
            records[index] = book_to_raw(book)

    def stock_of(self, book_id: int) -> int:
        _, book = self._find(self._books.load(), book_id)
        return book.stock_quantity

    @staticmethod
    def _find(records: list[dict], book_id: int):
        for i, raw in enumerate(records):
            if raw["id"] == book_id:
                return i, book_from_raw(raw)
        raise BookNotFound(book_id)
