"""Tests for the JSON-file-backed repositories (real files in tmp_path)."""

import json
import threading
from datetime import datetime, timezone

import pytest

from bookstore.application.cancel_order import CancelOrderHandler
from bookstore.application.create_order import CreateOrderHandler
from bookstore.application.dto import OrderItemSpec
from bookstore.domain.exceptions import BookNotFound, InsufficientStock, InvalidRequest
from bookstore.domain.model.order import Order, OrderItem, OrderStatus
from bookstore.domain.model.value_objects import Money, Quantity
from bookstore.infrastructure.persistence.json_catalog_store import JsonCatalogStore
from bookstore.infrastructure.persistence.json_file import JsonFile
from bookstore.infrastructure.persistence.json_inventory_ledger import (
    JsonInventoryLedger,
)
from bookstore.infrastructure.persistence.json_order_repository import (
    JsonOrderRepository,
)


@pytest.fixture
def catalog(tmp_path):
    store = JsonCatalogStore(tmp_path / "books.json", tmp_path / "users.json")
    store.add_book("Dune", Money.of("100000"), 10)
    store.add_book("Emma", Money.of("12.50"), 1)
    store.add_user("alice")
    return store


@pytest.fixture
def ledger(tmp_path, catalog):
    return JsonInventoryLedger(tmp_path / "books.json")


@pytest.fixture
def order_repo(tmp_path):
    return JsonOrderRepository(tmp_path / "orders.json")


def _order(user_id=1, status=OrderStatus.PENDING, created_at=None):
    item = OrderItem(1, "Dune", Quantity(2), Money.of("12.50"))
    order = Order.create(user_id, "1 Main St", [item], payment_method="CARD")
    order.status = status
    if created_at is not None:
        order.created_at = created_at
    return order


class TestJsonFile:

    def test_creates_missing_file(self, tmp_path):
        path = tmp_path / "nested" / "records.json"
        assert JsonFile(path).load() == []
        assert path.exists()

    def test_failed_update_writes_nothing(self, tmp_path):
        records_file = JsonFile(tmp_path / "records.json")

        with pytest.raises(RuntimeError):
            with records_file.update() as records:
                records.append({"id": 1})
                raise RuntimeError("boom")

        assert records_file.load() == []


class TestJsonCatalogStore:

    def test_find_book(self, catalog):
        book = catalog.find_book_by_id(1)
        assert book.title == "Dune"
        assert book.price == Money.of("100000")
        assert book.stock_quantity == 10

    def test_missing_records_return_none(self, catalog):
        assert catalog.find_book_by_id(99) is None
        assert catalog.find_user_by_id(99) is None

    def test_find_user(self, catalog):
        assert catalog.find_user_by_id(1).username == "alice"

    def test_duplicate_username_rejected(self, catalog):
        with pytest.raises(InvalidRequest, match="already exists"):
            catalog.add_user("alice")

    def test_prices_stored_as_strings(self, tmp_path, catalog):
        raw = json.loads((tmp_path / "books.json").read_text())
        assert raw[1]["price"] == "12.50"


class TestJsonInventoryLedger:

    def test_reserve_returns_current_price_and_decrements(self, ledger):
        assert ledger.reserve(1, 3) == Money.of("100000")
        assert ledger.stock_of(1) == 7

    def test_reserve_too_many(self, ledger):
        with pytest.raises(InsufficientStock):
            ledger.reserve(2, 2)
        assert ledger.stock_of(2) == 1

    def test_release(self, ledger):
        ledger.release(2, 4)
        assert ledger.stock_of(2) == 5

    def test_unknown_book(self, ledger):
        with pytest.raises(BookNotFound):
            ledger.reserve(99, 1)
        with pytest.raises(BookNotFound):
            ledger.release(99, 1)

    def test_last_copy_race(self, tmp_path, catalog):
        # Separate ledger instances on the same file still share its lock
        ledgers = [JsonInventoryLedger(tmp_path / "books.json") for _ in range(8)]
        barrier = threading.Barrier(len(ledgers))
        outcomes: list[str] = []

        def attempt(ledger):
            barrier.wait()
            try:
                ledger.reserve(2, 1)
                outcomes.append("ok")
            except InsufficientStock:
                outcomes.append("short")

        threads = [threading.Thread(target=attempt, args=(lg,)) for lg in ledgers]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert sorted(outcomes) == ["ok"] + ["short"] * 7
        assert ledgers[0].stock_of(2) == 0


class TestJsonOrderRepository:

    def test_save_assigns_sequential_ids(self, order_repo):
        first, second = _order(), _order()
        order_repo.save(first)
        order_repo.save(second)
        assert (first.id, second.id) == (1, 2)

    def test_round_trip(self, order_repo):
        order = _order()
        order_repo.save(order)

        loaded = order_repo.get_by_id(order.id)

        assert loaded == order
        assert loaded.items[0].unit_price == Money.of("12.50")
        assert loaded.created_at.tzinfo is not None

    def test_get_missing(self, order_repo):
        assert order_repo.get_by_id(5) is None

    def test_listings(self, order_repo):
        jan = datetime(2024, 1, 1, tzinfo=timezone.utc)
        feb = datetime(2024, 2, 1, tzinfo=timezone.utc)
        order_repo.save(_order(user_id=1, created_at=jan))
        order_repo.save(_order(user_id=1, status=OrderStatus.DELIVERED, created_at=feb))
        order_repo.save(_order(user_id=2, created_at=feb))

        assert [o.id for o in order_repo.list_by_user(1)] == [2, 1]
        assert [o.id for o in order_repo.list_by_status(OrderStatus.PENDING)] == [3, 1]
        assert [o.id for o in order_repo.list_all(start=feb)] == [3, 2]
        assert [o.id for o in order_repo.list_all(end=jan)] == [1]

    def test_compare_and_set_status(self, order_repo):
        order = _order()
        order_repo.save(order)

        assert order_repo.compare_and_set_status(
            order.id, OrderStatus.PENDING, OrderStatus.CONFIRMED
        )
        assert not order_repo.compare_and_set_status(
            order.id, OrderStatus.PENDING, OrderStatus.CANCELLED
        )
        assert not order_repo.compare_and_set_status(
            99, OrderStatus.PENDING, OrderStatus.CANCELLED
        )
        assert order_repo.get_by_id(order.id).status == OrderStatus.CONFIRMED


class TestJsonEndToEnd:

    def test_create_then_cancel(self, catalog, ledger, order_repo):
        create = CreateOrderHandler(order_repo, catalog, ledger)
        cancel = CancelOrderHandler(order_repo, catalog, ledger)

        dto = create.handle(1, "1 Main St", [OrderItemSpec(1, 3)])
        assert dto.total_amount == "$300,000.00"
        assert ledger.stock_of(1) == 7

        cancel.handle(dto.id, requesting_user_id=1)
        assert ledger.stock_of(1) == 10

    def test_failed_order_leaves_files_unchanged(self, catalog, ledger, order_repo):
        create = CreateOrderHandler(order_repo, catalog, ledger)

        with pytest.raises(InsufficientStock):
            create.handle(1, "1 Main St", [OrderItemSpec(1, 3), OrderItemSpec(2, 5)])

        assert ledger.stock_of(1) == 10
        assert ledger.stock_of(2) == 1
        assert order_repo.list_all() == []
