"""SQLAlchemy-backed implementations of the domain repositories.

Stock changes are single conditional UPDATE statements, so the database
serializes concurrent reservations on the same row: two orders for the
last copy cannot both see it.  Order status changes are compare-and-set
on the status column for the same reason.
"""

from __future__ import annotations

from collections import defaultdict
from datetime import datetime, timezone
from decimal import Decimal
from pathlib import Path

from sqlalchemy import Engine, create_engine, insert, select, update
from sqlalchemy.engine import make_url
from sqlalchemy.exc import IntegrityError

from bookstore.domain.exceptions import BookNotFound, InsufficientStock, InvalidRequest
from bookstore.domain.model.book import Book
from bookstore.domain.model.order import Order, OrderItem, OrderStatus
from bookstore.domain.model.user import User
from bookstore.domain.model.value_objects import CENTS, Money, Quantity
from bookstore.domain.repository.catalog_store import CatalogStore
from bookstore.domain.repository.inventory_ledger import InventoryLedger
from bookstore.domain.repository.order_repository import OrderRepository
from bookstore.infrastructure.persistence.sql_schema import (
    books_tbl,
    metadata,
    order_items_tbl,
    orders_tbl,
    users_tbl,
)


def create_sql_engine(database_url: str) -> Engine:
    """Create an engine and make sure the schema exists."""
    url = make_url(database_url)
    if url.get_backend_name() == "sqlite" and url.database not in (None, "", ":memory:"):
        Path(url.database).parent.mkdir(parents=True, exist_ok=True)

    engine = create_engine(url, pool_pre_ping=True)
    metadata.create_all(engine)
    return engine


def _money(value, currency: str) -> Money:
    return Money(Decimal(value).quantize(CENTS), currency)


def _utc(moment: datetime) -> datetime:
    # SQLite hands back naive datetimes; everything is stored as UTC.
    if moment.tzinfo is None:
        return moment.replace(tzinfo=timezone.utc)
    return moment.astimezone(timezone.utc)


class SqlCatalogStore(CatalogStore):

    def __init__(self, engine: Engine) -> None:
        self._engine = engine

    def find_book_by_id(self, book_id: int) -> Book | None:
        with self._engine.connect() as conn:
            row = conn.execute(
                select(books_tbl).where(books_tbl.c.id == book_id)
            ).first()
        return self._book(row) if row else None

    def find_user_by_id(self, user_id: int) -> User | None:
        with self._engine.connect() as conn:
            row = conn.execute(
                select(users_tbl).where(users_tbl.c.id == user_id)
            ).first()
        return User(id=row.id, username=row.username) if row else None

    # --- Seeding helpers ------------------------------------------------------

    def list_books(self) -> list[Book]:
        with self._engine.connect() as conn:
            rows = conn.execute(select(books_tbl).order_by(books_tbl.c.id)).all()
        return [self._book(row) for row in rows]

    def add_book(self, title: str, price: Money, stock_quantity: int) -> Book:
        if not title or not title.strip():
            raise InvalidRequest("Book title is required")
        if stock_quantity < 0:
            raise InvalidRequest("Stock cannot be negative")
        with self._engine.begin() as conn:
            result = conn.execute(
                insert(books_tbl).values(
                    title=title.strip(),
                    price=price.amount,
                    currency=price.currency,
                    stock_quantity=stock_quantity,
                )
            )
            book_id = result.inserted_primary_key[0]
        return Book(id=book_id, title=title.strip(), price=price, stock_quantity=stock_quantity)

    def add_user(self, username: str) -> User:
        if not username or not username.strip():
            raise InvalidRequest("Username is required")
        try:
            with self._engine.begin() as conn:
                result = conn.execute(insert(users_tbl).values(username=username.strip()))
                user_id = result.inserted_primary_key[0]
        except IntegrityError as exc:
            raise InvalidRequest(f"User '{username}' already exists") from exc
        return User(id=user_id, username=username.strip())

    @staticmethod
    def _book(row) -> Book:
        return Book(
            id=row.id,
            title=row.title,
            price=_money(row.price, row.currency),
            stock_quantity=row.stock_quantity,
        )


class SqlInventoryLedger(InventoryLedger):

    def __init__(self, engine: Engine) -> None:
        self._engine = engine

    def reserve(self, book_id: int, quantity: int) -> Money:
        if quantity <= 0:
            raise InvalidRequest("Reservation quantity must be positive")
        with self._engine.begin() as conn:
            result = conn.execute(
                update(books_tbl)
                .where(
                    books_tbl.c.id == book_id,
                    books_tbl.c.stock_quantity >= quantity,
                )
                .values(stock_quantity=books_tbl.c.stock_quantity - quantity)
            )
            # The row stays locked by our UPDATE until commit, so the price
            # read here is the one in force at reservation time.
            row = conn.execute(
                select(books_tbl.c.price, books_tbl.c.currency, books_tbl.c.stock_quantity)
                .where(books_tbl.c.id == book_id)
            ).first()
            if row is None:
                raise BookNotFound(book_id)
            if result.rowcount != 1:
                raise InsufficientStock(book_id, quantity, row.stock_quantity)
        return _money(row.price, row.currency)

    def release(self, book_id: int, quantity: int) -> None:
        if quantity <= 0:
            raise InvalidRequest("Release quantity must be positive")
        with self._engine.begin() as conn:
            result = conn.execute(
                update(books_tbl)
                .where(books_tbl.c.id == book_id)
                .values(stock_quantity=books_tbl.c.stock_quantity + quantity)
            )
            if result.rowcount != 1:
                raise BookNotFound(book_id)

    def stock_of(self, book_id: int) -> int:
        with self._engine.connect() as conn:
            stock = conn.execute(
                select(books_tbl.c.stock_quantity).where(books_tbl.c.id == book_id)
            ).scalar_one_or_none()
        if stock is None:
            raise BookNotFound(book_id)
        return stock


class SqlOrderRepository(OrderRepository):

    def __init__(self, engine: Engine) -> None:
        self._engine = engine

    def save(self, order: Order) -> None:
        with self._engine.begin() as conn:
            result = conn.execute(
                insert(orders_tbl).values(
                    user_id=order.user_id,
                    status=order.status,
                    total_amount=order.total_amount.amount,
                    currency=order.total_amount.currency,
                    shipping_address=order.shipping_address,
                    payment_method=order.payment_method,
                    created_at=_utc(order.created_at),
                )
            )
            order_id = result.inserted_primary_key[0]
            conn.execute(
                insert(order_items_tbl),
                [
                    {
                        "order_id": order_id,
                        "position": position,
                        "book_id": item.book_id,
                        "book_title": item.book_title,
                        "quantity": item.quantity.value,
                        "unit_price": item.unit_price.amount,
                    }
                    for position, item in enumerate(order.items)
                ],
            )
        order.id = order_id

    def get_by_id(self, order_id: int) -> Order | None:
        orders = self._fetch(orders_tbl.c.id == order_id)
        return orders[0] if orders else None

    def list_by_user(self, user_id: int) -> list[Order]:
        return self._fetch(orders_tbl.c.user_id == user_id)

    def list_by_status(self, status: OrderStatus) -> list[Order]:
        return self._fetch(orders_tbl.c.status == status)

    def list_all(
        self,
        start: datetime | None = None,
        end: datetime | None = None,
    ) -> list[Order]:
        criteria = []
        if start is not None:
            criteria.append(orders_tbl.c.created_at >= _utc(start))
        if end is not None:
            criteria.append(orders_tbl.c.created_at <= _utc(end))
        return self._fetch(*criteria)

    def compare_and_set_status(
        self,
        order_id: int,
        expected: OrderStatus,
        new: OrderStatus,
    ) -> bool:
        with self._engine.begin() as conn:
            result = conn.execute(
                update(orders_tbl)
                .where(orders_tbl.c.id == order_id, orders_tbl.c.status == expected)
                .values(status=new)
            )
        return result.rowcount == 1

    # --- Loading ----------------------------------------------------------------

    def _fetch(self, *criteria) -> list[Order]:
        """Load matching orders and all their items in two queries."""
        stmt = select(orders_tbl).order_by(
            orders_tbl.c.created_at.desc(), orders_tbl.c.id.desc()
        )
        if criteria:
            stmt = stmt.where(*criteria)

        with self._engine.connect() as conn:
            rows = conn.execute(stmt).all()
            if not rows:
                return []
            item_rows = conn.execute(
                select(order_items_tbl)
                .where(order_items_tbl.c.order_id.in_([r.id for r in rows]))
                .order_by(order_items_tbl.c.order_id, order_items_tbl.c.position)
            ).all()

        items_by_order: dict[int, list] = defaultdict(list)
        for item_row in item_rows:
            items_by_order[item_row.order_id].append(item_row)

        return [self._to_domain(row, items_by_order[row.id]) for row in rows]

    @staticmethod
    def _to_domain(row, item_rows: list) -> Order:
        items = tuple(
            OrderItem(
                book_id=i.book_id,
                book_title=i.book_title,
                quantity=Quantity(i.quantity),
                unit_price=_money(i.unit_price, row.currency),
            )
            for i in item_rows
        )
        return Order(
            id=row.id,
            user_id=row.user_id,
            items=items,
            total_amount=_money(row.total_amount, row.currency),
            shipping_address=row.shipping_address,
            payment_method=row.payment_method,
            status=OrderStatus(row.status),
            created_at=_utc(row.created_at),
        )
