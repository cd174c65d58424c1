"""JSON-file-backed implementation of OrderRepository."""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from pathlib import Path

from bookstore.domain.model.order import Order, OrderItem, OrderStatus
from bookstore.domain.model.value_objects import Money, Quantity
from bookstore.domain.repository.order_repository import (
    OrderRepository,
    created_within,
    newest_first,
)
from bookstore.infrastructure.persistence.json_file import JsonFile, next_id


class JsonOrderRepository(OrderRepository):

    def __init__(self, file_path: Path) -> None:
        self._orders = JsonFile(file_path)

    # --- OrderRepository interface --------------------------------------------

    def save(self, order: Order) -> None:
        with self._orders.update() as records:
            order_id = next_id(records)
            records.append(self._to_raw(order, order_id))
        order.id = order_id

    def get_by_id(self, order_id: int) -> Order | None:
        for raw in self._orders.load():
            if raw["id"] == order_id:
                return self._to_domain(raw)
        return None

    def list_by_user(self, user_id: int) -> list[Order]:
        return newest_first(
            [o for o in self._load_all() if o.user_id == user_id]
        )

    def list_by_status(self, status: OrderStatus) -> list[Order]:
        return newest_first(
            [o for o in self._load_all() if o.status == status]
        )

    def list_all(
        self,
        start: datetime | None = None,
        end: datetime | None = None,
    ) -> list[Order]:
        return newest_first(
            [o for o in self._load_all() if created_within(o, start, end)]
        )

    def compare_and_set_status(
        self,
        order_id: int,
        expected: OrderStatus,
        new: OrderStatus,
    ) -> bool:
        with self._orders.update() as records:
            for raw in records:
                if raw["id"] == order_id:
                    if raw["status"] != expected.value:
                        return False
                    raw["status"] = new.value
                    return True
        return False

    # --- Serialization --------------------------------------------------------

    def _load_all(self) -> list[Order]:
        return [self._to_domain(raw) for raw in self._orders.load()]

    @staticmethod
    def _to_raw(order: Order, order_id: int) -> dict:
        return {
            "id": order_id,
            "user_id": order.user_id,
            "status": order.status.value,
            "shipping_address": order.shipping_address,
            "payment_method": order.payment_method,
            "total_amount": str(order.total_amount.amount),
            "currency": order.total_amount.currency,
            "created_at": order.created_at.isoformat(),
            "items": [
                {
                    "book_id": item.book_id,
                    "book_title": item.book_title,
                    "quantity": item.quantity.value,
                    "unit_price": str(item.unit_price.amount),
                }
                for item in order.items
            ],
        }

    @staticmethod
    def _to_domain(raw: dict) -> Order:
        currency = raw.get("currency", "USD")
        items = tuple(
            OrderItem(
                book_id=i["book_id"],
                book_title=i["book_title"],
                quantity=Quantity(i["quantity"]),
                unit_price=Money(Decimal(i["unit_price"]), currency),
            )
            for i in raw["items"]
        )
        return Order(
            id=raw["id"],
            user_id=raw["user_id"],
            items=items,
            total_amount=Money(Decimal(raw["total_amount"]), currency),
            shipping_address=raw["shipping_address"],
            payment_method=raw.get("payment_method"),
            status=OrderStatus(raw["status"]),
            created_at=datetime.fromisoformat(raw["created_at"]),
        )
