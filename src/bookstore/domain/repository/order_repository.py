"""Abstract repository for Order aggregate."""

from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import datetime

from bookstore.domain.model.order import Order, OrderStatus


class OrderRepository(ABC):

    @abstractmethod
    def save(self, order: Order) -> None:
        """Persist a NEW order together with its items, atomically.

        Assigns ``order.id``. Orders are never updated wholesale after
        creation; status changes go through ``compare_and_set_status``.
        """

    @abstractmethod
    def get_by_id(self, order_id: int) -> Order | None:
        """Return an order by its ID, or None if not found."""

    @abstractmethod
    def list_by_user(self, user_id: int) -> list[Order]:
        """Return a user's orders, newest first."""

    @abstractmethod
    def list_by_status(self, status: OrderStatus) -> list[Order]:
        """Return orders in *status*, newest first."""

    @abstractmethod
    def list_all(
        self,
        start: datetime | None = None,
        end: datetime | None = None,
    ) -> list[Order]:
        """Return every order created within ``[start, end]``, newest first."""

    @abstractmethod
    def compare_and_set_status(
        self,
        order_id: int,
        expected: OrderStatus,
        new: OrderStatus,
    ) -> bool:
        """Set the status only if it still equals *expected*.

        Returns False when another writer changed it first. This is the
        per-order serialization point for every status change.
        """


# --- Helpers shared by non-SQL implementations --------------------------------


def created_within(order: Order, start: datetime | None, end: datetime | None) -> bool:
    if start is not None and order.created_at < start:
        return False
    if end is not None and order.created_at > end:
        return False
    return True


def newest_first(orders: list[Order]) -> list[Order]:
    return sorted(orders, key=lambda o: (o.created_at, o.id or 0), reverse=True)
