"""Application service: order listings (queries). All newest first."""

from __future__ import annotations

from datetime import datetime

from bookstore.application.dto import OrderDTO, as_utc, order_to_dto
from bookstore.domain.model.order import OrderStatus
from bookstore.domain.repository.order_repository import OrderRepository


class ListOrdersHandler:

    def __init__(self, order_repo: OrderRepository) -> None:
        self._order_repo = order_repo

    def by_user(self, user_id: int) -> list[OrderDTO]:
        return [order_to_dto(o) for o in self._order_repo.list_by_user(user_id)]

    def by_status(self, status: OrderStatus | str) -> list[OrderDTO]:
        orders = self._order_repo.list_by_status(OrderStatus.parse(status))
        return [order_to_dto(o) for o in orders]

    def between(
        self,
        start: datetime | None = None,
        end: datetime | None = None,
    ) -> list[OrderDTO]:
        orders = self._order_repo.list_all(as_utc(start), as_utc(end))
        return [order_to_dto(o) for o in orders]
