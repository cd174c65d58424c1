"""Application service: Show Order use case (query)."""

from __future__ import annotations

from bookstore.application.dto import OrderDTO, order_to_dto
from bookstore.domain.exceptions import Forbidden, OrderNotFound
from bookstore.domain.repository.order_repository import OrderRepository


class ShowOrderHandler:

    def __init__(self, order_repo: OrderRepository) -> None:
        self._order_repo = order_repo

    def handle(self, order_id: int, requesting_user_id: int | None = None) -> OrderDTO:
        """Return one order.

        When *requesting_user_id* is given the order must belong to that
        user; staff views pass None.
        """
        order = self._order_repo.get_by_id(order_id)
        if order is None:
            raise OrderNotFound(order_id)
        if requesting_user_id is not None and not order.is_owned_by(requesting_user_id):
            raise Forbidden(
                f"User #{requesting_user_id} may not view order #{order_id}"
            )
        return order_to_dto(order)
