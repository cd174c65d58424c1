"""Domain service: Order status transitions.

Every status change, customer or administrative, goes through
``transition``.  The aggregate validates the move, the repository
swaps the status only if nobody changed it in the meantime, and only
the winner of that swap releases stock.  Flipping the status before
releasing is what makes the release happen exactly once per order.
"""

from __future__ import annotations

import structlog

from bookstore.domain.exceptions import InvalidState
from bookstore.domain.model.order import Order, OrderStatus, releases_stock
from bookstore.domain.repository.order_repository import OrderRepository
from bookstore.domain.service.stock_reservation_service import (
    StockReservationService,
)

logger = structlog.get_logger(__name__)


class OrderTransitionService:

    def __init__(
        self,
        order_repo: OrderRepository,
        stock_service: StockReservationService,
    ) -> None:
        self._order_repo = order_repo
        self._stock_service = stock_service

    def transition(
        self,
        order: Order,
        target: OrderStatus,
        *,
        override: bool = False,
    ) -> Order:
        previous = order.transition_to(target, override=override)

        if previous != target:
            swapped = self._order_repo.compare_and_set_status(
                order.id, previous, target  # type: ignore[arg-type]
            )
            if not swapped:
                order.status = previous
                raise InvalidState(
                    f"Order #{order.id} changed status concurrently; reload and retry"
                )

        if releases_stock(previous, target):
            self._stock_service.release_items(order.items)

        logger.info(
            "order_status_changed",
            order_id=order.id,
            old_status=previous.value,
            new_status=target.value,
            override=override,
        )
        return order
