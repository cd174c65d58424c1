"""Application service: Cancel Order use case (customer path).

Only the owner may cancel, and only while the order is PENDING or
CONFIRMED.  Every precondition is checked before anything changes, so
a rejected cancellation leaves both the order and stock untouched.
Stock for every line item is released exactly once.
"""

from __future__ import annotations

import structlog

from bookstore.application.dto import OrderDTO, order_to_dto
from bookstore.domain.exceptions import Forbidden, OrderNotFound
from bookstore.domain.model.order import OrderStatus
from bookstore.domain.repository.catalog_store import CatalogStore
from bookstore.domain.repository.inventory_ledger import InventoryLedger
from bookstore.domain.repository.order_repository import OrderRepository
from bookstore.domain.service.order_transition_service import OrderTransitionService
from bookstore.domain.service.stock_reservation_service import (
    StockReservationService,
)

logger = structlog.get_logger(__name__)


class CancelOrderHandler:

    def __init__(
        self,
        order_repo: OrderRepository,
        catalog: CatalogStore,
        ledger: InventoryLedger,
    ) -> None:
        self._order_repo = order_repo
        self._transitions = OrderTransitionService(
            order_repo, StockReservationService(catalog, ledger)
        )

    def handle(self, order_id: int, requesting_user_id: int) -> OrderDTO:
        order = self._order_repo.get_by_id(order_id)
        if order is None:
            raise OrderNotFound(order_id)

        if not order.is_owned_by(requesting_user_id):
            raise Forbidden(
                f"User #{requesting_user_id} may not cancel order #{order_id}"
            )

        self._transitions.transition(order, OrderStatus.CANCELLED)
        logger.info("order_cancelled", order_id=order_id, user_id=requesting_user_id)
        return order_to_dto(order)
