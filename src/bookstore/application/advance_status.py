"""Application service: status changes driven by staff.

``AdvanceStatusHandler`` is the administrative override: it may jump to
any status out of sequence.  ``ProgressOrderHandler`` backs the
confirm/ship/deliver actions and only moves one step at a time.  Both
go through the same transition rules, so entering CANCELLED from a live
status always hands the order's stock back.
"""

from __future__ import annotations

from bookstore.application.dto import OrderDTO, order_to_dto
from bookstore.domain.exceptions import OrderNotFound
from bookstore.domain.model.order import Order, OrderStatus
from bookstore.domain.repository.catalog_store import CatalogStore
from bookstore.domain.repository.inventory_ledger import InventoryLedger
from bookstore.domain.repository.order_repository import OrderRepository
from bookstore.domain.service.order_transition_service import OrderTransitionService
from bookstore.domain.service.stock_reservation_service import (
    StockReservationService,
)


class _StatusHandler:

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

    def _load(self, order_id: int) -> Order:
        order = self._order_repo.get_by_id(order_id)
        if order is None:
            raise OrderNotFound(order_id)
        return order


class AdvanceStatusHandler(_StatusHandler):

    def handle(self, order_id: int, new_status: OrderStatus | str) -> OrderDTO:
        """Set the status directly (administrative override)."""
        target = OrderStatus.parse(new_status)
        order = self._load(order_id)
        self._transitions.transition(order, target, override=True)
        return order_to_dto(order)


class ProgressOrderHandler(_StatusHandler):

    def confirm(self, order_id: int) -> OrderDTO:
        return self._step(order_id, OrderStatus.CONFIRMED)

    def ship(self, order_id: int) -> OrderDTO:
        return self._step(order_id, OrderStatus.SHIPPED)

    def deliver(self, order_id: int) -> OrderDTO:
        return self._step(order_id, OrderStatus.DELIVERED)

    def _step(self, order_id: int, target: OrderStatus) -> OrderDTO:
        order = self._load(order_id)
        self._transitions.transition(order, target)
        return order_to_dto(order)
