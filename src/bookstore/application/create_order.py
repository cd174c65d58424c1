"""Application service: Create Order use case.

Orchestrates the flow between the catalog, the inventory ledger and the
order repository.  This is the only place that turns a cart into an
order:

1. Validate the request shape (no stock is touched on bad input).
2. Resolve the user.
3. Reserve stock item by item, capturing prices (all or nothing).
4. Build the PENDING order and persist it with its items.

If persisting fails after stock was reserved, the reservations are
released before the error propagates.
"""

from __future__ import annotations

import structlog

from bookstore.application.dto import OrderDTO, OrderItemSpec, order_to_dto
from bookstore.domain.exceptions import InvalidRequest, UserNotFound
from bookstore.domain.model.order import Order
from bookstore.domain.model.value_objects import Quantity
from bookstore.domain.repository.catalog_store import CatalogStore
from bookstore.domain.repository.inventory_ledger import InventoryLedger
from bookstore.domain.repository.order_repository import OrderRepository
from bookstore.domain.service.stock_reservation_service import (
    StockReservationService,
)

logger = structlog.get_logger(__name__)


class CreateOrderHandler:

    def __init__(
        self,
        order_repo: OrderRepository,
        catalog: CatalogStore,
        ledger: InventoryLedger,
    ) -> None:
        self._order_repo = order_repo
        self._catalog = catalog
        self._stock = StockReservationService(catalog, ledger)

    def handle(
        self,
        user_id: int,
        shipping_address: str,
        item_specs: list[OrderItemSpec],
        payment_method: str | None = None,
    ) -> OrderDTO:
        """Create a new order and return it as persisted."""
        self._validate(shipping_address, item_specs)

        if self._catalog.find_user_by_id(user_id) is None:
            raise UserNotFound(user_id)

        items = self._stock.reserve_items(
            (spec.book_id, spec.quantity) for spec in item_specs
        )

        try:
            order = Order.create(
                user_id=user_id,
                shipping_address=shipping_address,
                items=items,
                payment_method=payment_method,
            )
            self._order_repo.save(order)
        except Exception:
            self._stock.compensate(items)
            raise

        logger.info(
            "order_created",
            order_id=order.id,
            user_id=user_id,
            item_count=len(order.items),
            total_amount=str(order.total_amount.amount),
        )
        return order_to_dto(order)

    @staticmethod
    def _validate(shipping_address: str, item_specs: list[OrderItemSpec]) -> None:
        if not item_specs:
            raise InvalidRequest("Order must contain at least one item")
        if not shipping_address or not shipping_address.strip():
            raise InvalidRequest("Shipping address is required")
        for spec in item_specs:
            try:
                Quantity(spec.quantity)
            except InvalidRequest as exc:
                raise InvalidRequest(f"Book #{spec.book_id}: {exc}") from exc
