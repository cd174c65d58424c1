"""Domain service: Stock Reservation.

This service coordinates the cross-aggregate operation of taking stock
out of the inventory ledger for a cart and handing it back for an
order.  It lives in the domain layer because the all-or-nothing rule is
a core business rule, not just orchestration.

Reservation is item by item against the ledger (each step atomic per
book) with compensation: if any item fails, every reservation already
made in the same call is released before the error propagates.
"""

from __future__ import annotations

from collections.abc import Iterable

import structlog

from bookstore.domain.exceptions import BookNotFound
from bookstore.domain.model.order import OrderItem
from bookstore.domain.model.value_objects import Quantity
from bookstore.domain.repository.catalog_store import CatalogStore
from bookstore.domain.repository.inventory_ledger import InventoryLedger

logger = structlog.get_logger(__name__)


class StockReservationService:

    def __init__(self, catalog: CatalogStore, ledger: InventoryLedger) -> None:
        self._catalog = catalog
        self._ledger = ledger

    def reserve_items(self, requests: Iterable[tuple[int, int]]) -> list[OrderItem]:
        """Reserve stock for every ``(book_id, quantity)`` pair.

        Returns one OrderItem per request, in request order, carrying the
        unit price the ledger captured at reservation time.
        """
        reserved: list[OrderItem] = []
        try:
            for book_id, quantity in requests:
                book = self._catalog.find_book_by_id(book_id)
                if book is None:
                    raise BookNotFound(book_id)

                unit_price = self._ledger.reserve(book_id, quantity)
                logger.debug("stock_reserved", book_id=book_id, quantity=quantity)
                reserved.append(
                    OrderItem(
                        book_id=book_id,
                        book_title=book.title,
                        quantity=Quantity(quantity),
                        unit_price=unit_price,  # <-- price snapshot
                    )
                )
        except Exception:
            self.compensate(reserved)
            raise
        return reserved

    def compensate(self, items: list[OrderItem]) -> None:
        """Undo reservations made earlier in the same attempt."""
        if not items:
            return
        self.release_items(reversed(items))
        logger.info(
            "reservation_rolled_back",
            book_ids=[item.book_id for item in items],
        )

    def release_items(self, items: Iterable[OrderItem]) -> None:
        """Hand every item's quantity back to the ledger.

        A book deleted from the catalog must not block the rest of the
        release, so BookNotFound is logged and skipped.
        """
        for item in items:
            try:
                self._ledger.release(item.book_id, item.quantity.value)
            except BookNotFound:
                logger.warning(
                    "release_skipped_missing_book",
                    book_id=item.book_id,
                    quantity=item.quantity.value,
                )
                continue
            logger.debug(
                "stock_released", book_id=item.book_id, quantity=item.quantity.value
            )
