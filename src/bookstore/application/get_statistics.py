"""Application service: order statistics (queries).

Every call reads the current orders from the repository; there is no
separately maintained revenue ledger to drift out of sync.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

from bookstore.application.dto import OrderDTO, as_utc, order_to_dto
from bookstore.domain.exceptions import InvalidRequest
from bookstore.domain.repository.order_repository import OrderRepository
from bookstore.domain.service import order_statistics


@dataclass(frozen=True)
class StatisticsDTO:

    total_orders: int
    pending: int
    confirmed: int
    shipped: int
    delivered: int
    cancelled: int
    total_revenue: str


@dataclass(frozen=True)
class MonthlyStatDTO:

    year: int
    month: int
    order_count: int
    revenue: str


class GetStatisticsHandler:

    def __init__(self, order_repo: OrderRepository) -> None:
        self._order_repo = order_repo

    def handle(
        self,
        start: datetime | None = None,
        end: datetime | None = None,
    ) -> StatisticsDTO:
        """Counts per status and delivered revenue, optionally windowed."""
        start, end = as_utc(start), as_utc(end)
        if start is not None and end is not None and start > end:
            raise InvalidRequest("Statistics window start must not be after its end")

        stats = order_statistics.summarize(self._order_repo.list_all(start, end))
        counts = {status.value.lower(): n for status, n in stats.counts.items()}
        return StatisticsDTO(
            total_orders=stats.total_orders,
            total_revenue=str(stats.total_revenue),
            **counts,
        )

    def monthly(self) -> list[MonthlyStatDTO]:
        return [
            MonthlyStatDTO(
                year=m.year,
                month=m.month,
                order_count=m.order_count,
                revenue=str(m.revenue),
            )
            for m in order_statistics.monthly_revenue(self._order_repo.list_all())
        ]

    def largest(self, limit: int = order_statistics.DEFAULT_LARGEST_LIMIT) -> list[OrderDTO]:
        if limit <= 0:
            raise InvalidRequest("Limit must be positive")
        orders = order_statistics.largest_orders(self._order_repo.list_all(), limit)
        return [order_to_dto(o) for o in orders]
