"""Read-side statistics derived from persisted orders.

Pure functions over a list of orders. Nothing is cached: callers pass
whatever the order repository holds right now. Revenue is recognised on
delivery, so only DELIVERED orders contribute to it.
"""

from __future__ import annotations

from dataclasses import dataclass

from bookstore.domain.model.order import Order, OrderStatus
from bookstore.domain.model.value_objects import Money

DEFAULT_LARGEST_LIMIT = 10


@dataclass(frozen=True)
class OrderStatistics:

    total_orders: int
    counts: dict[OrderStatus, int]
    total_revenue: Money

    def count(self, status: OrderStatus) -> int:
        return self.counts.get(status, 0)


@dataclass(frozen=True)
class MonthlyRevenue:

    year: int
    month: int
    order_count: int
    revenue: Money


def _currency_of(orders: list[Order]) -> str:
    return orders[0].total_amount.currency if orders else "USD"


def delivered_revenue(orders: list[Order]) -> Money:
    return Money.total(
        [o.total_amount for o in orders if o.status == OrderStatus.DELIVERED],
        _currency_of(orders),
    )


def summarize(orders: list[Order]) -> OrderStatistics:
    counts = {status: 0 for status in OrderStatus}
    for order in orders:
        counts[order.status] += 1
    return OrderStatistics(
        total_orders=len(orders),
        counts=counts,
        total_revenue=delivered_revenue(orders),
    )


def monthly_revenue(orders: list[Order]) -> list[MonthlyRevenue]:
    """Delivered-order count and revenue per (year, month), oldest first."""
    buckets: dict[tuple[int, int], list[Order]] = {}
    for order in orders:
        if order.status != OrderStatus.DELIVERED:
            continue
        key = (order.created_at.year, order.created_at.month)
        buckets.setdefault(key, []).append(order)

    return [
        MonthlyRevenue(
            year=year,
            month=month,
            order_count=len(bucket),
            revenue=delivered_revenue(bucket),
        )
        for (year, month), bucket in sorted(buckets.items())
    ]


def largest_orders(orders: list[Order], limit: int = DEFAULT_LARGEST_LIMIT) -> list[Order]:
    """Top *limit* orders by total amount, ties broken by lower id."""
    by_id = sorted(orders, key=lambda o: o.id or 0)
    ranked = sorted(by_id, key=lambda o: o.total_amount, reverse=True)
    return ranked[:limit]
