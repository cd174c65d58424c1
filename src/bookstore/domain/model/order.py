"""Order aggregate — the core of the domain.

The Order is an aggregate root that owns its line items. Line items are
value records holding a plain book id; they never point back at the
order or at a live catalog entry.

Every status rule lives in ``validate_transition`` so the customer,
sequential and administrative paths all agree on what is allowed.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum

from bookstore.domain.exceptions import InvalidRequest, InvalidState
from bookstore.domain.model.value_objects import Money, Quantity


class OrderStatus(Enum):
    PENDING = "PENDING"
    CONFIRMED = "CONFIRMED"
    SHIPPED = "SHIPPED"
    DELIVERED = "DELIVERED"
    CANCELLED = "CANCELLED"

    @staticmethod
    def parse(token: str | OrderStatus) -> OrderStatus:
        """Accept a status token in any case; reject anything else."""
        if isinstance(token, OrderStatus):
            return token
        try:
            return OrderStatus(token.strip().upper())
        except (ValueError, AttributeError) as exc:
            allowed = ", ".join(s.value for s in OrderStatus)
            raise InvalidRequest(
                f"Unknown order status {token!r} (expected one of {allowed})"
            ) from exc


# ---------------------------------------------------------------------------
# Transition rules
# ---------------------------------------------------------------------------
CANCELLABLE_STATUSES = frozenset({OrderStatus.PENDING, OrderStatus.CONFIRMED})

NEXT_STATUS = {
    OrderStatus.PENDING: OrderStatus.CONFIRMED,
    OrderStatus.CONFIRMED: OrderStatus.SHIPPED,
    OrderStatus.SHIPPED: OrderStatus.DELIVERED,
}


def validate_transition(
    current: OrderStatus,
    target: OrderStatus,
    *,
    override: bool = False,
) -> None:
    """Raise InvalidState unless ``current -> target`` is permitted.

    Without ``override`` only the next sequential step, or cancellation
    from PENDING/CONFIRMED, is allowed.  With ``override`` (administrative
    path) any jump is allowed except leaving CANCELLED, which is terminal;
    re-setting CANCELLED is accepted as a no-op.
    """
    if current == OrderStatus.CANCELLED:
        if override and target == OrderStatus.CANCELLED:
            return
        raise InvalidState("Order is already cancelled")

    if override:
        return

    if target == OrderStatus.CANCELLED:
        if current not in CANCELLABLE_STATUSES:
            raise InvalidState(
                f"Cannot cancel order in {current.value} status"
            )
        return

    expected = NEXT_STATUS.get(current)
    if target != expected:
        raise InvalidState(
            f"Cannot move order from {current.value} to {target.value}"
            + (f"; next status is {expected.value}" if expected else "")
        )


def releases_stock(previous: OrderStatus, target: OrderStatus) -> bool:
    """True when moving ``previous -> target`` must hand stock back."""
    return target == OrderStatus.CANCELLED and previous != OrderStatus.CANCELLED


@dataclass(frozen=True)
class OrderItem:
    """Captures the price of a book at order-creation time.

    The ``unit_price`` is never recalculated from the catalog, so later
    price changes do not touch existing orders.
    """

    book_id: int
    book_title: str
    quantity: Quantity
    unit_price: Money  # locked at order-creation time

    @property
    def subtotal(self) -> Money:
        return self.unit_price * self.quantity.value


@dataclass
class Order:
    """Aggregate root for customer orders.

    Use the ``Order.create()`` factory for new orders — it enforces all
    business rules and computes ``total_amount`` once.  The ``__init__``
    is intentionally simple so the repository can reconstitute persisted
    orders without re-validating.
    """

    id: int | None
    user_id: int
    items: tuple[OrderItem, ...]
    total_amount: Money
    shipping_address: str
    payment_method: str | None = None
    status: OrderStatus = OrderStatus.PENDING
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    # --- Factory (used for NEW orders only) -----------------------------------

    @staticmethod
    def create(
        user_id: int,
        shipping_address: str,
        items: list[OrderItem],
        payment_method: str | None = None,
    ) -> Order:
        """Create a new PENDING order, enforcing all invariants."""
        if not shipping_address or not shipping_address.strip():
            raise InvalidRequest("Shipping address is required")

        if not items:
            raise InvalidRequest("Order must contain at least one item")

        currency = items[0].unit_price.currency
        return Order(
            id=None,
            user_id=user_id,
            items=tuple(items),
            total_amount=Money.total([item.subtotal for item in items], currency),
            shipping_address=shipping_address.strip(),
            payment_method=payment_method.strip() if payment_method else None,
        )

    # --- State transitions ----------------------------------------------------

    def transition_to(self, target: OrderStatus, *, override: bool = False) -> OrderStatus:
        """Move to *target* if the rules allow it; return the previous status."""
        validate_transition(self.status, target, override=override)
        previous = self.status
        self.status = target
        return previous

    def cancel(self) -> OrderStatus:
        """Customer-facing cancellation, PENDING|CONFIRMED -> CANCELLED."""
        return self.transition_to(OrderStatus.CANCELLED)

    # --- Queries --------------------------------------------------------------

    def is_owned_by(self, user_id: int) -> bool:
        return self.user_id == user_id

    @property
    def items_total(self) -> Money:
        """Sum of line subtotals; always equal to ``total_amount``."""
        return Money.total(
            [item.subtotal for item in self.items], self.total_amount.currency
        )
