"""Unit tests for the Order aggregate and its business rules."""

import pytest

from bookstore.domain.exceptions import InvalidRequest, InvalidState
from bookstore.domain.model.order import (
    Order,
    OrderItem,
    OrderStatus,
    releases_stock,
    validate_transition,
)
from bookstore.domain.model.value_objects import Money, Quantity


def _make_item(book_id: int = 1, qty: int = 1, price: str = "15.00") -> OrderItem:
    """Helper to build a valid line item."""
    return OrderItem(
        book_id=book_id,
        book_title=f"Book {book_id}",
        quantity=Quantity(qty),
        unit_price=Money.of(price),
    )


def _make_order(status: OrderStatus = OrderStatus.PENDING) -> Order:
    order = Order.create(1, "1 Main St", [_make_item()])
    order.id = 1
    order.status = status
    return order


class TestOrderCreation:

    def test_happy_path(self):
        order = Order.create(
            user_id=1,
            shipping_address="1 Main St",
            items=[_make_item(qty=2, price="10.00")],
            payment_method="COD",
        )
        assert order.user_id == 1
        assert order.status == OrderStatus.PENDING
        assert order.payment_method == "COD"
        assert len(order.items) == 1
        assert order.total_amount == Money.of("20.00")

    def test_id_is_none_for_new_orders(self):
        order = Order.create(1, "1 Main St", [_make_item()])
        assert order.id is None  # assigned by repository

    def test_total_is_sum_of_subtotals(self):
        items = [
            _make_item(1, qty=3, price="100000"),
            _make_item(2, qty=5, price="25.00"),
        ]
        order = Order.create(1, "1 Main St", items)
        assert order.total_amount == Money.of("300125.00")
        assert order.total_amount == order.items_total

    def test_items_keep_insertion_order(self):
        items = [_make_item(3), _make_item(1), _make_item(2)]
        order = Order.create(1, "1 Main St", items)
        assert [i.book_id for i in order.items] == [3, 1, 2]

    def test_address_is_trimmed(self):
        order = Order.create(1, "  1 Main St  ", [_make_item()])
        assert order.shipping_address == "1 Main St"

    def test_payment_method_optional(self):
        order = Order.create(1, "1 Main St", [_make_item()])
        assert order.payment_method is None


class TestOrderValidation:

    def test_blank_address_rejected(self):
        with pytest.raises(InvalidRequest, match="Shipping address"):
            Order.create(1, "   ", [_make_item()])

    def test_no_items_rejected(self):
        with pytest.raises(InvalidRequest, match="at least one item"):
            Order.create(1, "1 Main St", [])


class TestOrderItem:

    def test_subtotal_calculation(self):
        item = _make_item(qty=3, price="15.00")
        assert item.subtotal == Money.of("45.00")

    def test_item_is_immutable(self):
        item = _make_item()
        with pytest.raises(AttributeError):
            item.unit_price = Money.of("1.00")  # type: ignore[misc]


class TestSequentialTransitions:

    @pytest.mark.parametrize(
        "current, target",
        [
            (OrderStatus.PENDING, OrderStatus.CONFIRMED),
            (OrderStatus.CONFIRMED, OrderStatus.SHIPPED),
            (OrderStatus.SHIPPED, OrderStatus.DELIVERED),
        ],
    )
    def test_next_step_allowed(self, current, target):
        validate_transition(current, target)

    def test_skipping_rejected(self):
        with pytest.raises(InvalidState, match="next status is CONFIRMED"):
            validate_transition(OrderStatus.PENDING, OrderStatus.SHIPPED)

    def test_going_backwards_rejected(self):
        with pytest.raises(InvalidState):
            validate_transition(OrderStatus.SHIPPED, OrderStatus.CONFIRMED)

    def test_nothing_after_delivered(self):
        with pytest.raises(InvalidState):
            validate_transition(OrderStatus.DELIVERED, OrderStatus.SHIPPED)


class TestCancellation:

    @pytest.mark.parametrize("status", [OrderStatus.PENDING, OrderStatus.CONFIRMED])
    def test_cancellable_statuses(self, status):
        order = _make_order(status)
        previous = order.cancel()
        assert previous == status
        assert order.status == OrderStatus.CANCELLED

    @pytest.mark.parametrize("status", [OrderStatus.SHIPPED, OrderStatus.DELIVERED])
    def test_shipped_or_delivered_not_cancellable(self, status):
        order = _make_order(status)
        with pytest.raises(InvalidState, match=f"in {status.value} status"):
            order.cancel()
        assert order.status == status

    def test_cancel_twice_rejected(self):
        order = _make_order()
        order.cancel()
        with pytest.raises(InvalidState, match="already cancelled"):
            order.cancel()

    def test_cancel_keeps_total(self):
        order = _make_order()
        before = order.total_amount
        order.cancel()
        assert order.total_amount == before


class TestOverride:

    def test_override_may_jump(self):
        order = _make_order()
        order.transition_to(OrderStatus.SHIPPED, override=True)
        assert order.status == OrderStatus.SHIPPED

    def test_override_may_cancel_delivered(self):
        order = _make_order(OrderStatus.DELIVERED)
        order.transition_to(OrderStatus.CANCELLED, override=True)
        assert order.status == OrderStatus.CANCELLED

    def test_override_cannot_revive_cancelled(self):
        order = _make_order(OrderStatus.CANCELLED)
        with pytest.raises(InvalidState, match="already cancelled"):
            order.transition_to(OrderStatus.PENDING, override=True)

    def test_override_recancel_is_noop(self):
        order = _make_order(OrderStatus.CANCELLED)
        previous = order.transition_to(OrderStatus.CANCELLED, override=True)
        assert previous == OrderStatus.CANCELLED


class TestReleasesStock:

    def test_entering_cancelled_releases(self):
        assert releases_stock(OrderStatus.SHIPPED, OrderStatus.CANCELLED)

    def test_staying_cancelled_does_not_release(self):
        assert not releases_stock(OrderStatus.CANCELLED, OrderStatus.CANCELLED)

    def test_forward_moves_do_not_release(self):
        assert not releases_stock(OrderStatus.PENDING, OrderStatus.SHIPPED)


class TestStatusParsing:

    def test_parse_is_case_insensitive(self):
        assert OrderStatus.parse("shipped") == OrderStatus.SHIPPED

    def test_parse_unknown_rejected(self):
        with pytest.raises(InvalidRequest, match="Unknown order status"):
            OrderStatus.parse("LOST")

    def test_tokens(self):
        assert [s.value for s in OrderStatus] == [
            "PENDING", "CONFIRMED", "SHIPPED", "DELIVERED", "CANCELLED",
        ]
