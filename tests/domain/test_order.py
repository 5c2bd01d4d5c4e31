"""Unit tests for the Order aggregate and its business rules."""

import pytest

from rentals.domain.exceptions import ValidationError
from rentals.domain.model.order import (
    Order,
    OrderLineItem,
    OrderStatus,
    TransactionType,
)
from rentals.domain.model.value_objects import DateRange, Quantity
from tests.fakes import d


def _make_item(product_id: str = "1", qty: int = 1) -> OrderLineItem:
    """Helper to build a valid line item."""
    return OrderLineItem(
        product_id=product_id,
        product_name=f"Product {product_id}",
        quantity=Quantity(qty),
        period=DateRange(d(5, 10), d(5, 15)),
    )


class TestOrderCreation:

    def test_happy_path(self):
        order = Order.create(customer_name="Alice", items=[_make_item(qty=2)])
        assert order.customer_name == "Alice"
        assert order.status == OrderStatus.PENDING
        assert order.transaction_type == TransactionType.RENTAL
        assert len(order.items) == 1

    def test_id_is_none_for_new_orders(self):
        order = Order.create("Alice", [_make_item()])
        assert order.id is None  # assigned by repository

    def test_51_items_rejected(self):
        items = [_make_item(product_id=str(i)) for i in range(51)]
        with pytest.raises(ValidationError, match="Maximum 50 items"):
            Order.create("Alice", items)

    def test_duplicate_product_rejected(self):
        with pytest.raises(ValidationError, match="more than once"):
            Order.create("Alice", [_make_item("1"), _make_item("1", qty=2)])

    def test_empty_customer_name_rejected(self):
        with pytest.raises(ValidationError, match="Customer name"):
            Order.create("   ", [_make_item()])

    def test_no_items_rejected(self):
        with pytest.raises(ValidationError, match="at least one item"):
            Order.create("Alice", [])


class TestOrderLifecycle:

    def test_start_then_return(self):
        order = Order.create("Alice", [_make_item()])
        order.start()
        assert order.status == OrderStatus.ONGOING
        order.mark_returned()
        assert order.status == OrderStatus.RETURNED

    def test_overdue_then_complete(self):
        order = Order.create("Alice", [_make_item()])
        order.start()
        order.mark_overdue()
        assert order.is_occupying
        order.complete()
        assert order.status == OrderStatus.COMPLETED
        assert not order.is_occupying

    def test_preparation_and_delivery_then_start(self):
        order = Order.create("Alice", [_make_item()])
        order.prepare()
        assert order.status == OrderStatus.PREPARED
        order.deliver()
        assert order.status == OrderStatus.DELIVERED_TO_CUSTOMER
        order.start()
        assert order.status == OrderStatus.ONGOING

    @pytest.mark.parametrize("status", [
        OrderStatus.PENDING_PREPARATION,
        OrderStatus.PREPARED,
        OrderStatus.DELIVERED_TO_CUSTOMER,
    ])
    def test_start_and_cancel_from_preparation_statuses(self, status):
        started = Order(id="1", customer_name="A", items=[_make_item()], status=status)
        started.start()
        assert started.status == OrderStatus.ONGOING

        cancelled = Order(id="2", customer_name="A", items=[_make_item()], status=status)
        cancelled.cancel()
        assert cancelled.status == OrderStatus.CANCELLED

    def test_cannot_deliver_unprepared(self):
        order = Order.create("Alice", [_make_item()])
        with pytest.raises(ValidationError, match="Cannot deliver order"):
            order.deliver()

    def test_cannot_complete_pending(self):
        order = Order.create("Alice", [_make_item()])
        with pytest.raises(ValidationError, match="Cannot complete order"):
            order.complete()

    def test_cancel_twice_rejected(self):
        order = Order.create("Alice", [_make_item()])
        order.cancel()
        with pytest.raises(ValidationError, match="already cancelled"):
            order.cancel()

    def test_cannot_cancel_returned(self):
        order = Order.create("Alice", [_make_item()])
        order.start()
        order.mark_returned()
        with pytest.raises(ValidationError, match="Cannot cancel"):
            order.cancel()


class TestOccupying:

    @pytest.mark.parametrize(
        "status, occupying",
        [
            (OrderStatus.PENDING, True),
            (OrderStatus.PENDING_PREPARATION, True),
            (OrderStatus.PREPARED, True),
            (OrderStatus.DELIVERED_TO_CUSTOMER, True),
            (OrderStatus.ONGOING, True),
            (OrderStatus.OVERDUE, True),
            (OrderStatus.COMPLETED, False),
            (OrderStatus.CANCELLED, False),
            (OrderStatus.RETURNED, False),
        ],
    )
    def test_status_occupancy(self, status, occupying):
        order = Order(id="1", customer_name="A", items=[_make_item()], status=status)
        assert order.is_occupying is occupying

    def test_sale_never_occupies(self):
        order = Order(
            id="1",
            customer_name="A",
            items=[_make_item()],
            transaction_type=TransactionType.SALE,
        )
        assert not order.is_occupying
