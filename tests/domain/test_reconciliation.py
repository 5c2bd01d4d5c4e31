"""Unit tests for the Reconciliation Job."""

from datetime import datetime, timezone

import pytest

from rentals.domain.exceptions import ReconciliationPartialFailure
from rentals.domain.model.order import OrderStatus, TransactionType
from rentals.domain.model.product import Product
from rentals.domain.service.admission import ProductLockRegistry
from rentals.domain.service.reconciliation import ReconciliationJob, true_reserved
from rentals.domain.service.interval_index import intervals_from_orders
from tests.fakes import FakeOrderRepository, FakeProductRepository, d, rental

NOW = datetime(2026, 5, 1, 12, 0, tzinfo=timezone.utc)


def _job(products, orders):
    return ReconciliationJob(
        products, orders, locks=ProductLockRegistry(), clock=lambda: NOW
    )


def _three_units_on_p():
    return [
        rental("1", ("P", 2, d(5, 1), d(5, 3))),
        rental("2", ("P", 1, d(6, 1), d(6, 3)), status=OrderStatus.ONGOING),
        rental("3", ("P", 4, d(5, 1), d(5, 3)), status=OrderStatus.RETURNED),
    ]


class TestTrueReserved:

    def test_flat_sum_ignores_dates(self):
        # Two non-overlapping intervals: peak is 2 but the counter is 3.
        intervals = intervals_from_orders(_three_units_on_p(), "P")
        assert true_reserved(intervals) == 3

    def test_sales_never_count(self):
        orders = [
            rental("1", ("P", 5, d(5, 1), d(5, 3)), transaction_type=TransactionType.SALE),
        ]
        assert true_reserved(intervals_from_orders(orders, "P")) == 0


class TestReconcile:

    def test_corrects_drift(self):
        products = FakeProductRepository(
            [Product(id="P", name="Dress", stock_quantity=5, reserved_quantity=5)]
        )
        orders = FakeOrderRepository(_three_units_on_p())

        report = _job(products, orders).run()

        assert report.checked == 1
        assert len(report.corrected) == 1
        fix = report.corrected[0]
        assert (fix.product_id, fix.before, fix.after) == ("P", 5, 3)
        assert fix.detected_at == NOW
        assert products.get_by_id("P").reserved_quantity == 3

    def test_idempotent(self):
        products = FakeProductRepository(
            [Product(id="P", name="Dress", stock_quantity=5, reserved_quantity=5)]
        )
        orders = FakeOrderRepository(_three_units_on_p())
        job = _job(products, orders)

        job.run()
        writes = products.counter_writes
        second = job.run()

        assert second.corrected == []
        assert products.counter_writes == writes

    def test_correct_counter_not_written(self):
        products = FakeProductRepository(
            [Product(id="P", name="Dress", stock_quantity=5, reserved_quantity=3)]
        )
        orders = FakeOrderRepository(_three_units_on_p())

        report = _job(products, orders).run()

        assert report.corrected == []
        assert products.counter_writes == 0

    def test_product_without_orders_goes_to_zero(self):
        products = FakeProductRepository(
            [Product(id="P", name="Dress", stock_quantity=5, reserved_quantity=2)]
        )
        report = _job(products, FakeOrderRepository()).run()
        assert report.corrected[0].after == 0

    def test_overcommit_is_kept_not_clamped(self):
        products = FakeProductRepository(
            [Product(id="P", name="Dress", stock_quantity=2, reserved_quantity=0)]
        )
        orders = FakeOrderRepository(_three_units_on_p())

        _job(products, orders).run()

        product = products.get_by_id("P")
        assert product.reserved_quantity == 3
        assert product.is_overcommitted

    def test_subset_mode(self):
        products = FakeProductRepository([
            Product(id="P", name="Dress", stock_quantity=5, reserved_quantity=0),
            Product(id="Q", name="Suit", stock_quantity=5, reserved_quantity=9),
        ])
        orders = FakeOrderRepository(_three_units_on_p())

        report = _job(products, orders).run(["P", "P"])

        assert report.checked == 1
        assert products.get_by_id("Q").reserved_quantity == 9

    def test_unknown_product_in_subset_is_a_failure(self):
        products = FakeProductRepository(
            [Product(id="P", name="Dress", stock_quantity=5)]
        )
        report = _job(products, FakeOrderRepository()).run(["ghost", "P"])
        assert [f.product_id for f in report.failed] == ["ghost"]
        assert report.succeeded == 1


class TestReconcileFailures:

    def test_one_failure_does_not_stop_the_batch(self):
        products = FakeProductRepository([
            Product(id="P", name="Dress", stock_quantity=5, reserved_quantity=0),
            Product(id="Q", name="Suit", stock_quantity=5, reserved_quantity=4),
        ])
        products.unavailable_ids.add("P")

        report = _job(products, FakeOrderRepository()).run()

        assert report.checked == 2
        assert [f.product_id for f in report.failed] == ["P"]
        assert [c.product_id for c in report.corrected] == ["Q"]
        assert products.get_by_id("Q").reserved_quantity == 0

    def test_order_scan_failure_fails_every_product(self):
        products = FakeProductRepository([
            Product(id="P", name="Dress", stock_quantity=5, reserved_quantity=3),
            Product(id="Q", name="Suit", stock_quantity=5, reserved_quantity=1),
        ])
        orders = FakeOrderRepository()
        orders.unavailable = True

        report = _job(products, orders).run()

        assert {f.product_id for f in report.failed} == {"P", "Q"}
        # A failed read must never zero the counters.
        assert products.get_by_id("P").reserved_quantity == 3
        assert products.counter_writes == 0

    def test_raise_for_failures(self):
        products = FakeProductRepository([Product(id="P", name="Dress", stock_quantity=5)])
        products.unavailable_ids.add("P")
        report = _job(products, FakeOrderRepository()).run()

        with pytest.raises(ReconciliationPartialFailure, match="1 product"):
            report.raise_for_failures()

    def test_write_conflicts_are_retried(self):
        products = FakeProductRepository(
            [Product(id="P", name="Dress", stock_quantity=5, reserved_quantity=5)]
        )
        products.conflicts_to_inject = 2
        orders = FakeOrderRepository(_three_units_on_p())

        report = _job(products, orders).run()

        assert report.failed == []
        assert products.get_by_id("P").reserved_quantity == 3

    def test_status_change_outside_engine_is_repaired(self):
        products = FakeProductRepository(
            [Product(id="P", name="Dress", stock_quantity=5, reserved_quantity=3)]
        )
        orders = FakeOrderRepository(_three_units_on_p())
        orders.set_status("1", OrderStatus.COMPLETED)

        report = _job(products, orders).run()

        assert report.corrected[0].after == 1
