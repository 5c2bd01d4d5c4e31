"""Integration tests for the Reconcile use case."""

from datetime import datetime, timezone

import pytest

from rentals.application.reconcile import ReconcileHandler
from rentals.domain.exceptions import ReconciliationPartialFailure
from rentals.domain.model.product import Product
from rentals.domain.service.admission import ProductLockRegistry
from rentals.domain.service.reconciliation import ReconciliationJob
from tests.fakes import FakeOrderRepository, FakeProductRepository, d, rental


def _handler(unavailable=()):
    products = FakeProductRepository([
        Product(id="1", name="Dress", stock_quantity=5, reserved_quantity=5),
        Product(id="2", name="Suit", stock_quantity=5, reserved_quantity=0),
    ])
    products.unavailable_ids.update(unavailable)
    orders = FakeOrderRepository([rental("1", ("1", 3, d(5, 1), d(5, 3)))])
    job = ReconciliationJob(
        products,
        orders,
        locks=ProductLockRegistry(),
        clock=lambda: datetime(2026, 5, 1, tzinfo=timezone.utc),
    )
    return ReconcileHandler(job), products


class TestReconcileHandler:

    def test_report_flattened(self):
        handler, _ = _handler()
        dto = handler.handle()
        assert dto.checked == 2
        [fix] = dto.corrected
        assert (fix.product_id, fix.before, fix.after) == ("1", 5, 3)
        assert fix.detected_at.startswith("2026-05-01")
        assert dto.failed == []

    def test_subset(self):
        handler, products = _handler()
        dto = handler.handle(["2"])
        assert dto.checked == 1
        assert dto.corrected == []
        assert products.get_by_id("1").reserved_quantity == 5

    def test_empty_subset_means_everything(self):
        handler, _ = _handler()
        assert handler.handle([]).checked == 2

    def test_failures_reported(self):
        handler, _ = _handler(unavailable={"2"})
        dto = handler.handle()
        assert [f.product_id for f in dto.failed] == ["2"]
        assert len(dto.corrected) == 1

    def test_strict_raises_after_whole_batch(self):
        handler, products = _handler(unavailable={"2"})
        with pytest.raises(ReconciliationPartialFailure) as exc_info:
            handler.handle(strict=True)
        assert products.get_by_id("1").reserved_quantity == 3
        assert exc_info.value.report.checked == 2
