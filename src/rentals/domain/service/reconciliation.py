"""Domain service: Reconciliation Job.

Recomputes each product's reserved counter from the orders and overwrites
the stored value when they disagree.  This is the safety net behind the
admission controller: counters left stale by a failed write, a manual
edit or a status change made outside the engine are repaired here.

The true value is a flat sum of the quantities of every occupying line
item, whatever its dates.  It is deliberately not the sweep-line peak the
availability calculator uses: the counter answers "how many units are
committed to open rentals", not "how many are out on the busiest day".
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Callable, Iterable

from rentals.domain.exceptions import DomainException, ReconciliationPartialFailure
from rentals.domain.model.reservation import ReservationInterval
from rentals.domain.repository.order_repository import OrderRepository
from rentals.domain.repository.product_repository import ProductRepository
from rentals.domain.service.admission import ProductLockRegistry, default_locks
from rentals.domain.service.counter import DEFAULT_MAX_WRITE_RETRIES, write_reserved
from rentals.domain.service.interval_index import IntervalIndex

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Discrepancy:
    product_id: str
    before: int
    after: int
    detected_at: datetime


@dataclass(frozen=True)
class ReconciliationFailure:
    product_id: str
    error: str


@dataclass
class ReconciliationReport:
    checked: int = 0
    corrected: list[Discrepancy] = field(default_factory=list)
    failed: list[ReconciliationFailure] = field(default_factory=list)

    @property
    def succeeded(self) -> int:
        return self.checked - len(self.failed)

    def raise_for_failures(self) -> None:
        if self.failed:
            raise ReconciliationPartialFailure(self)


def true_reserved(intervals: Iterable[ReservationInterval]) -> int:
    """Flat sum of occupying quantities, no date filter."""
    return sum(i.quantity for i in intervals if i.is_occupying)


class ReconciliationJob:

    def __init__(
        self,
        product_repo: ProductRepository,
        order_repo: OrderRepository,
        locks: ProductLockRegistry | None = None,
        max_write_retries: int = DEFAULT_MAX_WRITE_RETRIES,
        clock: Callable[[], datetime] = lambda: datetime.now(timezone.utc),
    ) -> None:
        self._product_repo = product_repo
        self._index = IntervalIndex(order_repo)
        self._locks = locks if locks is not None else default_locks
        self._max_write_retries = max_write_retries
        self._clock = clock

    def run(self, product_ids: list[str] | None = None) -> ReconciliationReport:
        """Reconcile every product, or only ``product_ids``.

        A failure on one product is recorded and the batch moves on.
        """
        report = ReconciliationReport()

        bulk: dict[str, tuple[ReservationInterval, ...]] | None = None
        bulk_error: DomainException | None = None
        if product_ids is None:
            try:
                targets = [p.id for p in self._product_repo.list_all()]
            except DomainException as exc:
                logger.error("Reconciliation could not list products: %s", exc)
                report.failed.append(ReconciliationFailure(product_id="*", error=str(exc)))
                return report
            try:
                bulk = self._index.for_all_products()
            except DomainException as exc:
                logger.error("Reconciliation could not scan orders: %s", exc)
                bulk_error = exc
        else:
            targets = list(dict.fromkeys(product_ids))

        logger.info("Reconciling %d product(s)", len(targets))
        for product_id in targets:
            report.checked += 1
            if bulk_error is not None:
                report.failed.append(
                    ReconciliationFailure(product_id=product_id, error=str(bulk_error))
                )
                continue
            try:
                discrepancy = self._reconcile_one(product_id, bulk)
            except DomainException as exc:
                logger.error("Could not reconcile product %s: %s", product_id, exc)
                report.failed.append(
                    ReconciliationFailure(product_id=product_id, error=str(exc))
                )
                continue
            if discrepancy is not None:
                report.corrected.append(discrepancy)

        logger.info(
            "Reconciliation finished: %d checked, %d corrected, %d failed",
            report.checked,
            len(report.corrected),
            len(report.failed),
        )
        return report

    def _reconcile_one(
        self,
        product_id: str,
        bulk: dict[str, tuple[ReservationInterval, ...]] | None,
    ) -> Discrepancy | None:
        with self._locks.for_product(product_id):
            if bulk is None:
                actual = true_reserved(self._index.for_product(product_id))
            else:
                actual = true_reserved(bulk.get(product_id, ()))
                stored = self._product_repo.get_by_id(product_id)
                if stored is not None and stored.reserved_quantity != actual:
                    # The scan predates this lock; confirm against live orders.
                    actual = true_reserved(self._index.for_product(product_id))

            before, after = write_reserved(
                self._product_repo,
                product_id,
                lambda _: actual,
                self._max_write_retries,
            )

        if after is before:
            return None

        if after.is_overcommitted:
            logger.warning(
                "Product %s has %d unit(s) committed against %d in stock",
                product_id,
                after.reserved_quantity,
                after.stock_quantity,
            )
        logger.warning(
            "Corrected reserved quantity of product %s: %d -> %d",
            product_id,
            before.reserved_quantity,
            after.reserved_quantity,
        )
        return Discrepancy(
            product_id=product_id,
            before=before.reserved_quantity,
            after=after.reserved_quantity,
            detected_at=self._clock(),
        )
