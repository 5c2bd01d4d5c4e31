"""Domain service: Reservation Admission Controller.

The single authorized path for committing reservations against a
product's stock.  It coordinates three collaborators that have no shared
transaction: the order repository (read for intervals, written through a
caller-supplied callback), the pure availability calculator, and the
product repository's version-checked counter.

Per product, admission is serialized on a lock from ``ProductLockRegistry``
and runs in two phases, as the order-confirmation flow always has:

  Phase 1 — load and validate: read stock and the interval index for
            every product involved and evaluate each request.  Any
            rejection raises ``CapacityExceeded`` before anything is
            written.
  Phase 2 — mutate: call ``order_write_fn`` once, then move each
            product's counter by its net delta.

Locks for different products are independent, so admissions on
different products run in parallel.  A multi-product request takes its
locks in sorted product-ID order.
"""

from __future__ import annotations

import logging
import threading
from contextlib import ExitStack
from dataclasses import dataclass
from datetime import date
from enum import Enum
from typing import Callable

from rentals.domain.exceptions import (
    CapacityExceeded,
    DomainException,
    EntityNotFoundError,
    RepositoryUnavailable,
    ValidationError,
)
from rentals.domain.model.product import Product
from rentals.domain.model.reservation import ReservationInterval
from rentals.domain.model.value_objects import DateRange, Quantity
from rentals.domain.repository.order_repository import OrderRepository
from rentals.domain.repository.product_repository import ProductRepository
from rentals.domain.service import availability
from rentals.domain.service.availability import AvailabilityVerdict
from rentals.domain.service.counter import DEFAULT_MAX_WRITE_RETRIES, adjust_reserved
from rentals.domain.service.interval_index import IntervalIndex

logger = logging.getLogger(__name__)


class ReservationIntent(Enum):
    CREATE = "create"
    MODIFY = "modify"
    CANCEL = "cancel"


@dataclass(frozen=True)
class ReservationRequest:
    """One product's share of an admission."""

    product_id: str
    period: DateRange
    quantity: int
    exclude_order_id: str | None = None
    intent: ReservationIntent = ReservationIntent.CREATE

    def __post_init__(self) -> None:
        if self.intent == ReservationIntent.CREATE and self.exclude_order_id:
            raise ValidationError("A new reservation cannot exclude an order")
        if self.intent != ReservationIntent.CREATE and not self.exclude_order_id:
            raise ValidationError(
                f"A {self.intent.value} reservation must name the order it changes"
            )
        if self.intent != ReservationIntent.CANCEL:
            Quantity(self.quantity)


@dataclass(frozen=True)
class ReservationResult:
    product_id: str
    intent: ReservationIntent
    delta: int
    reserved_quantity: int
    verdict: AvailabilityVerdict | None = None


OrderWriteFn = Callable[[], None]


class ProductLockRegistry:
    """One lock per product ID, created on first use."""

    def __init__(self) -> None:
        self._locks: dict[str, threading.Lock] = {}
        self._guard = threading.Lock()

    def for_product(self, product_id: str) -> threading.Lock:
        with self._guard:
            lock = self._locks.get(product_id)
            if lock is None:
                lock = self._locks[product_id] = threading.Lock()
            return lock

    def hold(self, product_ids: list[str]) -> ExitStack:
        """Acquire the locks for several products in a deadlock-free order."""
        stack = ExitStack()
        for product_id in sorted(set(product_ids)):
            stack.enter_context(self.for_product(product_id))
        return stack


# Shared by every controller and reconciliation job in this process unless
# a registry is passed explicitly.
default_locks = ProductLockRegistry()


class ReservationAdmissionController:

    def __init__(
        self,
        product_repo: ProductRepository,
        order_repo: OrderRepository,
        locks: ProductLockRegistry | None = None,
        max_write_retries: int = DEFAULT_MAX_WRITE_RETRIES,
    ) -> None:
        self._product_repo = product_repo
        self._index = IntervalIndex(order_repo)
        self._locks = locks if locks is not None else default_locks
        self._max_write_retries = max_write_retries

    # --- Queries --------------------------------------------------------------

    def check_availability(
        self,
        product_id: str,
        start: date,
        end: date,
        quantity: int,
        exclude_order_id: str | None = None,
    ) -> AvailabilityVerdict:
        """Would ``quantity`` more units fit over ``[start, end]``?  No writes."""
        if quantity < 0:
            raise ValidationError("Quantity cannot be negative")
        window = DateRange(start, end)
        product = self._load_product(product_id)
        intervals = self._index.for_product(product_id)
        return availability.evaluate(
            product.stock_quantity, intervals, window, quantity, exclude_order_id
        )

    # --- Commands -------------------------------------------------------------

    def reserve(
        self,
        product_id: str,
        start: date,
        end: date,
        quantity: int,
        order_write_fn: OrderWriteFn,
        exclude_order_id: str | None = None,
        intent: ReservationIntent = ReservationIntent.CREATE,
    ) -> ReservationResult:
        """Admit one product's reservation and commit it.

        Raises ``CapacityExceeded`` (nothing written) when the product
        cannot cover the window.
        """
        request = ReservationRequest(
            product_id=product_id,
            period=DateRange(start, end),
            quantity=quantity,
            exclude_order_id=exclude_order_id,
            intent=intent,
        )
        return self.reserve_all([request], order_write_fn)[0]

    def reserve_all(
        self,
        requests: list[ReservationRequest],
        order_write_fn: OrderWriteFn,
    ) -> list[ReservationResult]:
        """Admit several products' reservations together, all or nothing.

        ``order_write_fn`` runs once, after every request is admitted.  If
        it raises, no counter moves.  If a counter cannot be written after
        the order is committed, ``RepositoryUnavailable`` is raised and the
        drift is left for the reconciliation job.
        """
        if not requests:
            raise ValidationError("Nothing to reserve")
        product_ids = [r.product_id for r in requests]
        if len(set(product_ids)) != len(product_ids):
            raise ValidationError("Each product may appear only once per admission")

        with self._locks.hold(product_ids):
            # Phase 1: load, evaluate, compute deltas
            planned: list[tuple[ReservationRequest, int, AvailabilityVerdict | None]] = []
            for request in requests:
                planned.append(self._admit(request))

            # Phase 2: commit the order, then the counters
            order_write_fn()
            return self._commit_counters(planned)

    # --- Internal helpers -----------------------------------------------------

    def _admit(
        self, request: ReservationRequest
    ) -> tuple[ReservationRequest, int, AvailabilityVerdict | None]:
        product = self._load_product(request.product_id)
        intervals = self._index.for_product(request.product_id)
        already_held = _held_by(intervals, request.exclude_order_id)

        if request.intent == ReservationIntent.CANCEL:
            return request, -already_held, None

        verdict = availability.evaluate(
            product.stock_quantity,
            intervals,
            request.period,
            request.quantity,
            request.exclude_order_id,
        )
        if not verdict.admissible:
            logger.info(
                "Rejected %s of %d unit(s) of product %s over %s "
                "(peak %d, stock %d)",
                request.intent.value,
                request.quantity,
                request.product_id,
                request.period,
                verdict.peak_reserved,
                product.stock_quantity,
            )
            raise CapacityExceeded(
                product_id=request.product_id,
                requested=request.quantity,
                peak_reserved=verdict.peak_reserved,
                stock_quantity=product.stock_quantity,
            )
        return request, request.quantity - already_held, verdict

    def _commit_counters(
        self,
        planned: list[tuple[ReservationRequest, int, AvailabilityVerdict | None]],
    ) -> list[ReservationResult]:
        results: list[ReservationResult] = []
        stale: list[str] = []
        for request, delta, verdict in planned:
            try:
                product = adjust_reserved(
                    self._product_repo,
                    request.product_id,
                    delta,
                    self._max_write_retries,
                )
            except DomainException as exc:
                logger.error(
                    "Order committed but reserved counter of product %s was not "
                    "moved by %+d (%s); reconciliation will correct it",
                    request.product_id,
                    delta,
                    exc,
                )
                stale.append(request.product_id)
                continue
            logger.info(
                "Admitted %s on product %s over %s: delta %+d, reserved now %d",
                request.intent.value,
                request.product_id,
                request.period,
                delta,
                product.reserved_quantity,
            )
            results.append(
                ReservationResult(
                    product_id=request.product_id,
                    intent=request.intent,
                    delta=delta,
                    reserved_quantity=product.reserved_quantity,
                    verdict=verdict,
                )
            )
        if stale:
            raise RepositoryUnavailable(
                "Reservation recorded but reserved counter could not be updated "
                f"for product(s): {', '.join(stale)}"
            )
        return results

    def _load_product(self, product_id: str) -> Product:
        product = self._product_repo.get_by_id(product_id)
        if product is None:
            raise EntityNotFoundError(f"Product with ID '{product_id}' not found")
        return product


def _held_by(
    intervals: tuple[ReservationInterval, ...], order_id: str | None
) -> int:
    """Units of this product the given order currently occupies."""
    if order_id is None:
        return 0
    return sum(i.quantity for i in intervals if i.order_id == order_id)
