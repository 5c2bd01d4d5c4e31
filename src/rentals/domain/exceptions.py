"""Domain-level exceptions.

All business rule violations are expressed as subclasses of DomainException
so the CLI layer can catch them uniformly and display user-friendly messages.

Two families matter to callers of the reservation engine:

- business rejections (``ValidationError``, ``CapacityExceeded``) are final
  and are never retried;
- transient failures (``RepositoryUnavailable``) are safe to retry as a
  whole operation.  ``WriteConflict`` is transient too, but the engine
  retries it internally and only lets it escape as ``RepositoryUnavailable``.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from rentals.domain.service.reconciliation import ReconciliationReport


class DomainException(Exception):
    """Base class for all domain errors."""


class ValidationError(DomainException):
    """A business rule or invariant was violated."""


class EntityNotFoundError(DomainException):
    """A requested entity does not exist."""


class CapacityExceeded(ValidationError):
    """Admitting a reservation would put more units out than are in stock."""

    def __init__(
        self,
        product_id: str,
        requested: int,
        peak_reserved: int,
        stock_quantity: int,
    ) -> None:
        self.product_id = product_id
        self.requested = requested
        self.peak_reserved = peak_reserved
        self.stock_quantity = stock_quantity
        available = max(stock_quantity - peak_reserved, 0)
        super().__init__(
            f"Insufficient availability for product '{product_id}' "
            f"(need {requested}, have {available} available "
            f"of {stock_quantity} in stock)"
        )


class RepositoryUnavailable(DomainException):
    """A repository could not be read or written.  Safe to retry."""


class WriteConflict(DomainException):
    """A version-checked write lost the race against another writer."""

    def __init__(self, product_id: str, expected_version: int, actual_version: int) -> None:
        self.product_id = product_id
        self.expected_version = expected_version
        self.actual_version = actual_version
        super().__init__(
            f"Stale write for product '{product_id}' "
            f"(expected version {expected_version}, found {actual_version})"
        )


class ReconciliationPartialFailure(DomainException):
    """One or more products could not be reconciled."""

    def __init__(self, report: ReconciliationReport) -> None:
        self.report = report
        failed = ", ".join(f.product_id for f in report.failed)
        super().__init__(
            f"Reconciliation failed for {len(report.failed)} product(s): {failed}"
        )
