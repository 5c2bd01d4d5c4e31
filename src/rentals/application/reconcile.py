"""Application service: Reconcile use case.

Runs the reconciliation job and flattens its report for display.  In
strict mode any per-product failure is raised as
``ReconciliationPartialFailure`` after the whole batch has run; the
exception carries the full report.
"""

from __future__ import annotations

from rentals.application.dto import DiscrepancyDTO, FailureDTO, ReconciliationDTO
from rentals.domain.service.reconciliation import ReconciliationJob, ReconciliationReport


class ReconcileHandler:

    def __init__(self, job: ReconciliationJob) -> None:
        self._job = job

    def handle(
        self,
        product_ids: list[str] | None = None,
        strict: bool = False,
    ) -> ReconciliationDTO:
        report = self._job.run(product_ids or None)
        if strict:
            report.raise_for_failures()
        return self.to_dto(report)

    @staticmethod
    def to_dto(report: ReconciliationReport) -> ReconciliationDTO:
        return ReconciliationDTO(
            checked=report.checked,
            corrected=[
                DiscrepancyDTO(
                    product_id=d.product_id,
                    before=d.before,
                    after=d.after,
                    detected_at=d.detected_at.isoformat(),
                )
                for d in report.corrected
            ],
            failed=[
                FailureDTO(product_id=f.product_id, error=f.error)
                for f in report.failed
            ],
        )
