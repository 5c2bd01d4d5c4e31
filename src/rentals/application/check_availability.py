"""Application service: Check Availability use case (query)."""

from __future__ import annotations

from datetime import date

from rentals.application.dto import AvailabilityDTO
from rentals.domain.repository.order_repository import OrderRepository
from rentals.domain.repository.product_repository import ProductRepository
from rentals.domain.service.admission import ReservationAdmissionController


class CheckAvailabilityHandler:

    def __init__(
        self,
        product_repo: ProductRepository,
        order_repo: OrderRepository,
    ) -> None:
        self._product_repo = product_repo
        self._order_repo = order_repo

    def handle(
        self,
        product_id: str,
        start: date,
        end: date,
        quantity: int = 1,
        exclude_order_id: str | None = None,
    ) -> AvailabilityDTO:
        """Answer whether ``quantity`` units could be rented over the window.

        Pass ``exclude_order_id`` when checking an edit of an existing
        order, so the order does not compete with itself.
        """
        controller = ReservationAdmissionController(self._product_repo, self._order_repo)
        verdict = controller.check_availability(
            product_id, start, end, quantity, exclude_order_id
        )
        return AvailabilityDTO(
            product_id=product_id,
            admissible=verdict.admissible,
            peak_reserved=verdict.peak_reserved,
            available_quantity=verdict.available_quantity,
        )
