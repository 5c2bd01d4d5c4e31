"""Application service: Cancel Rental use case.

Cancelling an occupying rental releases every unit it holds.  The status
change is the write the admission controller commits; the counters follow.
Sale orders, and rentals that no longer hold units, are cancelled without
touching any counter.
"""

from __future__ import annotations

from rentals.domain.exceptions import EntityNotFoundError
from rentals.domain.repository.order_repository import OrderRepository
from rentals.domain.repository.product_repository import ProductRepository
from rentals.domain.service.admission import (
    ReservationAdmissionController,
    ReservationIntent,
    ReservationRequest,
)
from rentals.domain.service.counter import DEFAULT_MAX_WRITE_RETRIES


class CancelRentalHandler:

    def __init__(
        self,
        order_repo: OrderRepository,
        product_repo: ProductRepository,
        max_write_retries: int = DEFAULT_MAX_WRITE_RETRIES,
    ) -> None:
        self._order_repo = order_repo
        self._product_repo = product_repo
        self._max_write_retries = max_write_retries

    def handle(self, order_id: str) -> None:
        order = self._order_repo.get_by_id(order_id)
        if order is None:
            raise EntityNotFoundError(f"Order #{order_id} not found")

        if not order.is_occupying:
            # Raises for orders that are already closed.
            order.cancel()
            self._order_repo.save(order)
            return

        def write() -> None:
            order.cancel()
            self._order_repo.save(order)

        requests = [
            ReservationRequest(
                product_id=item.product_id,
                period=item.period,
                quantity=item.quantity.value,
                exclude_order_id=order_id,
                intent=ReservationIntent.CANCEL,
            )
            for item in order.items
        ]
        controller = ReservationAdmissionController(
            self._product_repo,
            self._order_repo,
            max_write_retries=self._max_write_retries,
        )
        controller.reserve_all(requests, write)
