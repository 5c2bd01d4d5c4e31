"""Application service: Change Rental Status use case.

Moves a rental through its lifecycle.  Moves between occupying statuses
(prepare, deliver, start, overdue) leave the counters alone; moves out of
the occupying set (complete, return) release the units through the
admission controller.
"""

from __future__ import annotations

from rentals.application.dto import OrderDTO
from rentals.application.mapping import order_to_dto
from rentals.domain.exceptions import EntityNotFoundError, ValidationError
from rentals.domain.model.order import Order
from rentals.domain.repository.order_repository import OrderRepository
from rentals.domain.repository.product_repository import ProductRepository
from rentals.domain.service.admission import (
    ReservationAdmissionController,
    ReservationIntent,
    ReservationRequest,
)
from rentals.domain.service.counter import DEFAULT_MAX_WRITE_RETRIES

TRANSITIONS = {
    "prepare": Order.prepare,
    "deliver": Order.deliver,
    "start": Order.start,
    "overdue": Order.mark_overdue,
    "complete": Order.complete,
    "return": Order.mark_returned,
}


class ChangeRentalStatusHandler:

    def __init__(
        self,
        order_repo: OrderRepository,
        product_repo: ProductRepository,
        max_write_retries: int = DEFAULT_MAX_WRITE_RETRIES,
    ) -> None:
        self._order_repo = order_repo
        self._product_repo = product_repo
        self._max_write_retries = max_write_retries

    def handle(self, order_id: str, action: str) -> OrderDTO:
        transition = TRANSITIONS.get(action)
        if transition is None:
            raise ValidationError(
                f"Unknown action '{action}' (expected one of: {', '.join(TRANSITIONS)})"
            )

        order = self._order_repo.get_by_id(order_id)
        if order is None:
            raise EntityNotFoundError(f"Order #{order_id} not found")

        was_occupying = order.is_occupying
        # Validate the transition on a throwaway copy before anything is written.
        probe = Order(
            id=order.id,
            customer_name=order.customer_name,
            items=order.items,
            status=order.status,
            transaction_type=order.transaction_type,
        )
        transition(probe)

        def write() -> None:
            transition(order)
            self._order_repo.save(order)

        if not was_occupying or probe.is_occupying:
            write()
            return order_to_dto(order)

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
        return order_to_dto(order)
