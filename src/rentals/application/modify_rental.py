"""Application service: Modify Rental Item use case.

Changes the quantity or dates of one product on an existing rental.  The
order's own current reservation is excluded from the capacity check, and
the counter moves by the net change only.
"""

from __future__ import annotations

from datetime import date

from rentals.application.dto import OrderDTO
from rentals.application.mapping import order_to_dto
from rentals.domain.exceptions import EntityNotFoundError, ValidationError
from rentals.domain.model.order import OrderLineItem
from rentals.domain.model.value_objects import DateRange, Quantity
from rentals.domain.repository.order_repository import OrderRepository
from rentals.domain.repository.product_repository import ProductRepository
from rentals.domain.service.admission import (
    ReservationAdmissionController,
    ReservationIntent,
)
from rentals.domain.service.counter import DEFAULT_MAX_WRITE_RETRIES


class ModifyRentalItemHandler:

    def __init__(
        self,
        order_repo: OrderRepository,
        product_repo: ProductRepository,
        max_write_retries: int = DEFAULT_MAX_WRITE_RETRIES,
    ) -> None:
        self._order_repo = order_repo
        self._product_repo = product_repo
        self._max_write_retries = max_write_retries

    def handle(
        self,
        order_id: str,
        product_id: str,
        delivery_date: date,
        return_date: date | None,
        quantity: int,
    ) -> OrderDTO:
        order = self._order_repo.get_by_id(order_id)
        if order is None:
            raise EntityNotFoundError(f"Order #{order_id} not found")
        if not order.is_occupying:
            raise ValidationError(
                f"Cannot modify order #{order_id} in {order.status.value} status"
            )

        current = order.find_item(product_id)
        if current is None:
            raise ValidationError(
                f"Product ID '{product_id}' not found in order #{order_id}"
            )

        replacement = OrderLineItem(
            product_id=current.product_id,
            product_name=current.product_name,
            quantity=Quantity(quantity),
            period=DateRange.of(delivery_date, return_date),
        )

        def write() -> None:
            order.items = [
                replacement if item.product_id == product_id else item
                for item in order.items
            ]
            self._order_repo.save(order)

        controller = ReservationAdmissionController(
            self._product_repo,
            self._order_repo,
            max_write_retries=self._max_write_retries,
        )
        controller.reserve(
            product_id,
            replacement.period.start,
            replacement.period.end,
            quantity,
            write,
            exclude_order_id=order_id,
            intent=ReservationIntent.MODIFY,
        )
        return order_to_dto(order)
