"""Application service: Create Rental use case.

Resolves the requested products, builds the order, and hands every line
item to the admission controller in one batch.  The order is saved only
if every product can cover its window; otherwise nothing is written.
"""

from __future__ import annotations

from rentals.application.dto import OrderDTO, RentalItemSpec
from rentals.application.mapping import order_to_dto
from rentals.domain.exceptions import EntityNotFoundError
from rentals.domain.model.order import Order, OrderLineItem
from rentals.domain.model.product import Product
from rentals.domain.model.value_objects import DateRange, Quantity
from rentals.domain.repository.order_repository import OrderRepository
from rentals.domain.repository.product_repository import ProductRepository
from rentals.domain.service.admission import (
    ReservationAdmissionController,
    ReservationIntent,
    ReservationRequest,
)
from rentals.domain.service.counter import DEFAULT_MAX_WRITE_RETRIES


class CreateRentalHandler:

    def __init__(
        self,
        order_repo: OrderRepository,
        product_repo: ProductRepository,
        max_write_retries: int = DEFAULT_MAX_WRITE_RETRIES,
    ) -> None:
        self._order_repo = order_repo
        self._product_repo = product_repo
        self._max_write_retries = max_write_retries

    def handle(self, customer_name: str, item_specs: list[RentalItemSpec]) -> OrderDTO:
        """Create a new rental order.

        Steps:
        1. Resolve each product reference to a Product (fail if not found).
        2. Let the Order aggregate validate its own business rules.
        3. Admit all line items together; the order is persisted by the
           controller's write callback once admission is granted.
        """
        line_items: list[OrderLineItem] = []

        for spec in item_specs:
            product = self._resolve(spec.product)
            line_items.append(
                OrderLineItem(
                    product_id=product.id,
                    product_name=product.name,
                    quantity=Quantity(spec.quantity),
                    period=DateRange.of(spec.delivery_date, spec.return_date),
                )
            )

        order = Order.create(customer_name=customer_name, items=line_items)

        requests = [
            ReservationRequest(
                product_id=item.product_id,
                period=item.period,
                quantity=item.quantity.value,
                intent=ReservationIntent.CREATE,
            )
            for item in order.items
        ]
        controller = ReservationAdmissionController(
            self._product_repo,
            self._order_repo,
            max_write_retries=self._max_write_retries,
        )
        controller.reserve_all(requests, lambda: self._order_repo.save(order))

        return order_to_dto(order)

    def _resolve(self, reference: str) -> Product:
        product = self._product_repo.get_by_id(reference)
        if product is None:
            product = self._product_repo.get_by_name(reference)
        if product is None:
            raise EntityNotFoundError(f"Product not found: '{reference}'")
        return product
