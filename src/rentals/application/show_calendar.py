"""Application service: Show Calendar use case (query).

Day-by-day reserved and available units for a product.  Read-only; the
admission check never consults it.
"""

from __future__ import annotations

from datetime import date

from rentals.application.dto import CalendarDayDTO
from rentals.domain.exceptions import EntityNotFoundError, ValidationError
from rentals.domain.model.value_objects import DateRange
from rentals.domain.repository.order_repository import OrderRepository
from rentals.domain.repository.product_repository import ProductRepository
from rentals.domain.service.availability import daily_breakdown
from rentals.domain.service.interval_index import IntervalIndex

MAX_CALENDAR_DAYS = 366


class ShowCalendarHandler:

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
        exclude_order_id: str | None = None,
    ) -> list[CalendarDayDTO]:
        window = DateRange(start, end)
        if len(window) > MAX_CALENDAR_DAYS:
            raise ValidationError(
                f"Calendar range is limited to {MAX_CALENDAR_DAYS} days"
            )

        product = self._product_repo.get_by_id(product_id)
        if product is None:
            raise EntityNotFoundError(f"Product with ID '{product_id}' not found")

        intervals = IntervalIndex(self._order_repo).for_product(product_id)
        return [
            CalendarDayDTO(
                day=entry.day.isoformat(),
                reserved=entry.reserved,
                available=entry.available,
            )
            for entry in daily_breakdown(
                product.stock_quantity, intervals, window, exclude_order_id
            )
        ]
