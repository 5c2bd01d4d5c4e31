"""ReservationInterval — the engine's view of one line item.

Intervals are never stored.  They are projected from orders every time
they are needed, so the order repository stays the single source of truth.
"""

from __future__ import annotations

from dataclasses import dataclass

from rentals.domain.model.order import Order, OrderStatus, TransactionType
from rentals.domain.model.value_objects import DateRange


@dataclass(frozen=True)
class ReservationInterval:
    order_id: str
    product_id: str
    quantity: int
    period: DateRange
    status: OrderStatus

    @property
    def is_occupying(self) -> bool:
        return self.status.is_occupying

    @property
    def sort_key(self) -> tuple:
        return (self.period.start, self.order_id)

    @staticmethod
    def from_order(order: Order) -> list[ReservationInterval]:
        """Project every line item of a rental order into an interval.

        Sale orders hand units over for good and never hold a rental
        window, so they produce nothing.
        """
        if order.transaction_type != TransactionType.RENTAL or order.id is None:
            return []
        return [
            ReservationInterval(
                order_id=order.id,
                product_id=item.product_id,
                quantity=item.quantity.value,
                period=item.period,
                status=order.status,
            )
            for item in order.items
        ]
