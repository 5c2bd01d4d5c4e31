"""Domain -> DTO mapping shared by the order use cases."""

from __future__ import annotations

from rentals.application.dto import OrderDTO, OrderLineItemDTO
from rentals.domain.model.order import Order


def order_to_dto(order: Order) -> OrderDTO:
    return OrderDTO(
        id=order.id,  # type: ignore[arg-type]
        customer_name=order.customer_name,
        status=order.status.value,
        transaction_type=order.transaction_type.value,
        items=[
            OrderLineItemDTO(
                product_id=item.product_id,
                product_name=item.product_name,
                quantity=item.quantity.value,
                delivery_date=item.period.start.isoformat(),
                return_date=item.period.end.isoformat(),
                open_ended=item.period.is_open_ended,
            )
            for item in order.items
        ],
        created_at=order.created_at.strftime("%Y-%m-%d %H:%M UTC"),
    )
