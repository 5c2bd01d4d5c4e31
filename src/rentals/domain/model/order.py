"""Order aggregate.

Orders are owned by the surrounding storefront; this model captures only
what the reservation engine reads from them: which products, how many
units, over which days, and whether the order still holds the units.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum

from rentals.domain.exceptions import ValidationError
from rentals.domain.model.value_objects import DateRange, Quantity


class OrderStatus(Enum):
    PENDING = "Pending"
    PENDING_PREPARATION = "Pending Preparation"
    PREPARED = "Prepared"
    DELIVERED_TO_CUSTOMER = "Delivered to Customer"
    ONGOING = "Ongoing"
    OVERDUE = "Overdue"
    COMPLETED = "Completed"
    CANCELLED = "Cancelled"
    RETURNED = "Returned"

    @property
    def is_occupying(self) -> bool:
        return self in OCCUPYING_STATUSES


# Statuses whose line items count against stock.
OCCUPYING_STATUSES = frozenset({
    OrderStatus.PENDING,
    OrderStatus.PENDING_PREPARATION,
    OrderStatus.PREPARED,
    OrderStatus.DELIVERED_TO_CUSTOMER,
    OrderStatus.ONGOING,
    OrderStatus.OVERDUE,
})

# Statuses from which the units can still be handed over.
BEFORE_HANDOVER = (
    OrderStatus.PENDING,
    OrderStatus.PENDING_PREPARATION,
    OrderStatus.PREPARED,
    OrderStatus.DELIVERED_TO_CUSTOMER,
)


class TransactionType(Enum):
    RENTAL = "Rental"
    SALE = "Sale"


@dataclass
class OrderLineItem:
    """One product on an order, rented for a span of days."""

    product_id: str
    product_name: str
    quantity: Quantity
    period: DateRange


# ---------------------------------------------------------------------------
# Constants for business rules
# ---------------------------------------------------------------------------
MAX_LINE_ITEMS = 50


@dataclass
class Order:
    """Aggregate root for rental and sale orders.

    Use the ``Order.create()`` factory for new orders — it enforces all
    business rules.  The ``__init__`` is intentionally simple so the
    repository can reconstitute persisted orders without re-validating.
    """

    id: str | None
    customer_name: str
    items: list[OrderLineItem]
    status: OrderStatus = OrderStatus.PENDING
    transaction_type: TransactionType = TransactionType.RENTAL
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    # --- Factory (used for NEW orders only) -----------------------------------

    @staticmethod
    def create(
        customer_name: str,
        items: list[OrderLineItem],
        transaction_type: TransactionType = TransactionType.RENTAL,
    ) -> Order:
        """Create a new order, enforcing all invariants."""
        if not customer_name or not customer_name.strip():
            raise ValidationError("Customer name is required")

        if not items:
            raise ValidationError("Order must contain at least one item")

        if len(items) > MAX_LINE_ITEMS:
            raise ValidationError(f"Maximum {MAX_LINE_ITEMS} items per order")

        seen: set[str] = set()
        for item in items:
            if item.product_id in seen:
                raise ValidationError(
                    f"Product '{item.product_name}' appears more than once"
                )
            seen.add(item.product_id)

        return Order(
            id=None,
            customer_name=customer_name.strip(),
            items=list(items),
            transaction_type=transaction_type,
        )

    # --- State transitions ----------------------------------------------------

    def prepare(self) -> None:
        """Transition Pending|Pending Preparation -> Prepared."""
        self._require(
            OrderStatus.PENDING, OrderStatus.PENDING_PREPARATION, action="prepare"
        )
        self.status = OrderStatus.PREPARED

    def deliver(self) -> None:
        """Transition Prepared -> Delivered to Customer."""
        self._require(OrderStatus.PREPARED, action="deliver")
        self.status = OrderStatus.DELIVERED_TO_CUSTOMER

    def start(self) -> None:
        """Transition any pre-handover status -> Ongoing."""
        self._require(*BEFORE_HANDOVER, action="start")
        self.status = OrderStatus.ONGOING

    def mark_overdue(self) -> None:
        """Transition Ongoing -> Overdue.  The units stay reserved."""
        self._require(OrderStatus.ONGOING, action="mark overdue")
        self.status = OrderStatus.OVERDUE

    def complete(self) -> None:
        """Transition Ongoing|Overdue -> Completed, releasing the units."""
        self._require(OrderStatus.ONGOING, OrderStatus.OVERDUE, action="complete")
        self.status = OrderStatus.COMPLETED

    def mark_returned(self) -> None:
        """Transition Ongoing|Overdue -> Returned, releasing the units."""
        self._require(OrderStatus.ONGOING, OrderStatus.OVERDUE, action="return")
        self.status = OrderStatus.RETURNED

    def cancel(self) -> None:
        """Transition any occupying status -> Cancelled.

        Counter release must be coordinated by the caller through the
        admission controller.
        """
        if self.status == OrderStatus.CANCELLED:
            raise ValidationError("Order is already cancelled")
        if not self.status.is_occupying:
            raise ValidationError(f"Cannot cancel order in {self.status.value} status")
        self.status = OrderStatus.CANCELLED

    # --- Computed properties --------------------------------------------------

    @property
    def is_occupying(self) -> bool:
        """True if this order's items currently count against stock."""
        return (
            self.transaction_type == TransactionType.RENTAL
            and self.status.is_occupying
        )

    def find_item(self, product_id: str) -> OrderLineItem | None:
        for item in self.items:
            if item.product_id == product_id:
                return item
        return None

    # --- Internal helpers -----------------------------------------------------

    def _require(self, *allowed: OrderStatus, action: str) -> None:
        if self.status not in allowed:
            expected = "|".join(s.value for s in allowed)
            raise ValidationError(
                f"Cannot {action} order — current status is {self.status.value}, "
                f"expected {expected}"
            )
