"""Product aggregate.

Products live independently of orders.  Inventory management sets how many
units the shop owns; the reservation engine owns the denormalized count of
units committed to occupying orders.
"""

from __future__ import annotations

from dataclasses import dataclass

from rentals.domain.exceptions import ValidationError


@dataclass
class Product:
    """A rentable product in the catalog.

    Invariants:
    - ``stock_quantity`` and ``reserved_quantity`` are never negative
    - ``version`` increases by one on every write of ``reserved_quantity``

    ``reserved_quantity`` is a cache of the order data and may drift; the
    reconciliation job is what makes it authoritative again.
    """

    id: str
    name: str
    stock_quantity: int
    reserved_quantity: int = 0
    version: int = 0

    def __post_init__(self) -> None:
        if self.stock_quantity < 0:
            raise ValidationError("Stock quantity cannot be negative")
        if self.reserved_quantity < 0:
            raise ValidationError("Reserved quantity cannot be negative")

    @property
    def available_quantity(self) -> int:
        return max(self.stock_quantity - self.reserved_quantity, 0)

    @property
    def is_overcommitted(self) -> bool:
        return self.reserved_quantity > self.stock_quantity

    def set_stock(self, quantity: int) -> None:
        """Change the number of units owned (inventory management)."""
        if quantity < 0:
            raise ValidationError("Stock quantity cannot be negative")
        self.stock_quantity = quantity

    def with_reserved(self, reserved_quantity: int) -> Product:
        """Return the next version of this product with a new counter value."""
        return Product(
            id=self.id,
            name=self.name,
            stock_quantity=self.stock_quantity,
            reserved_quantity=max(reserved_quantity, 0),
            version=self.version + 1,
        )
