"""Data Transfer Objects — plain containers that cross layer boundaries.

DTOs carry data between the CLI (or the storefront) and the application
layer without exposing domain internals to the outside world.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date


@dataclass(frozen=True)
class RentalItemSpec:
    """Input: one product the customer wants, for how many days.

    ``product`` is a product ID or an exact product name.  A missing
    ``return_date`` books the item open-ended.
    """

    product: str
    quantity: int
    delivery_date: date
    return_date: date | None = None


@dataclass(frozen=True)
class OrderLineItemDTO:
    product_id: str
    product_name: str
    quantity: int
    delivery_date: str
    return_date: str
    open_ended: bool


@dataclass(frozen=True)
class OrderDTO:
    id: str
    customer_name: str
    status: str
    transaction_type: str
    items: list[OrderLineItemDTO]
    created_at: str


@dataclass(frozen=True)
class AvailabilityDTO:
    """Output of an availability check over a window."""

    product_id: str
    admissible: bool
    peak_reserved: int
    available_quantity: int


@dataclass(frozen=True)
class CalendarDayDTO:
    day: str
    reserved: int
    available: int


@dataclass(frozen=True)
class ProductDTO:
    id: str
    name: str
    stock: int
    reserved: int
    available: int


@dataclass(frozen=True)
class DiscrepancyDTO:
    product_id: str
    before: int
    after: int
    detected_at: str


@dataclass(frozen=True)
class FailureDTO:
    product_id: str
    error: str


@dataclass(frozen=True)
class ReconciliationDTO:
    checked: int
    corrected: list[DiscrepancyDTO]
    failed: list[FailureDTO]
