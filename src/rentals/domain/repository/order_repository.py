"""Abstract repository for Order aggregate.

Implementations raise ``RepositoryUnavailable`` when the underlying store
cannot be read or written.  They never return partial results.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from rentals.domain.model.order import Order


class OrderRepository(ABC):

    @abstractmethod
    def next_id(self) -> str:
        """Generate the next unique order ID."""

    @abstractmethod
    def get_by_id(self, order_id: str) -> Order | None:
        """Return an order by its ID, or None if not found."""

    @abstractmethod
    def find_by_product(self, product_id: str) -> list[Order]:
        """Return every order with at least one line item for the product."""

    @abstractmethod
    def list_all(self) -> list[Order]:
        """Return every order."""

    @abstractmethod
    def save(self, order: Order) -> None:
        """Persist a new or updated order, assigning an ID if it has none."""
