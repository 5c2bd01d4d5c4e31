"""Abstract repository for Product aggregate.

Defined in the domain layer so the domain never depends on
infrastructure. Concrete implementations (JSON, SQL, in-memory)
live in the infrastructure layer.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from rentals.domain.model.product import Product


class ProductRepository(ABC):

    @abstractmethod
    def get_by_id(self, product_id: str) -> Product | None:
        """Return a product by its ID, or None if not found."""

    @abstractmethod
    def get_by_name(self, name: str) -> Product | None:
        """Return a product by its exact name, or None if not found."""

    @abstractmethod
    def list_all(self) -> list[Product]:
        """Return every product in the catalog."""

    @abstractmethod
    def save(self, product: Product) -> None:
        """Persist catalog fields (name, stock) of a new or updated product.

        Does not touch ``reserved_quantity`` or ``version`` of an existing
        product; those only change through ``update_reserved``.
        """

    @abstractmethod
    def update_reserved(
        self, product_id: str, reserved_quantity: int, expected_version: int
    ) -> Product:
        """Write the reserved counter if the stored version still matches.

        Returns the product as stored after the write, with its version
        incremented.  Raises ``WriteConflict`` if another writer got there
        first and ``EntityNotFoundError`` if the product is gone.
        """
