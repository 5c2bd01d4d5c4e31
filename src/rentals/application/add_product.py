"""Application service: Add Product use case."""

from __future__ import annotations

from rentals.domain.exceptions import ValidationError
from rentals.domain.model.product import Product
from rentals.domain.repository.product_repository import ProductRepository


class AddProductHandler:

    def __init__(self, product_repo: ProductRepository) -> None:
        self._product_repo = product_repo

    def handle(self, name: str, stock: int) -> Product:
        """Add a new rentable product to the catalog."""
        if not name or not name.strip():
            raise ValidationError("Product name is required")

        existing = self._product_repo.get_by_name(name.strip())
        if existing is not None:
            raise ValidationError(f"Product '{name}' already exists")

        # Auto-assign ID based on existing products
        numeric_ids = [int(p.id) for p in self._product_repo.list_all() if p.id.isdigit()]
        next_id = str(max(numeric_ids) + 1) if numeric_ids else "1"

        product = Product(id=next_id, name=name.strip(), stock_quantity=stock)
        self._product_repo.save(product)
        return product
