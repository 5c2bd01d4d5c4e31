"""Application service: Show Products use case (query)."""

from __future__ import annotations

from rentals.application.dto import ProductDTO
from rentals.domain.repository.product_repository import ProductRepository


class ShowProductsHandler:

    def __init__(self, product_repo: ProductRepository) -> None:
        self._product_repo = product_repo

    def handle(self) -> list[ProductDTO]:
        return [
            ProductDTO(
                id=product.id,
                name=product.name,
                stock=product.stock_quantity,
                reserved=product.reserved_quantity,
                available=product.available_quantity,
            )
            for product in self._product_repo.list_all()
        ]
