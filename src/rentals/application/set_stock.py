"""Application service: Set Stock use case.

Stock belongs to inventory management, not to the reservation engine.
Lowering stock below what is already committed is allowed (units can be
lost or damaged); the availability check simply starts rejecting until
enough rentals end.
"""

from __future__ import annotations

import logging

from rentals.domain.exceptions import EntityNotFoundError
from rentals.domain.repository.product_repository import ProductRepository

logger = logging.getLogger(__name__)


class SetStockHandler:

    def __init__(self, product_repo: ProductRepository) -> None:
        self._product_repo = product_repo

    def handle(self, product_id: str, quantity: int) -> None:
        """Set the total number of units owned for a product."""
        product = self._product_repo.get_by_id(product_id)
        if product is None:
            raise EntityNotFoundError(f"Product with ID '{product_id}' not found")

        product.set_stock(quantity)
        self._product_repo.save(product)

        if product.is_overcommitted:
            logger.warning(
                "Stock of product %s set to %d below %d reserved unit(s)",
                product_id,
                quantity,
                product.reserved_quantity,
            )
