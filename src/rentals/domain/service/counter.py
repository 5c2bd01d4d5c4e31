"""Version-checked writes of a product's reserved counter.

Every writer of ``reserved_quantity`` goes through ``write_reserved``:
read the product, compute the new value from what was read, write it only
if the version is unchanged, and start over on a conflict.  The number of
rounds is bounded; running out surfaces as ``RepositoryUnavailable``.
"""

from __future__ import annotations

import logging
from typing import Callable

from rentals.domain.exceptions import (
    EntityNotFoundError,
    RepositoryUnavailable,
    WriteConflict,
)
from rentals.domain.model.product import Product
from rentals.domain.repository.product_repository import ProductRepository

logger = logging.getLogger(__name__)

DEFAULT_MAX_WRITE_RETRIES = 3


def write_reserved(
    product_repo: ProductRepository,
    product_id: str,
    compute: Callable[[Product], int],
    max_retries: int = DEFAULT_MAX_WRITE_RETRIES,
) -> tuple[Product, Product]:
    """Set the counter to ``compute(current_product)``.

    Returns ``(before, after)``.  When the computed value equals the stored
    one nothing is written and ``before is after``.
    """
    for attempt in range(max_retries + 1):
        product = product_repo.get_by_id(product_id)
        if product is None:
            raise EntityNotFoundError(f"Product with ID '{product_id}' not found")

        target = max(compute(product), 0)
        if target == product.reserved_quantity:
            return product, product

        try:
            updated = product_repo.update_reserved(product_id, target, product.version)
        except WriteConflict as exc:
            logger.warning(
                "Counter write for product %s lost a race (attempt %d/%d): %s",
                product_id,
                attempt + 1,
                max_retries + 1,
                exc,
            )
            continue
        return product, updated

    raise RepositoryUnavailable(
        f"Could not update reserved quantity of product '{product_id}' "
        f"after {max_retries + 1} attempts"
    )


def adjust_reserved(
    product_repo: ProductRepository,
    product_id: str,
    delta: int,
    max_retries: int = DEFAULT_MAX_WRITE_RETRIES,
) -> Product:
    """Add ``delta`` to the counter, never going below zero."""
    if delta == 0:
        product = product_repo.get_by_id(product_id)
        if product is None:
            raise EntityNotFoundError(f"Product with ID '{product_id}' not found")
        return product
    _, after = write_reserved(
        product_repo,
        product_id,
        lambda p: p.reserved_quantity + delta,
        max_retries,
    )
    return after
