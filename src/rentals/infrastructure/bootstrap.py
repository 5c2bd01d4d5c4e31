"""Composition root — wires concrete implementations to domain interfaces.

This is the only place in the codebase that knows about *all* layers.
Every other module depends only on abstractions.
"""

from __future__ import annotations

from rentals.domain.service.reconciliation import ReconciliationJob
from rentals.infrastructure.config import get_settings
from rentals.infrastructure.persistence.json_order_repository import (
    JsonOrderRepository,
)
from rentals.infrastructure.persistence.json_product_repository import (
    JsonProductRepository,
)


def product_repository() -> JsonProductRepository:
    return JsonProductRepository(get_settings().products_file)


def order_repository() -> JsonOrderRepository:
    return JsonOrderRepository(get_settings().orders_file)


def reconciliation_job() -> ReconciliationJob:
    return ReconciliationJob(
        product_repository(),
        order_repository(),
        max_write_retries=get_settings().max_write_retries,
    )
