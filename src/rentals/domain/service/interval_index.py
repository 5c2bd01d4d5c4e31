"""Domain service: Interval Index.

Projects the order repository into the set of occupying reservation
intervals for a product.  Nothing here is cached or mutated; every call
reads the repository again, so a cancelled order stops counting as soon
as the repository reports it cancelled.
"""

from __future__ import annotations

import logging
from collections import defaultdict
from typing import Iterable

from rentals.domain.model.order import Order
from rentals.domain.model.reservation import ReservationInterval
from rentals.domain.repository.order_repository import OrderRepository

logger = logging.getLogger(__name__)


def intervals_from_orders(
    orders: Iterable[Order], product_id: str | None = None
) -> list[ReservationInterval]:
    """Return occupying intervals, sorted by start date then order ID.

    With ``product_id`` only that product's intervals are kept.
    """
    result = [
        interval
        for order in orders
        for interval in ReservationInterval.from_order(order)
        if interval.is_occupying
        and (product_id is None or interval.product_id == product_id)
    ]
    result.sort(key=lambda i: i.sort_key)
    return result


class IntervalIndex:

    def __init__(self, order_repo: OrderRepository) -> None:
        self._order_repo = order_repo

    def for_product(self, product_id: str) -> tuple[ReservationInterval, ...]:
        """Occupying intervals for one product.

        ``RepositoryUnavailable`` propagates: an unreadable repository means
        the reservations are unknown, not that there are none.
        """
        orders = self._order_repo.find_by_product(product_id)
        intervals = tuple(intervals_from_orders(orders, product_id))
        logger.debug(
            "Indexed %d occupying interval(s) for product %s",
            len(intervals),
            product_id,
        )
        return intervals

    def for_all_products(self) -> dict[str, tuple[ReservationInterval, ...]]:
        """Occupying intervals for every product, from one repository scan."""
        grouped: dict[str, list[ReservationInterval]] = defaultdict(list)
        for interval in intervals_from_orders(self._order_repo.list_all()):
            grouped[interval.product_id].append(interval)
        logger.debug("Indexed occupying intervals for %d product(s)", len(grouped))
        return {pid: tuple(items) for pid, items in grouped.items()}
