"""JSON-file-backed implementation of OrderRepository.

Older records keep their rental dates on the order rather than on each
line item, and the oldest ones have a single top-level ``product_id`` and
no ``items`` at all (one unit).  Both shapes are read; only the current
shape is written.
"""

from __future__ import annotations

import json
import threading
from datetime import datetime
from pathlib import Path

from rentals.domain.exceptions import RepositoryUnavailable, ValidationError
from rentals.domain.model.order import Order, OrderLineItem, OrderStatus, TransactionType
from rentals.domain.model.value_objects import DateRange, Quantity
from rentals.domain.repository.order_repository import OrderRepository


class JsonOrderRepository(OrderRepository):

    def __init__(self, file_path: Path) -> None:
        self._file_path = file_path
        self._lock = threading.Lock()
        self._ensure_file()

    # --- OrderRepository interface --------------------------------------------

    def next_id(self) -> str:
        with self._lock:
            return self._next_id(self._load_raw())

    def get_by_id(self, order_id: str) -> Order | None:
        with self._lock:
            records = self._load_raw()
        for raw in records:
            if str(raw["id"]) == order_id:
                return self._decode(raw)
        return None

    def find_by_product(self, product_id: str) -> list[Order]:
        return [
            order
            for order in self.list_all()
            if order.find_item(product_id) is not None
        ]

    def list_all(self) -> list[Order]:
        with self._lock:
            records = self._load_raw()
        return [self._decode(raw) for raw in records]

    def save(self, order: Order) -> None:
        with self._lock:
            orders = self._load_raw()

            if order.id is None:
                order.id = self._next_id(orders)

            # Upsert: replace if exists, otherwise append
            replaced = False
            for i, raw in enumerate(orders):
                if str(raw["id"]) == order.id:
                    orders[i] = self._to_raw(order)
                    replaced = True
                    break
            if not replaced:
                orders.append(self._to_raw(order))

            self._persist_raw(orders)

    # --- Serialization --------------------------------------------------------

    @staticmethod
    def _to_raw(order: Order) -> dict:
        return {
            "id": order.id,
            "customer_name": order.customer_name,
            "status": order.status.value,
            "transaction_type": order.transaction_type.value,
            "created_at": order.created_at.isoformat(),
            "items": [
                {
                    "product_id": item.product_id,
                    "product_name": item.product_name,
                    "quantity": item.quantity.value,
                    "delivery_date": item.period.start.isoformat(),
                    "return_date": item.period.end.isoformat(),
                }
                for item in order.items
            ],
        }

    @staticmethod
    def _to_domain(raw: dict) -> Order:
        raw_items = raw.get("items")
        if not raw_items and raw.get("product_id"):
            raw_items = [{"product_id": raw["product_id"], "quantity": 1}]

        items = [
            OrderLineItem(
                product_id=str(i["product_id"]),
                product_name=i.get("product_name", ""),
                quantity=Quantity(i.get("quantity", 1)),
                period=DateRange.parse(
                    i.get("delivery_date") or raw["delivery_date"],
                    i.get("return_date") or raw.get("return_date"),
                ),
            )
            for i in raw_items or []
        ]
        return Order(
            id=str(raw["id"]),
            customer_name=raw.get("customer_name", ""),
            items=items,
            status=OrderStatus(raw["status"]),
            transaction_type=TransactionType(raw.get("transaction_type", "Rental")),
            created_at=datetime.fromisoformat(raw["created_at"]),
        )

    def _decode(self, raw: dict) -> Order:
        try:
            return self._to_domain(raw)
        except (KeyError, ValueError, TypeError, ValidationError) as exc:
            raise RepositoryUnavailable(
                f"Malformed order record {raw.get('id')!r} in {self._file_path}: {exc}"
            ) from exc

    # --- File helpers ---------------------------------------------------------

    @staticmethod
    def _next_id(orders: list[dict]) -> str:
        numeric = [int(o["id"]) for o in orders if str(o["id"]).isdigit()]
        return str(max(numeric) + 1) if numeric else "1"

    def _load_raw(self) -> list[dict]:
        try:
            return json.loads(self._file_path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as exc:
            raise RepositoryUnavailable(
                f"Cannot read orders from {self._file_path}: {exc}"
            ) from exc

    def _persist_raw(self, orders: list[dict]) -> None:
        try:
            self._file_path.write_text(
                json.dumps(orders, indent=2) + "\n", encoding="utf-8"
            )
        except OSError as exc:
            raise RepositoryUnavailable(
                f"Cannot write orders to {self._file_path}: {exc}"
            ) from exc

    def _ensure_file(self) -> None:
        if not self._file_path.exists():
            self._file_path.parent.mkdir(parents=True, exist_ok=True)
            self._file_path.write_text("[]", encoding="utf-8")
