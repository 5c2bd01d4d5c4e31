"""JSON-file-backed implementation of ProductRepository."""

from __future__ import annotations

import json
import threading
from pathlib import Path

from rentals.domain.exceptions import (
    EntityNotFoundError,
    RepositoryUnavailable,
    ValidationError,
    WriteConflict,
)
from rentals.domain.model.product import Product
from rentals.domain.repository.product_repository import ProductRepository


class JsonProductRepository(ProductRepository):

    def __init__(self, file_path: Path) -> None:
        self._file_path = file_path
        self._lock = threading.Lock()
        self._ensure_file()

    # --- ProductRepository interface ------------------------------------------

    def get_by_id(self, product_id: str) -> Product | None:
        with self._lock:
            return self._load().get(product_id)

    def get_by_name(self, name: str) -> Product | None:
        for product in self.list_all():
            if product.name.lower() == name.lower():
                return product
        return None

    def list_all(self) -> list[Product]:
        with self._lock:
            return list(self._load().values())

    def save(self, product: Product) -> None:
        with self._lock:
            products = self._load()
            existing = products.get(product.id)
            if existing is not None:
                # Catalog edits never overwrite the counter.
                product.reserved_quantity = existing.reserved_quantity
                product.version = existing.version
            products[product.id] = product
            self._persist(products)

    def update_reserved(
        self, product_id: str, reserved_quantity: int, expected_version: int
    ) -> Product:
        with self._lock:
            products = self._load()
            current = products.get(product_id)
            if current is None:
                raise EntityNotFoundError(f"Product with ID '{product_id}' not found")
            if current.version != expected_version:
                raise WriteConflict(product_id, expected_version, current.version)
            updated = current.with_reserved(reserved_quantity)
            products[product_id] = updated
            self._persist(products)
            return updated

    # --- Serialization helpers ------------------------------------------------

    @staticmethod
    def _to_raw(product: Product) -> dict:
        return {
            "id": product.id,
            "name": product.name,
            "stock_quantity": product.stock_quantity,
            "reserved_quantity": product.reserved_quantity,
            "version": product.version,
        }

    @staticmethod
    def _to_domain(raw: dict) -> Product:
        return Product(
            id=str(raw["id"]),
            name=raw.get("name", "Unknown Product"),
            stock_quantity=raw.get("stock_quantity", 0),
            reserved_quantity=raw.get("reserved_quantity", 0),
            version=raw.get("version", 0),
        )

    # --- File helpers ---------------------------------------------------------

    def _load(self) -> dict[str, Product]:
        try:
            raw = json.loads(self._file_path.read_text(encoding="utf-8"))
            return {str(item["id"]): self._to_domain(item) for item in raw}
        except (OSError, ValueError, KeyError, TypeError, ValidationError) as exc:
            raise RepositoryUnavailable(
                f"Cannot read products from {self._file_path}: {exc}"
            ) from exc

    def _persist(self, products: dict[str, Product]) -> None:
        raw = [self._to_raw(p) for p in products.values()]
        try:
            self._file_path.write_text(
                json.dumps(raw, indent=2) + "\n", encoding="utf-8"
            )
        except OSError as exc:
            raise RepositoryUnavailable(
                f"Cannot write products to {self._file_path}: {exc}"
            ) from exc

    def _ensure_file(self) -> None:
        if not self._file_path.exists():
            self._file_path.parent.mkdir(parents=True, exist_ok=True)
            self._file_path.write_text("[]", encoding="utf-8")
