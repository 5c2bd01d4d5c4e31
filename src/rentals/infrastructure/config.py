"""Runtime settings, read from ``RENTALS_*`` environment variables or ``.env``."""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

# Resolve data directory relative to the project root.
# When installed in editable mode the project root is the repo root.
_DEFAULT_DATA_DIR = Path(__file__).resolve().parents[3] / "data"


class Settings(BaseSettings):
    """Settings for the reservation engine and its CLI."""

    model_config = SettingsConfigDict(
        env_prefix="RENTALS_",
        env_file=".env",
        case_sensitive=False,
    )

    # Storage
    data_dir: Path = _DEFAULT_DATA_DIR

    # Optimistic counter writes
    max_write_retries: int = Field(default=3, ge=0, le=20)

    # Logging
    log_level: str = "INFO"

    @property
    def products_file(self) -> Path:
        return self.data_dir / "products.json"

    @property
    def orders_file(self) -> Path:
        return self.data_dir / "orders.json"


@lru_cache
def get_settings() -> Settings:
    return Settings()
