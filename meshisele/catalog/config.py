from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path

from dotenv import load_dotenv

# Load .env from project root
load_dotenv(Path(__file__).resolve().parent.parent.parent / ".env")


@dataclass(frozen=True)
class CatalogConfig:
    remote_base_url: str = field(default_factory=lambda: os.getenv("MESHISELE_CATALOG_URL", ""))
    api_key: str = field(default_factory=lambda: os.getenv("MESHISELE_CATALOG_API_KEY", ""))
    data_dir: Path = Path(__file__).resolve().parent.parent / "data"
    recipe_timeout: float = 8.0
    eating_out_timeout: float = 6.0
    restaurant_timeout: float = 6.0
    page_size: int = 200
    # Largest servings count assumed when widening a per-serving budget to a
    # per-recipe cost filter. None sends no cost filter for recipes.
    recipe_max_servings: int | None = 4

    @property
    def remote_enabled(self) -> bool:
        return bool(self.remote_base_url)


DEFAULT_CATALOG_CONFIG = CatalogConfig()
