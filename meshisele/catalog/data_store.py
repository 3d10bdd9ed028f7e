from __future__ import annotations

import json

import pandas as pd

from .config import DEFAULT_CATALOG_CONFIG, CatalogConfig
from .models import CatalogItem, CatalogKind, normalize_cuisine

# Bundled file name and top-level key per catalog.
_BUNDLED_FILES: dict[CatalogKind, tuple[str, str]] = {
    CatalogKind.recipe: ("recipes.json", "recipes"),
    CatalogKind.eating_out_meal: ("eating_out_meals.json", "eatingOutMeals"),
    CatalogKind.restaurant: ("restaurants.json", "restaurants"),
}

_frames: dict[CatalogKind, pd.DataFrame] = {}
_catalogs: dict[CatalogKind, tuple[CatalogItem, ...]] = {}


def _load(kind: CatalogKind, config: CatalogConfig) -> pd.DataFrame:
    filename, key = _BUNDLED_FILES[kind]
    path = config.data_dir / filename
    with path.open(encoding="utf-8") as fh:
        payload = json.load(fh)

    df = pd.DataFrame(payload.get(key, []))
    if df.empty:
        return df

    # Missing optional fields come through as NaN; model parsing expects None
    df = df.astype(object).where(df.notna(), None)
    df["id"] = df["id"].astype(str)
    df["cuisine_raw"] = df["cuisine"].apply(normalize_cuisine)
    return df


def get_dataframe(kind: CatalogKind, config: CatalogConfig = DEFAULT_CATALOG_CONFIG) -> pd.DataFrame:
    """Return the bundled catalog as a DataFrame, loading it on first call."""
    if kind not in _frames:
        _frames[kind] = _load(kind, config)
    return _frames[kind]


def get_catalog(kind: CatalogKind, config: CatalogConfig = DEFAULT_CATALOG_CONFIG) -> tuple[CatalogItem, ...]:
    """Return the bundled catalog as immutable items, built once per process."""
    if kind not in _catalogs:
        df = get_dataframe(kind, config)
        records = df.drop(columns=["cuisine_raw"], errors="ignore").to_dict(orient="records")
        _catalogs[kind] = tuple(CatalogItem.from_record(kind, r) for r in records)
    return _catalogs[kind]


def get_ingredient_vocabulary(config: CatalogConfig = DEFAULT_CATALOG_CONFIG) -> list[str]:
    """Sorted unique ingredient tags across the bundled recipes."""
    df = get_dataframe(CatalogKind.recipe, config)
    if df.empty or "ingredientTags" not in df.columns:
        return []
    tags = df["ingredientTags"].explode().dropna()
    return sorted({str(t).strip() for t in tags if str(t).strip()})


def get_bundled_cuisines(config: CatalogConfig = DEFAULT_CATALOG_CONFIG) -> list[str]:
    cuisines: set[str] = set()
    for kind in _BUNDLED_FILES:
        df = get_dataframe(kind, config)
        if not df.empty:
            cuisines.update(c for c in df["cuisine_raw"].dropna() if c)
    return sorted(cuisines)


def clear_catalog_cache() -> None:
    _frames.clear()
    _catalogs.clear()
