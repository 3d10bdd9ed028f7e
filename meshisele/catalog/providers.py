"""Catalog sources the candidate selector draws from.

A provider only narrows the volume of data; the selector re-applies every
filter locally, so push-down filtering here may be partial or missing.
"""
from __future__ import annotations

import logging
from typing import Any, Protocol

import requests

from ..selection.errors import ProviderUnavailable
from .config import DEFAULT_CATALOG_CONFIG, CatalogConfig
from .data_store import get_catalog
from .models import (
    ALL_CUISINES,
    MAIN_CUISINES,
    OTHER_CUISINE,
    CatalogItem,
    CatalogKind,
    DietFilter,
    FilterSpec,
)

logger = logging.getLogger(__name__)

# Remote collection name per catalog.
COLLECTIONS: dict[CatalogKind, str] = {
    CatalogKind.recipe: "recipes",
    CatalogKind.eating_out_meal: "eatingOutMeals",
    CatalogKind.restaurant: "restaurants",
}

class CatalogProvider(Protocol):
    name: str

    def fetch(self, spec: FilterSpec) -> list[CatalogItem]: ...


def _keyword_match(item: CatalogItem, keywords: tuple[str, ...]) -> bool:
    haystack = [item.name.lower(), *(t.lower() for t in item.tags), *(k.lower() for k in item.search_keywords)]
    for keyword in keywords:
        needle = keyword.strip().lower()
        if needle and any(needle in h or h in needle for h in haystack if h):
            return True
    return False


class StaticCatalogProvider:
    """Bundled offline catalog, loaded once per process."""

    def __init__(
        self,
        kind: CatalogKind,
        items: list[CatalogItem] | None = None,
        config: CatalogConfig = DEFAULT_CATALOG_CONFIG,
    ) -> None:
        self.kind = kind
        self.name = f"static:{COLLECTIONS[kind]}"
        self._items = tuple(items) if items is not None else None
        self._config = config

    def _all_items(self) -> tuple[CatalogItem, ...]:
        if self._items is None:
            self._items = get_catalog(self.kind, self._config)
        return self._items

    def fetch(self, spec: FilterSpec) -> list[CatalogItem]:
        items = list(self._all_items())
        if spec.search_keywords and self.kind == CatalogKind.restaurant:
            # Meal-specific restaurants first; the generic list when none match
            specific = [i for i in items if _keyword_match(i, spec.search_keywords)]
            if specific:
                return specific
        return items


class RemoteCatalogProvider:
    """HTTP catalog service exposing Firestore-style collections.

    ``GET {base_url}/{collection}`` with the push-down filters as query
    parameters; the response is either a JSON list of documents or an object
    with a ``documents`` list.
    """

    def __init__(
        self,
        kind: CatalogKind,
        config: CatalogConfig = DEFAULT_CATALOG_CONFIG,
        session: requests.Session | None = None,
        timeout: float | None = None,
    ) -> None:
        self.kind = kind
        self.name = f"remote:{COLLECTIONS[kind]}"
        self._config = config
        self._session = session or requests.Session()
        self._timeout = timeout or default_timeout(kind, config)

    def build_params(self, spec: FilterSpec) -> dict[str, Any]:
        params: dict[str, Any] = {"limit": self._config.page_size}
        required = sorted(spec.active_required_ingredients)

        # Only one array-membership filter per query: ingredients win over diet tag
        if spec.diet_tag != DietFilter.all.value and not required:
            params["dietTag"] = spec.diet_tag
        if required:
            params["ingredientsAny"] = ",".join(required)

        if spec.cuisine and spec.cuisine != ALL_CUISINES:
            if spec.cuisine == OTHER_CUISINE:
                params["cuisineNotIn"] = ",".join(sorted(MAIN_CUISINES))
            else:
                params["cuisine"] = spec.cuisine

        low, high = spec.budget.min_value, spec.budget.max_value
        if self.kind == CatalogKind.recipe:
            # Stored recipe costs are per recipe, budgets are per serving
            low = None
            servings = self._config.recipe_max_servings
            high = high * servings if high is not None and servings else None
        if low is not None and low > 0:
            params["minCost"] = low
        if high is not None:
            params["maxCost"] = high

        if spec.search_keywords:
            params["keywords"] = ",".join(spec.search_keywords)
        return params

    def fetch(self, spec: FilterSpec) -> list[CatalogItem]:
        if not self._config.remote_enabled:
            raise ProviderUnavailable(self.name, "no catalog URL configured")

        url = f"{self._config.remote_base_url.rstrip('/')}/{COLLECTIONS[self.kind]}"
        headers = {"Authorization": f"Bearer {self._config.api_key}"} if self._config.api_key else {}
        try:
            resp = self._session.get(
                url, params=self.build_params(spec), headers=headers, timeout=self._timeout,
            )
            resp.raise_for_status()
            payload = resp.json()
        except (requests.RequestException, ValueError) as exc:
            raise ProviderUnavailable(self.name, str(exc)) from exc

        documents = payload.get("documents", []) if isinstance(payload, dict) else payload
        if not isinstance(documents, list):
            raise ProviderUnavailable(self.name, "unexpected payload shape")

        items: list[CatalogItem] = []
        for doc in documents:
            try:
                items.append(CatalogItem.from_record(self.kind, doc))
            except (AttributeError, TypeError, ValueError):
                logger.warning("Skipping malformed %s document: %r", self.kind.value, doc)
        logger.info("Provider %r returned %d documents", self.name, len(items))
        return items


def default_timeout(kind: CatalogKind, config: CatalogConfig) -> float:
    if kind == CatalogKind.recipe:
        return config.recipe_timeout
    if kind == CatalogKind.eating_out_meal:
        return config.eating_out_timeout
    return config.restaurant_timeout
