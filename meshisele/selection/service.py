from __future__ import annotations

import logging
import threading
import time

from ..analytics.store import record_event
from ..catalog.config import DEFAULT_CATALOG_CONFIG, CatalogConfig
from ..catalog.models import CUISINE_DISPLAY_NAMES, CatalogItem, CatalogKind, FilterSpec
from ..catalog.providers import RemoteCatalogProvider, StaticCatalogProvider, default_timeout
from ..history.store import get_popularity
from .models import DecideResponse, ItemOut
from .selector import CandidateSelector, SelectorConfig

logger = logging.getLogger(__name__)

# Localized message key returned when nothing could be picked.
NOT_FOUND_MESSAGES: dict[CatalogKind, str] = {
    CatalogKind.recipe: "no_recipe_found",
    CatalogKind.eating_out_meal: "no_meal_found",
    CatalogKind.restaurant: "no_restaurant_found",
}

_selectors: dict[CatalogKind, CandidateSelector] = {}
_selectors_lock = threading.Lock()


def build_selector(kind: CatalogKind, config: CatalogConfig = DEFAULT_CATALOG_CONFIG) -> CandidateSelector:
    """Remote catalog first when configured, bundled catalog as the fallback."""
    primary = RemoteCatalogProvider(kind, config) if config.remote_enabled else None
    return CandidateSelector(
        primary=primary,
        static=StaticCatalogProvider(kind, config=config),
        config=SelectorConfig(timeout=default_timeout(kind, config)),
    )


def get_selector(kind: CatalogKind) -> CandidateSelector:
    with _selectors_lock:
        if kind not in _selectors:
            _selectors[kind] = build_selector(kind)
        return _selectors[kind]


def reset_selectors() -> None:
    with _selectors_lock:
        for selector in _selectors.values():
            selector.shutdown()
        _selectors.clear()


def item_to_out(item: CatalogItem) -> ItemOut:
    return ItemOut(
        id=item.id,
        name=item.name,
        kind=item.kind.value,
        cuisine=item.cuisine,
        cuisine_display=CUISINE_DISPLAY_NAMES.get(item.cuisine, item.cuisine),
        estimated_cost=item.estimated_cost,
        total_time_minutes=item.total_time_minutes,
        tags=sorted(item.tags),
        allergens=sorted(item.allergens),
        description=item.description,
        emoji=item.emoji,
        servings=item.servings,
        image_url=item.image_url,
        address=item.address,
        rating=item.rating,
        latitude=item.latitude,
        longitude=item.longitude,
        opening_hours=item.opening_hours,
        ingredients=list(item.ingredients),
        instructions=list(item.instructions),
        popularity_count=item.popularity_count + get_popularity(item.kind.value, item.id),
    )


def decide(kind: CatalogKind, spec: FilterSpec, mode: str | None = None) -> DecideResponse:
    start_time = time.time()
    selection = get_selector(kind).select(spec)
    elapsed_ms = round((time.time() - start_time) * 1000, 1)

    record_event("decide", {
        "mode": mode or kind.value,
        "kind": kind.value,
        "stage": selection.stage.value,
        "source": selection.source.value if selection.source else None,
        "found": selection.found,
        "diet_tag": spec.diet_tag,
        "cuisine": spec.cuisine,
        "budget": spec.budget.raw_value,
        "surprise": spec.surprise,
        "required_ingredients": sorted(spec.active_required_ingredients),
        "candidate_count": selection.candidate_count,
        "response_time_ms": elapsed_ms,
    })

    if not selection.found:
        logger.info("No %s found for %s", kind.value, spec)
        return DecideResponse(
            found=False,
            stage=selection.stage.value,
            message_key=NOT_FOUND_MESSAGES[kind],
            response_time_ms=elapsed_ms,
        )

    return DecideResponse(
        found=True,
        item=item_to_out(selection.item),
        stage=selection.stage.value,
        source=selection.source.value,
        candidate_count=selection.candidate_count,
        response_time_ms=elapsed_ms,
    )
