"""Per-item filter predicates.

Every function here is pure: the result depends only on its arguments, so a
predicate can be evaluated in any order and any number of times.
"""
from __future__ import annotations

from collections.abc import Iterable

from ..catalog.models import (
    ALL_CUISINES,
    MAIN_CUISINES,
    OTHER_CUISINE,
    BudgetRange,
    CatalogItem,
    DietFilter,
    FilterSpec,
    normalize_cuisine,
)


def matches_diet(item: CatalogItem, diet_tag: str) -> bool:
    return diet_tag == DietFilter.all.value or diet_tag in item.tags


def matches_cuisine(item: CatalogItem, cuisine: str | None) -> bool:
    wanted = normalize_cuisine(cuisine)
    if wanted is None or wanted == ALL_CUISINES:
        return True
    if wanted == OTHER_CUISINE:
        return item.cuisine not in MAIN_CUISINES
    return item.cuisine == wanted


def matches_budget(item: CatalogItem, budget: BudgetRange) -> bool:
    return budget.matches(item.estimated_cost)


def matches_time(item: CatalogItem, max_minutes: float | None) -> bool:
    # Restaurants carry no cooking time and always pass.
    if max_minutes is None or item.total_time_minutes is None:
        return True
    return item.total_time_minutes <= max_minutes


def passes_exclusions(
    item: CatalogItem,
    excluded_ingredients: Iterable[str],
    excluded_allergens: Iterable[str],
) -> bool:
    name = item.name.lower()
    tags = [t.lower() for t in item.tags]
    for excluded in excluded_ingredients:
        needle = excluded.strip().lower()
        if not needle:
            continue
        if needle in name or any(needle in tag for tag in tags):
            return False
    return item.allergens.isdisjoint(excluded_allergens)


def matches_required_ingredients(
    item: CatalogItem,
    required: Iterable[str] | None,
    surprise: bool = False,
) -> bool:
    """Every required ingredient must be one of the item's tags.

    Inactive (always true) in surprise mode or when nothing is required.
    """
    wanted = {r.strip().lower() for r in (required or ()) if r.strip()}
    if surprise or not wanted:
        return True
    tags = {t.lower() for t in item.tags}
    return wanted <= tags


def has_any_required_ingredient(item: CatalogItem, required: Iterable[str] | None) -> bool:
    """At least one required ingredient is among the item's tags."""
    wanted = {r.strip().lower() for r in (required or ()) if r.strip()}
    tags = {t.lower() for t in item.tags}
    return not wanted.isdisjoint(tags)


def matches_all(
    item: CatalogItem,
    spec: FilterSpec,
    *,
    ignore_cuisine: bool = False,
    ignore_required: bool = False,
) -> bool:
    """True iff the item satisfies every active predicate of ``spec``.

    The flags switch off single predicates for the selector's relaxed passes.
    """
    checks = [
        matches_diet(item, spec.diet_tag),
        ignore_cuisine or matches_cuisine(item, spec.cuisine),
        matches_budget(item, spec.budget),
        matches_time(item, spec.max_time_minutes),
        passes_exclusions(item, spec.excluded_ingredients, spec.excluded_allergens),
        ignore_required or matches_required_ingredients(item, spec.active_required_ingredients),
    ]
    return all(checks)
