from __future__ import annotations

import threading
from unittest.mock import MagicMock

import numpy as np
import pytest

from meshisele.catalog.models import CatalogItem, CatalogKind, FilterSpec
from meshisele.catalog.providers import StaticCatalogProvider
from meshisele.selection.errors import ProviderUnavailable
from meshisele.selection.selector import (
    CandidateSelector,
    CatalogSource,
    SelectionStage,
    SelectorConfig,
)


def _item(item_id: str, **overrides) -> CatalogItem:
    fields = {
        "id": item_id,
        "name": item_id,
        "kind": CatalogKind.recipe,
        "tags": frozenset({"all"}),
        "cuisine": "washoku",
        "estimated_cost": 400,
        "total_time_minutes": 20,
    }
    fields.update(overrides)
    return CatalogItem(**fields)


CATALOG = [
    _item("oyakodon", tags=frozenset({"all", "meat", "chicken", "egg"}), allergens=frozenset({"卵"})),
    _item("mapo", cuisine="chuka", tags=frozenset({"all", "meat", "tofu", "pork"}), estimated_cost=350),
    _item("pasta", cuisine="italian", tags=frozenset({"all", "vegetarian", "tomato"}), estimated_cost=700),
    _item("steak", cuisine="yoshoku", tags=frozenset({"all", "meat", "beef"}), estimated_cost=1400),
]


def _static(items=CATALOG) -> StaticCatalogProvider:
    return StaticCatalogProvider(CatalogKind.recipe, items=items)


def _primary(items=None, side_effect=None) -> MagicMock:
    provider = MagicMock()
    provider.name = "fake:recipes"
    if side_effect is not None:
        provider.fetch.side_effect = side_effect
    else:
        provider.fetch.return_value = list(items or [])
    return provider


def _selector(primary=None, static=None, seed=0, **config) -> CandidateSelector:
    return CandidateSelector(
        primary=primary,
        static=static or _static(),
        config=SelectorConfig(**config),
        rng=np.random.default_rng(seed),
    )


def test_strict_match_from_primary():
    selector = _selector(primary=_primary(CATALOG))
    result = selector.select(FilterSpec(cuisine="chuka"))
    assert result.found
    assert result.item.id == "mapo"
    assert result.stage == SelectionStage.strict
    assert result.source == CatalogSource.primary


def test_strict_pick_satisfies_every_filter():
    selector = _selector(primary=_primary(CATALOG))
    for seed in range(20):
        selector._rng = np.random.default_rng(seed)
        result = selector.select(FilterSpec(diet_tag="meat", budget="under500"))
        assert result.item.id in {"oyakodon", "mapo"}
        assert result.stage == SelectionStage.strict
        assert result.candidate_count == 2


def test_cuisine_relaxed_when_nothing_strict():
    selector = _selector(primary=_primary(CATALOG))
    result = selector.select(FilterSpec(cuisine="korean", diet_tag="vegetarian"))
    assert result.item.id == "pasta"
    assert result.stage == SelectionStage.lenient


def test_exclusions_only_as_last_resort():
    selector = _selector(primary=_primary(CATALOG))
    result = selector.select(FilterSpec(diet_tag="glutenFree", excluded_allergens=frozenset({"卵"})))
    assert result.found
    assert result.stage == SelectionStage.exclusions_only
    assert result.item.id != "oyakodon"


def test_exclusions_never_relaxed():
    everything = frozenset({"oyakodon", "mapo", "pasta", "steak"})
    selector = _selector(primary=_primary(CATALOG))
    result = selector.select(FilterSpec(excluded_ingredients=everything))
    assert not result.found
    assert result.stage == SelectionStage.not_found


def test_required_ingredients_respected():
    selector = _selector(primary=_primary(CATALOG))
    result = selector.select(FilterSpec(required_ingredients=frozenset({"Tofu"})))
    assert result.item.id == "mapo"
    assert result.stage == SelectionStage.strict


def test_required_ingredients_kept_when_cuisine_relaxed():
    selector = _selector(primary=_primary(CATALOG))
    result = selector.select(FilterSpec(cuisine="french", required_ingredients=frozenset({"beef"})))
    assert result.item.id == "steak"
    assert result.stage == SelectionStage.lenient


def test_unknown_ingredient_is_not_found():
    static = MagicMock(wraps=_static())
    static.name = "static:recipes"
    selector = _selector(primary=_primary(CATALOG), static=static)
    result = selector.select(FilterSpec(required_ingredients=frozenset({"mango"})))
    assert not result.found
    static.fetch.assert_not_called()


def test_unknown_ingredient_ignored_in_surprise_mode():
    selector = _selector(primary=_primary(CATALOG))
    result = selector.select(FilterSpec(required_ingredients=frozenset({"mango"}), surprise=True))
    assert result.found
    assert result.stage == SelectionStage.strict


def test_primary_settles_for_partial_ingredient_match():
    selector = _selector(primary=_primary([CATALOG[2]]))
    result = selector.select(FilterSpec(required_ingredients=frozenset({"tomato", "mango"})))
    assert result.item.id == "pasta"
    assert result.stage == SelectionStage.best_effort
    assert result.source == CatalogSource.primary


def test_partial_match_keeps_other_filters():
    selector = _selector(primary=_primary(CATALOG))
    result = selector.select(
        FilterSpec(cuisine="chuka", required_ingredients=frozenset({"pork", "mango"})),
    )
    assert result.item.id == "mapo"
    assert result.stage == SelectionStage.best_effort


def test_partial_match_disabled_by_config():
    selector = _selector(primary=_primary([CATALOG[2]]), ingredient_best_effort=False)
    result = selector.select(FilterSpec(required_ingredients=frozenset({"tomato", "mango"})))
    assert not result.found


def test_static_catalog_never_settles_for_partial_match():
    result = _selector().select(FilterSpec(required_ingredients=frozenset({"tomato", "mango"})))
    assert not result.found
    assert result.stage == SelectionStage.not_found


def test_falls_back_to_static_when_primary_raises():
    primary = _primary(side_effect=ProviderUnavailable("fake:recipes", "boom"))
    selector = _selector(primary=primary)
    result = selector.select(FilterSpec(cuisine="italian"))
    assert result.item.id == "pasta"
    assert result.source == CatalogSource.static


def test_falls_back_to_static_on_unexpected_error():
    selector = _selector(primary=_primary(side_effect=RuntimeError("bug")))
    result = selector.select(FilterSpec())
    assert result.found
    assert result.source == CatalogSource.static


def test_falls_back_to_static_when_primary_empty():
    selector = _selector(primary=_primary([]))
    result = selector.select(FilterSpec(cuisine="yoshoku"))
    assert result.item.id == "steak"
    assert result.source == CatalogSource.static


def test_falls_back_to_static_on_timeout():
    release = threading.Event()

    def slow_fetch(spec):
        release.wait(5)
        return CATALOG

    selector = _selector(primary=_primary(side_effect=slow_fetch), timeout=0.05)
    try:
        result = selector.select(FilterSpec(cuisine="chuka"))
    finally:
        release.set()
    assert result.item.id == "mapo"
    assert result.source == CatalogSource.static


def test_primary_exhausted_falls_back_to_static():
    primary = _primary([_item("only", allergens=frozenset({"乳"}))])
    selector = _selector(primary=primary)
    result = selector.select(FilterSpec(excluded_allergens=frozenset({"乳"})))
    assert result.found
    assert result.source == CatalogSource.static


def test_no_primary_uses_static():
    result = _selector().select(FilterSpec(diet_tag="vegetarian"))
    assert result.item.id == "pasta"
    assert result.source == CatalogSource.static


def test_static_failure_returns_not_found():
    static = MagicMock()
    static.name = "static:recipes"
    static.fetch.side_effect = FileNotFoundError("recipes.json")
    result = _selector(static=static).select(FilterSpec())
    assert not result.found


def test_empty_catalog_returns_not_found():
    result = _selector(static=_static([])).select(FilterSpec())
    assert not result.found
    assert result.item is None


def test_same_seed_same_pick():
    spec = FilterSpec(diet_tag="meat")
    selector_a, selector_b = _selector(seed=7), _selector(seed=7)
    picks_a = [selector_a.select(spec).item.id for _ in range(5)]
    picks_b = [selector_b.select(spec).item.id for _ in range(5)]
    assert picks_a == picks_b


def test_every_candidate_can_be_picked():
    selector = _selector(seed=1)
    seen = {selector.select(FilterSpec()).item.id for _ in range(200)}
    assert seen == {"oyakodon", "mapo", "pasta", "steak"}


@pytest.mark.parametrize("cuisine", [None, "all", "すべて"])
def test_all_cuisines_is_unfiltered(cuisine):
    result = _selector().select(FilterSpec(cuisine=cuisine))
    assert result.stage == SelectionStage.strict
    assert result.candidate_count == len(CATALOG)
