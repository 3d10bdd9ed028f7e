from __future__ import annotations

from meshisele.catalog.models import BudgetRange, CatalogItem, CatalogKind, FilterSpec
from meshisele.selection.predicates import (
    matches_all,
    matches_budget,
    matches_cuisine,
    has_any_required_ingredient,
    matches_diet,
    matches_required_ingredients,
    matches_time,
    passes_exclusions,
)


def _item(**overrides) -> CatalogItem:
    fields = {
        "id": "r1",
        "name": "親子丼",
        "kind": CatalogKind.recipe,
        "tags": frozenset({"all", "meat", "鶏肉", "卵"}),
        "cuisine": "washoku",
        "estimated_cost": 400,
        "total_time_minutes": 20,
        "allergens": frozenset({"卵"}),
    }
    fields.update(overrides)
    return CatalogItem(**fields)


def test_diet_all_always_matches():
    assert matches_diet(_item(tags=frozenset()), "all")


def test_diet_requires_tag():
    assert matches_diet(_item(), "meat")
    assert not matches_diet(_item(), "vegetarian")


def test_cuisine_none_and_all_match():
    assert matches_cuisine(_item(), None)
    assert matches_cuisine(_item(), "all")


def test_cuisine_exact_and_display_name():
    assert matches_cuisine(_item(), "washoku")
    assert matches_cuisine(_item(), "和食")
    assert not matches_cuisine(_item(), "chuka")


def test_cuisine_other_matches_non_main_only():
    assert matches_cuisine(_item(cuisine="タイ料理"), "other")
    assert not matches_cuisine(_item(cuisine="washoku"), "other")


def test_budget_uses_band():
    assert matches_budget(_item(estimated_cost=500), BudgetRange.under500())
    assert not matches_budget(_item(estimated_cost=501), BudgetRange.under500())


def test_time_limit():
    assert matches_time(_item(total_time_minutes=30), 30)
    assert not matches_time(_item(total_time_minutes=31), 30)
    assert matches_time(_item(total_time_minutes=None), 10)
    assert matches_time(_item(), None)


def test_exclusions_substring_case_insensitive():
    item = _item(name="Chicken Curry", tags=frozenset({"Chicken"}))
    assert not passes_exclusions(item, ["chick"], [])
    assert not passes_exclusions(item, ["CURRY"], [])
    assert passes_exclusions(item, ["beef", " "], [])


def test_exclusions_allergens_must_be_disjoint():
    assert not passes_exclusions(_item(), [], ["卵"])
    assert passes_exclusions(_item(), [], ["乳"])


def test_required_ingredients_subset():
    item = _item()
    assert matches_required_ingredients(item, {"鶏肉", "卵"})
    assert not matches_required_ingredients(item, {"鶏肉", "mango"})
    assert matches_required_ingredients(item, set())
    assert matches_required_ingredients(item, None)
    assert matches_required_ingredients(item, {"mango"}, surprise=True)


def test_matches_all_conjunction():
    spec = FilterSpec(diet_tag="meat", cuisine="washoku", budget="under500", max_time_minutes=30)
    assert matches_all(_item(), spec)
    assert not matches_all(_item(cuisine="chuka"), spec)
    assert matches_all(_item(cuisine="chuka"), spec, ignore_cuisine=True)
    assert not matches_all(_item(), spec.model_copy(update={"excluded_allergens": frozenset({"卵"})}))


def test_matches_all_requires_every_ingredient():
    item = _item(tags=frozenset({"all", "tomato"}))
    spec = FilterSpec(required_ingredients=frozenset({"mango"}))
    assert matches_all(item, spec) is False
    assert matches_all(item, spec, ignore_required=True)
    assert matches_all(item, FilterSpec(required_ingredients=frozenset({"Tomato"})))


def test_matches_all_ignores_ingredients_in_surprise_mode():
    item = _item(tags=frozenset({"all"}))
    assert matches_all(item, FilterSpec(required_ingredients=frozenset({"mango"}), surprise=True))


def test_has_any_required_ingredient():
    item = _item()
    assert has_any_required_ingredient(item, {"鶏肉", "mango"})
    assert not has_any_required_ingredient(item, {"mango"})
    assert not has_any_required_ingredient(item, set())


def test_predicates_are_pure():
    item = _item()
    spec = FilterSpec(diet_tag="meat")
    results = {matches_all(item, spec) for _ in range(5)}
    assert results == {True}
