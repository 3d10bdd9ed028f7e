from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field, field_validator

from ..catalog.models import BudgetRange, DietFilter, FilterSpec, MealMode


class FilterRequest(BaseModel):
    """Filters as sent by the client; budget accepts the stored string form."""

    diet_filter: DietFilter = DietFilter.all
    cuisine: str | None = None
    budget: BudgetRange = Field(default_factory=BudgetRange.no_limit)
    max_time_minutes: int | None = Field(default=None, ge=1)
    excluded_ingredients: list[str] = Field(default_factory=list)
    excluded_allergens: list[str] = Field(default_factory=list)
    required_ingredients: list[str] | None = None
    surprise: bool = False

    @field_validator("budget", mode="before")
    @classmethod
    def _parse_budget(cls, value: Any) -> Any:
        if isinstance(value, str):
            return BudgetRange.from_raw(value)
        return value

    def to_spec(self, search_keywords: tuple[str, ...] = ()) -> FilterSpec:
        return FilterSpec(
            diet_tag=self.diet_filter.value,
            cuisine=self.cuisine,
            budget=self.budget,
            max_time_minutes=self.max_time_minutes,
            excluded_ingredients=self.excluded_ingredients,
            excluded_allergens=self.excluded_allergens,
            required_ingredients=frozenset(self.required_ingredients) if self.required_ingredients else None,
            surprise=self.surprise,
            search_keywords=search_keywords,
        )


class DecideRequest(FilterRequest):
    mode: MealMode = MealMode.cook


class RestaurantDecideRequest(FilterRequest):
    meal_name: str | None = None
    search_keywords: list[str] = Field(default_factory=list)


class ItemOut(BaseModel):
    id: str
    name: str
    kind: str
    cuisine: str
    cuisine_display: str
    estimated_cost: float
    total_time_minutes: float | None = None
    tags: list[str]
    allergens: list[str]
    description: str = ""
    emoji: str = ""
    servings: int = 1
    image_url: str | None = None
    address: str | None = None
    rating: float | None = None
    latitude: float | None = None
    longitude: float | None = None
    opening_hours: str | None = None
    ingredients: list[str] = Field(default_factory=list)
    instructions: list[str] = Field(default_factory=list)
    popularity_count: int = 0


class DecideResponse(BaseModel):
    found: bool
    item: ItemOut | None = None
    stage: str
    source: str | None = None
    candidate_count: int = 0
    message_key: str | None = None
    response_time_ms: float = 0.0
