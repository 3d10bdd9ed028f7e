from __future__ import annotations

from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator


class CatalogKind(str, Enum):
    recipe = "recipe"
    eating_out_meal = "eating_out_meal"
    restaurant = "restaurant"


class MealMode(str, Enum):
    cook = "cook"
    eat_out = "eatOut"


class DietFilter(str, Enum):
    all = "all"
    healthy = "healthy"
    vegetarian = "vegetarian"
    low_carb = "lowCarb"
    gluten_free = "glutenFree"
    meat = "meat"


ALL_CUISINES = "all"
OTHER_CUISINE = "other"

# Raw cuisine value -> display name used by the mobile client.
CUISINE_DISPLAY_NAMES: dict[str, str] = {
    "all": "すべて",
    "washoku": "和食",
    "yoshoku": "洋食",
    "chuka": "中華",
    "italian": "イタリアン",
    "korean": "韓国",
    "french": "フレンチ",
    "other": "その他",
}

MAIN_CUISINES = frozenset({"washoku", "yoshoku", "chuka", "italian", "korean", "french"})

_DISPLAY_TO_RAW = {v: k for k, v in CUISINE_DISPLAY_NAMES.items()}


def normalize_cuisine(value: str | None) -> str | None:
    """Map a display name (e.g. ``和食``) or raw value to the raw cuisine key."""
    if value is None:
        return None
    stripped = value.strip()
    if not stripped:
        return None
    if stripped in _DISPLAY_TO_RAW:
        return _DISPLAY_TO_RAW[stripped]
    return stripped.lower()


COOK_TIME_OPTIONS: dict[str, int | None] = {
    "tenMin": 10,
    "thirtyMin": 30,
    "sixtyMin": 60,
    "noLimit": None,
}


class BudgetKind(str, Enum):
    under500 = "under500"
    between500_1000 = "between500_1000"
    between1000_1500 = "between1000_1500"
    custom = "custom"
    no_limit = "noLimit"


_BAND_ALIASES = {
    "under500": BudgetKind.under500,
    "500to1000": BudgetKind.between500_1000,
    "between500_1000": BudgetKind.between500_1000,
    "1000to1500": BudgetKind.between1000_1500,
    "between1000_1500": BudgetKind.between1000_1500,
    "nolimit": BudgetKind.no_limit,
    "no_limit": BudgetKind.no_limit,
}


class BudgetRange(BaseModel):
    """Budget band in yen.

    The preset bands are half-open on the lower side (``500 < cost <= 1000``).
    A custom band includes its minimum, and a minimum of zero or below means
    "no lower bound".
    """

    model_config = ConfigDict(frozen=True)

    kind: BudgetKind = BudgetKind.no_limit
    min: int | None = None
    max: int | None = None

    @model_validator(mode="after")
    def _check_custom(self) -> "BudgetRange":
        if self.kind == BudgetKind.custom:
            if self.max is None:
                raise ValueError("custom budget requires a max value")
            if self.min is not None and self.min > self.max:
                raise ValueError("custom budget min must not exceed max")
        return self

    @classmethod
    def under500(cls) -> "BudgetRange":
        return cls(kind=BudgetKind.under500)

    @classmethod
    def between500_1000(cls) -> "BudgetRange":
        return cls(kind=BudgetKind.between500_1000)

    @classmethod
    def between1000_1500(cls) -> "BudgetRange":
        return cls(kind=BudgetKind.between1000_1500)

    @classmethod
    def custom(cls, min_cost: int, max_cost: int) -> "BudgetRange":
        return cls(kind=BudgetKind.custom, min=min_cost, max=max_cost)

    @classmethod
    def no_limit(cls) -> "BudgetRange":
        return cls(kind=BudgetKind.no_limit)

    @classmethod
    def from_raw(cls, raw: str) -> "BudgetRange":
        """Parse the stored string form, e.g. ``between500_1000`` or ``custom_300_800``."""
        value = raw.strip()
        if value.startswith("custom_"):
            parts = value[len("custom_"):].split("_")
            if len(parts) != 2:
                raise ValueError(f"invalid custom budget: {raw!r}")
            try:
                return cls.custom(int(parts[0]), int(parts[1]))
            except ValueError as exc:
                raise ValueError(f"invalid custom budget: {raw!r}") from exc
        kind = _BAND_ALIASES.get(value) or _BAND_ALIASES.get(value.lower())
        if kind is None:
            raise ValueError(f"unknown budget option: {raw!r}")
        return cls(kind=kind)

    @property
    def raw_value(self) -> str:
        if self.kind == BudgetKind.custom:
            return f"custom_{self.min or 0}_{self.max}"
        return self.kind.value

    @property
    def min_value(self) -> int | None:
        return {
            BudgetKind.between500_1000: 500,
            BudgetKind.between1000_1500: 1000,
            BudgetKind.custom: self.min,
        }.get(self.kind)

    @property
    def max_value(self) -> int | None:
        return {
            BudgetKind.under500: 500,
            BudgetKind.between500_1000: 1000,
            BudgetKind.between1000_1500: 1500,
            BudgetKind.custom: self.max,
        }.get(self.kind)

    @property
    def display_name(self) -> str:
        if self.kind == BudgetKind.under500:
            return "¥500以下"
        if self.kind == BudgetKind.between500_1000:
            return "¥500〜¥1000"
        if self.kind == BudgetKind.between1000_1500:
            return "¥1000〜¥1500"
        if self.kind == BudgetKind.custom:
            return f"¥{self.min or 0}〜¥{self.max}"
        return "指定なし"

    def matches(self, cost: float) -> bool:
        if self.kind == BudgetKind.no_limit:
            return True
        if self.kind == BudgetKind.custom:
            lower = self.min or 0
            return (lower <= 0 or cost >= lower) and cost <= self.max
        if self.kind == BudgetKind.under500:
            return cost <= 500
        return self.min_value < cost <= self.max_value


class CatalogItem(BaseModel):
    """One selectable record: a recipe, an eating-out meal type or a restaurant."""

    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    kind: CatalogKind = CatalogKind.recipe
    tags: frozenset[str] = Field(default_factory=frozenset)
    cuisine: str = ""
    estimated_cost: float = 0.0
    total_time_minutes: float | None = None
    allergens: frozenset[str] = Field(default_factory=frozenset)

    description: str = ""
    emoji: str = ""
    search_keywords: tuple[str, ...] = ()
    popularity_count: int = 0
    servings: int = 1
    image_url: str | None = None
    address: str | None = None
    rating: float | None = None
    latitude: float | None = None
    longitude: float | None = None
    opening_hours: str | None = None
    ingredients: tuple[str, ...] = ()
    instructions: tuple[str, ...] = ()

    @classmethod
    def from_record(cls, kind: CatalogKind, record: dict[str, Any]) -> "CatalogItem":
        """Build an item from a raw catalog document (bundled JSON or remote payload).

        Field names follow the stored documents (``dietTags``, ``estimatedCost``
        and so on). Recipe costs are stored per recipe and converted to a
        per-serving cost here.
        """
        allergen_data = record.get("allergens") or {}
        if isinstance(allergen_data, dict):
            allergens = list(allergen_data.get("mandatory") or []) + list(
                allergen_data.get("recommended") or []
            )
        else:
            allergens = list(allergen_data)

        tags = list(record.get("dietTags") or record.get("tags") or [])
        keywords = list(record.get("searchKeywords") or [])
        servings = max(1, int(record.get("servings") or 1))
        time_minutes = None
        name = record.get("name") or ""

        if kind == CatalogKind.recipe:
            name = record.get("title") or name or "Unknown Recipe"
            tags += list(record.get("ingredientTags") or [])
            total_cost = max(0, int(record.get("estimatedCost") or 0))
            cost = float(int(total_cost / servings))
            time_minutes = float(record.get("totalTime") or 0)
        elif kind == CatalogKind.eating_out_meal:
            cost = float(record.get("estimatedBudget") or 1000)
            keywords = keywords or [name]
        else:
            tags += list(record.get("categories") or [])
            cost = float(record.get("estimatedBudget") or record.get("estimatedCost") or 0)

        return cls(
            id=str(record.get("id") or name),
            name=name,
            kind=kind,
            tags=frozenset(str(t) for t in tags if str(t).strip()),
            cuisine=normalize_cuisine(record.get("cuisine")) or "",
            estimated_cost=cost,
            total_time_minutes=time_minutes,
            allergens=frozenset(str(a) for a in allergens if str(a).strip()),
            description=record.get("description") or "",
            emoji=record.get("emoji") or "",
            search_keywords=tuple(str(k) for k in keywords),
            popularity_count=max(0, int(record.get("popularityCount") or 0)),
            servings=servings,
            image_url=record.get("imageURL"),
            address=record.get("address"),
            rating=record.get("rating"),
            latitude=record.get("latitude"),
            longitude=record.get("longitude"),
            opening_hours=record.get("openingHours"),
            ingredients=tuple(str(i) for i in record.get("ingredients") or ()),
            instructions=tuple(str(s) for s in record.get("instructions") or ()),
        )


class FilterSpec(BaseModel):
    """Caller-supplied filters for one selection attempt."""

    model_config = ConfigDict(frozen=True)

    diet_tag: str = DietFilter.all.value
    cuisine: str | None = None
    budget: BudgetRange = Field(default_factory=BudgetRange.no_limit)
    max_time_minutes: float | None = None
    excluded_ingredients: frozenset[str] = Field(default_factory=frozenset)
    excluded_allergens: frozenset[str] = Field(default_factory=frozenset)
    required_ingredients: frozenset[str] | None = None
    surprise: bool = False
    search_keywords: tuple[str, ...] = ()

    @field_validator("cuisine")
    @classmethod
    def _normalize_cuisine(cls, value: str | None) -> str | None:
        return normalize_cuisine(value)

    @field_validator("budget", mode="before")
    @classmethod
    def _parse_budget(cls, value: Any) -> Any:
        if isinstance(value, str):
            return BudgetRange.from_raw(value)
        return value

    @field_validator("excluded_ingredients", "excluded_allergens", mode="before")
    @classmethod
    def _strip_blank(cls, value: Any) -> Any:
        if value is None:
            return frozenset()
        return frozenset(str(v).strip() for v in value if str(v).strip())

    @property
    def active_required_ingredients(self) -> frozenset[str]:
        """Required ingredients in effect, empty in surprise mode."""
        if self.surprise or not self.required_ingredients:
            return frozenset()
        return frozenset(i for i in self.required_ingredients if i.strip())
