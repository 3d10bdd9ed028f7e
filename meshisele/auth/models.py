from __future__ import annotations

from pydantic import BaseModel, Field, field_validator

from ..catalog.models import COOK_TIME_OPTIONS, BudgetRange, DietFilter


class LoginRequest(BaseModel):
    username: str = Field(..., min_length=1)
    password: str = Field(..., min_length=1)


class SignupRequest(LoginRequest):
    password: str = Field(..., min_length=6)
    display_name: str = Field(default="", max_length=50)

    @field_validator("username")
    @classmethod
    def _strip_username(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("username must not be blank")
        return value


class ModePreferences(BaseModel):
    """Default filters for one meal mode."""

    diet_filter: DietFilter = DietFilter.all
    cuisine: str = "all"
    surprise: bool = False
    specified_ingredients: list[str] = Field(default_factory=list)
    excluded_ingredients: list[str] = Field(default_factory=list)
    excluded_allergens: list[str] = Field(default_factory=list)
    budget_range: str = "noLimit"

    @field_validator("budget_range")
    @classmethod
    def _valid_budget(cls, value: str) -> str:
        return BudgetRange.from_raw(value).raw_value


class DefaultPreferences(BaseModel):
    cook: ModePreferences = Field(default_factory=ModePreferences)
    cook_servings_count: int = Field(default=1, ge=1, le=10)
    cook_time_constraint: str = "noLimit"
    eat_out: ModePreferences = Field(default_factory=ModePreferences)

    @field_validator("cook_time_constraint")
    @classmethod
    def _valid_cook_time(cls, value: str) -> str:
        if value not in COOK_TIME_OPTIONS:
            raise ValueError(f"unknown cook time option: {value!r}")
        return value
