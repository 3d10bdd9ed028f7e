from __future__ import annotations

from pydantic import BaseModel, Field

from ..catalog.models import MealMode


class HistoryCreateRequest(BaseModel):
    mode: MealMode
    result_type: str = Field(..., description="recipe, eating_out_meal or restaurant")
    result_id: str = Field(..., min_length=1)
    result_name: str = Field(..., min_length=1)
    diet_filter: str = "all"
    cuisine: str | None = None
    is_surprise: bool = False
    specified_ingredients: list[str] = Field(default_factory=list)
    excluded_ingredients: list[str] = Field(default_factory=list)
    budget_range: str | None = None
    cook_time: int | None = None
    is_decided: bool = True


class HistoryUpdateRequest(BaseModel):
    rating: int | None = Field(default=None, ge=0, le=5)
    comment: str | None = Field(default=None, max_length=500)


class HistoryEntry(HistoryCreateRequest):
    id: str
    user: str
    created_at: float
    rating: int = Field(default=0, ge=0, le=5)
    comment: str = ""
