from __future__ import annotations

import os

from fastapi import Depends, FastAPI, HTTPException, Query, Request
from starlette.middleware.sessions import SessionMiddleware

from .analytics.aggregator import compute_analytics
from .analytics.store import get_events
from .auth.dependencies import require_admin, require_user
from .auth.models import DefaultPreferences, LoginRequest, SignupRequest
from .auth.users import (
    UserExistsError,
    authenticate,
    delete_user,
    get_preferences,
    signup,
    update_preferences,
)
from .catalog.data_store import get_bundled_cuisines
from .catalog.models import (
    COOK_TIME_OPTIONS,
    CUISINE_DISPLAY_NAMES,
    BudgetRange,
    CatalogKind,
    DietFilter,
    MealMode,
)
from .history.models import HistoryCreateRequest, HistoryEntry, HistoryUpdateRequest
from .history.store import add_entry, delete_entry, delete_user_history, get_entries, update_entry
from .ingredients.cache import get_cache_stats
from .ingredients.search import is_valid_ingredient, search_ingredients
from .selection.models import DecideRequest, DecideResponse, RestaurantDecideRequest
from .selection.service import decide

app = FastAPI(title="MeshiSele API", version="1.0.0")
app.add_middleware(
    SessionMiddleware,
    secret_key=os.environ.get("SESSION_SECRET", "meshisele-secret-change-in-production"),
)


# ── Public endpoints ─────────────────────────────────────────────────────


@app.get("/health")
def health() -> dict[str, str]:
    return {"status": "ok"}


@app.get("/metadata")
def metadata() -> dict:
    budgets = [
        BudgetRange.under500(),
        BudgetRange.between500_1000(),
        BudgetRange.between1000_1500(),
        BudgetRange.no_limit(),
    ]
    return {
        "modes": [m.value for m in MealMode],
        "diet_filters": [d.value for d in DietFilter],
        "cuisines": [{"value": k, "display_name": v} for k, v in CUISINE_DISPLAY_NAMES.items()],
        "budget_ranges": [{"value": b.raw_value, "display_name": b.display_name} for b in budgets],
        "cook_time_options": COOK_TIME_OPTIONS,
        "catalog_cuisines": get_bundled_cuisines(),
    }


# ── Auth endpoints ───────────────────────────────────────────────────────


@app.post("/auth/signup")
def auth_signup(body: SignupRequest, request: Request) -> dict:
    try:
        user = signup(body.username, body.password, body.display_name)
    except UserExistsError:
        raise HTTPException(status_code=409, detail="Username already taken")
    request.session["user"] = user
    return {"status": "ok", "user": user}


@app.post("/auth/login")
def login(body: LoginRequest, request: Request) -> dict:
    user = authenticate(body.username, body.password)
    if not user:
        raise HTTPException(status_code=401, detail="Invalid credentials")
    request.session["user"] = user
    return {"status": "ok", "user": user}


@app.post("/auth/logout")
def logout(request: Request) -> dict:
    request.session.clear()
    return {"status": "logged_out"}


@app.get("/auth/me")
def auth_me(user: dict = Depends(require_user)) -> dict:
    preferences = get_preferences(user["username"])
    return {**user, "preferences": preferences.model_dump() if preferences else None}


@app.put("/auth/preferences", response_model=DefaultPreferences)
def auth_preferences(
    body: DefaultPreferences,
    user: dict = Depends(require_user),
) -> DefaultPreferences:
    updated = update_preferences(user["username"], body)
    if updated is None:
        raise HTTPException(status_code=404, detail="User not found")
    return updated


@app.delete("/auth/me")
def auth_delete(request: Request, user: dict = Depends(require_user)) -> dict:
    if not delete_user(user["username"]):
        raise HTTPException(status_code=404, detail="User not found")
    removed = delete_user_history(user["username"])
    request.session.clear()
    return {"status": "deleted", "history_removed": removed}


# ── Decide endpoints ─────────────────────────────────────────────────────


@app.post("/decide", response_model=DecideResponse)
def decide_meal(
    body: DecideRequest,
    user: dict = Depends(require_user),
) -> DecideResponse:
    kind = CatalogKind.recipe if body.mode == MealMode.cook else CatalogKind.eating_out_meal
    return decide(kind, body.to_spec(), mode=body.mode.value)


@app.post("/restaurants/decide", response_model=DecideResponse)
def decide_restaurant(
    body: RestaurantDecideRequest,
    user: dict = Depends(require_user),
) -> DecideResponse:
    keywords = list(body.search_keywords)
    if body.meal_name and body.meal_name not in keywords:
        keywords.append(body.meal_name)
    return decide(CatalogKind.restaurant, body.to_spec(tuple(keywords)), mode="restaurant")


# ── Ingredient endpoints ─────────────────────────────────────────────────


@app.get("/ingredients/search")
def ingredients_search(
    q: str = Query(default="", max_length=50),
    user: dict = Depends(require_user),
) -> dict:
    return {"query": q, "results": search_ingredients(q)}


@app.get("/ingredients/validate")
def ingredients_validate(
    name: str = Query(..., min_length=1, max_length=50),
    user: dict = Depends(require_user),
) -> dict:
    return {"name": name, "valid": is_valid_ingredient(name)}


# ── History endpoints ────────────────────────────────────────────────────


@app.get("/history", response_model=list[HistoryEntry])
def history_list(user: dict = Depends(require_user)) -> list[HistoryEntry]:
    return get_entries(user["username"])


@app.post("/history", response_model=HistoryEntry)
def history_add(
    body: HistoryCreateRequest,
    user: dict = Depends(require_user),
) -> HistoryEntry:
    return add_entry(user["username"], body)


@app.patch("/history/{entry_id}", response_model=HistoryEntry)
def history_update(
    entry_id: str,
    body: HistoryUpdateRequest,
    user: dict = Depends(require_user),
) -> HistoryEntry:
    entry = update_entry(user["username"], entry_id, body)
    if entry is None:
        raise HTTPException(status_code=404, detail="History entry not found")
    return entry


@app.delete("/history/{entry_id}")
def history_delete(entry_id: str, user: dict = Depends(require_user)) -> dict:
    if not delete_entry(user["username"], entry_id):
        raise HTTPException(status_code=404, detail="History entry not found")
    return {"status": "deleted"}


# ── Admin endpoints ──────────────────────────────────────────────────────


@app.get("/analytics")
def analytics(user: dict = Depends(require_admin)) -> dict:
    return compute_analytics(get_events())


@app.get("/cache/stats")
def cache_stats(user: dict = Depends(require_admin)) -> dict:
    return get_cache_stats()
