from __future__ import annotations

from collections import Counter
from typing import Any

from ..ingredients.cache import get_cache_stats


def compute_analytics(events: list[dict[str, Any]]) -> dict[str, Any]:
    decisions = [e for e in events if e["type"] == "decide"]
    total = len(decisions)

    # Average response time
    times = [d["response_time_ms"] for d in decisions if "response_time_ms" in d]
    avg_time = round(sum(times) / len(times), 1) if times else 0.0

    by_mode = Counter(d.get("mode", "unknown") for d in decisions)
    by_stage = Counter(d.get("stage", "unknown") for d in decisions)
    by_source = Counter(d["source"] for d in decisions if d.get("source"))

    # Top cuisines
    cuisine_counter: Counter[str] = Counter(d["cuisine"] for d in decisions if d.get("cuisine"))
    top_cuisines = [{"name": n, "count": c} for n, c in cuisine_counter.most_common(10)]

    # Top required ingredients
    ingredient_counter: Counter[str] = Counter()
    for d in decisions:
        for i in d.get("required_ingredients", []) or []:
            ingredient_counter[i] += 1
    top_ingredients = [{"name": n, "count": c} for n, c in ingredient_counter.most_common(10)]

    # Filter usage rates
    filter_counts = {"diet": 0, "cuisine": 0, "budget": 0, "ingredients": 0, "surprise": 0}
    for d in decisions:
        if d.get("diet_tag") not in (None, "all"):
            filter_counts["diet"] += 1
        if d.get("cuisine") not in (None, "all"):
            filter_counts["cuisine"] += 1
        if d.get("budget") not in (None, "noLimit"):
            filter_counts["budget"] += 1
        if d.get("required_ingredients"):
            filter_counts["ingredients"] += 1
        if d.get("surprise"):
            filter_counts["surprise"] += 1
    filter_usage = {
        k: round(v / total * 100, 1) if total else 0.0
        for k, v in filter_counts.items()
    }

    not_found = sum(1 for d in decisions if not d.get("found"))

    return {
        "total_decisions": total,
        "avg_response_time_ms": avg_time,
        "by_mode": dict(by_mode),
        "by_stage": dict(by_stage),
        "by_source": dict(by_source),
        "not_found": not_found,
        "not_found_rate": round(not_found / total * 100, 1) if total else 0.0,
        "top_cuisines": top_cuisines,
        "top_ingredients": top_ingredients,
        "filter_usage": filter_usage,
        "ingredient_cache": get_cache_stats(),
    }
