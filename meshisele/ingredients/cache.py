from __future__ import annotations

import time
from typing import Any

_cache: dict[str, dict[str, Any]] = {}
_hits: int = 0
_misses: int = 0
_DEFAULT_TTL = 300  # 5 minutes
MAX_CACHE_SIZE = 100
_EVICT_BATCH = 10


def _make_key(query: str) -> str:
    return query.strip()


def cache_get(query: str) -> list[str] | None:
    global _hits, _misses
    key = _make_key(query)
    entry = _cache.get(key)
    if entry and time.time() - entry["created_at"] < _DEFAULT_TTL:
        _hits += 1
        return list(entry["value"])
    if entry:
        del _cache[key]
    _misses += 1
    return None


def cache_set(query: str, value: list[str]) -> None:
    key = _make_key(query)
    if key not in _cache and len(_cache) >= MAX_CACHE_SIZE:
        # Oldest entries first; dicts keep insertion order
        for old_key in list(_cache)[:_EVICT_BATCH]:
            del _cache[old_key]
    _cache[key] = {"value": list(value), "created_at": time.time()}


def get_cache_stats() -> dict:
    total = _hits + _misses
    return {
        "size": len(_cache),
        "max_size": MAX_CACHE_SIZE,
        "hits": _hits,
        "misses": _misses,
        "hit_rate": round(_hits / total * 100, 1) if total > 0 else 0.0,
    }


def clear_cache() -> None:
    global _hits, _misses
    _cache.clear()
    _hits = 0
    _misses = 0
