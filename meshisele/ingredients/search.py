from __future__ import annotations

import logging
import unicodedata

from ..catalog.config import DEFAULT_CATALOG_CONFIG, CatalogConfig
from ..catalog.data_store import get_ingredient_vocabulary
from .cache import cache_get, cache_set

logger = logging.getLogger(__name__)

MAX_RESULTS = 10

SCORE_EXACT = 1000
SCORE_PREFIX = 800
SCORE_SUBSTRING = 600
SCORE_NORMALIZED = 400
SCORE_ALIAS = 300
SCORE_KANA_VARIATION = 200

# Canonical ingredient -> common spellings users type instead.
INGREDIENT_ALIASES: dict[str, list[str]] = {
    "鶏肉": ["とりにく", "とり", "チキン", "鶏"],
    "豚肉": ["ぶたにく", "ぶた", "ポーク", "豚"],
    "牛肉": ["ぎゅうにく", "うし", "ビーフ", "牛"],
    "玉ねぎ": ["たまねぎ", "オニオン", "玉葱"],
    "人参": ["にんじん", "ニンジン", "キャロット"],
    "じゃがいも": ["じゃが芋", "ジャガイモ", "ポテト"],
    "キャベツ": ["きゃべつ", "キャベジ"],
    "卵": ["たまご", "エッグ", "玉子"],
    "海老": ["えび", "エビ", "シュリンプ"],
    "鮭": ["さけ", "サケ", "サーモン"],
    "豆腐": ["とうふ", "トウフ"],
    "ご飯": ["ごはん", "米", "こめ", "ライス"],
    "にんにく": ["ニンニク", "ガーリック"],
    "生姜": ["しょうが", "ショウガ", "ジンジャー"],
    "ねぎ": ["ネギ", "葱"],
    "もやし": ["モヤシ"],
    "きのこ": ["キノコ", "茸"],
    "トマト": ["とまと", "tomato"],
    "レタス": ["れたす"],
    "きゅうり": ["キュウリ", "胡瓜"],
}

_KATAKANA_START, _KATAKANA_END = 0x30A1, 0x30F6
_HIRAGANA_START, _HIRAGANA_END = 0x3041, 0x3096
_KANA_OFFSET = _KATAKANA_START - _HIRAGANA_START


def to_hiragana(text: str) -> str:
    return "".join(
        chr(ord(ch) - _KANA_OFFSET) if _KATAKANA_START <= ord(ch) <= _KATAKANA_END else ch
        for ch in text
    )


def to_katakana(text: str) -> str:
    return "".join(
        chr(ord(ch) + _KANA_OFFSET) if _HIRAGANA_START <= ord(ch) <= _HIRAGANA_END else ch
        for ch in text
    )


def normalize_text(text: str) -> str:
    """Fold width variants and katakana so that ``トマト`` and ``とまと`` compare equal."""
    return to_hiragana(unicodedata.normalize("NFKC", text)).lower()


def _matches_alias(query: str, ingredient: str) -> bool:
    variations = INGREDIENT_ALIASES.get(ingredient)
    if not variations:
        return False
    return any(query in variation for variation in variations)


def _matches_kana_variation(normalized_query: str, normalized_ingredient: str) -> bool:
    return to_katakana(normalized_query) in normalized_ingredient


def score_ingredient(query: str, ingredient: str) -> int:
    """Relevance of ``ingredient`` for a typed ``query``; 0 means no match."""
    if ingredient == query:
        return SCORE_EXACT

    normalized_query = normalize_text(query)
    normalized_ingredient = normalize_text(ingredient)

    score = 0
    if ingredient.startswith(query):
        score += SCORE_PREFIX
    if query in ingredient:
        score += SCORE_SUBSTRING
    if normalized_query in normalized_ingredient:
        score += SCORE_NORMALIZED
    if _matches_alias(query, ingredient):
        score += SCORE_ALIAS
    if score == 0 and _matches_kana_variation(normalized_query, normalized_ingredient):
        score += SCORE_KANA_VARIATION
    return score


def search_ingredients(
    query: str,
    vocabulary: list[str] | None = None,
    config: CatalogConfig = DEFAULT_CATALOG_CONFIG,
) -> list[str]:
    """Top matches for ``query``, best first. Blank queries return nothing."""
    trimmed = query.strip()
    if not trimmed:
        return []

    use_cache = vocabulary is None
    if use_cache:
        cached = cache_get(trimmed)
        if cached is not None:
            return cached
        vocabulary = get_ingredient_vocabulary(config)

    scored = [(ingredient, score_ingredient(trimmed, ingredient)) for ingredient in vocabulary]
    ranked = sorted((s for s in scored if s[1] > 0), key=lambda s: s[1], reverse=True)
    results = [ingredient for ingredient, _ in ranked[:MAX_RESULTS]]
    logger.debug("Ingredient query %r matched %d of %d entries", trimmed, len(ranked), len(vocabulary))

    if use_cache:
        cache_set(trimmed, results)
    return results


def is_valid_ingredient(
    ingredient: str,
    vocabulary: list[str] | None = None,
    config: CatalogConfig = DEFAULT_CATALOG_CONFIG,
) -> bool:
    trimmed = ingredient.strip()
    if not trimmed:
        return False
    if vocabulary is None:
        vocabulary = get_ingredient_vocabulary(config)
    if trimmed in vocabulary:
        return True

    normalized = normalize_text(trimmed)
    for candidate in vocabulary:
        normalized_candidate = normalize_text(candidate)
        if normalized_candidate == normalized or _matches_kana_variation(normalized, normalized_candidate):
            return True
    return False
