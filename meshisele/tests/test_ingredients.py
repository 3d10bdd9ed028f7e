from __future__ import annotations

from meshisele.ingredients.cache import clear_cache, get_cache_stats
from meshisele.ingredients.search import (
    MAX_RESULTS,
    is_valid_ingredient,
    normalize_text,
    score_ingredient,
    search_ingredients,
)


def test_exact_match_scores_highest_base():
    assert score_ingredient("鶏肉", "鶏肉") == 1000


def test_prefix_beats_plain_substring():
    results = search_ingredients("豚", vocabulary=["牛肉", "豚バラ", "豚肉"])
    assert results == ["豚肉", "豚バラ"]


def test_hiragana_query_finds_katakana_ingredient():
    assert search_ingredients("とまと", vocabulary=["玉ねぎ", "トマト"]) == ["トマト"]


def test_alias_match():
    assert score_ingredient("チキン", "鶏肉") == 300
    assert search_ingredients("チキン", vocabulary=["牛肉", "鶏肉"]) == ["鶏肉"]


def test_blank_query_returns_nothing():
    assert search_ingredients("   ", vocabulary=["鶏肉"]) == []


def test_results_capped():
    vocab = [f"卵{i}" for i in range(15)]
    assert len(search_ingredients("卵", vocabulary=vocab)) == MAX_RESULTS


def test_normalize_folds_width_and_kana():
    assert normalize_text("ｷｬﾍﾞﾂ") == normalize_text("きゃべつ")
    assert normalize_text("TOMATO") == "tomato"


def test_bundled_vocabulary_search_uses_cache():
    clear_cache()
    first = search_ingredients("ねぎ")
    second = search_ingredients(" ねぎ ")
    assert first == second
    assert {"ねぎ", "玉ねぎ"} <= set(first)
    stats = get_cache_stats()
    assert stats["hits"] == 1
    assert stats["misses"] == 1
    assert stats["size"] == 1


def test_is_valid_ingredient():
    vocab = ["トマト", "キャベツ"]
    assert is_valid_ingredient("トマト", vocabulary=vocab)
    assert is_valid_ingredient("とまと", vocabulary=vocab)
    assert is_valid_ingredient("ｷｬﾍﾞﾂ", vocabulary=vocab)
    assert not is_valid_ingredient("mango", vocabulary=vocab)
    assert not is_valid_ingredient(" ", vocabulary=vocab)
