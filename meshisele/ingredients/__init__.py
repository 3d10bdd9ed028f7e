"""
Ingredient suggestions.

Responsibilities:
- Build the ingredient vocabulary from the recipe catalog.
- Rank vocabulary entries against a partially typed query, kana-insensitively.
- Cache recent query results.
"""
