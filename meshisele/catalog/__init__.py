"""
Meal and restaurant catalogs.

Responsibilities:
- Define the catalog item, budget band and filter models.
- Load the bundled offline catalogs (recipes, eating-out meals, restaurants).
- Provide interchangeable static and remote catalog sources.
"""
