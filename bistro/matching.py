# Substring matching only: no synonyms, plurals or edit distance.
# "egg" will happily match "eggplant"; callers live with that.

from typing import Iterable, List

from .schemas import Availability, Ingredient, IngredientStatus, Recipe


def matches(pantry_name: str, recipe_name: str) -> bool:
    """Return True if a pantry entry name satisfies a recipe ingredient name.

    Either lowercased name containing the other counts as a match, so
    "tomato" satisfies "cherry tomatoes" and the other way round. An empty
    name on either side never matches; surrounding whitespace is ignored.
    """
    p = (pantry_name or "").strip().lower()
    r = (recipe_name or "").strip().lower()
    if not p or not r:
        return False
    return p in r or r in p


def is_likely_duplicate(a: str, b: str) -> bool:
    """Stricter check used to warn before adding a pantry entry."""
    a = (a or "").strip().lower()
    b = (b or "").strip().lower()
    if not a or not b:
        return False
    if a == b:
        return True
    shorter, longer = sorted((a, b), key=len)
    if len(longer) - len(shorter) > 2:
        return False
    return len(shorter) >= 3 and shorter in longer


def find_likely_duplicates(name: str, pantry: Iterable[Ingredient]) -> List[Ingredient]:
    return [p for p in pantry if is_likely_duplicate(name, p.name)]


def in_stock(pantry: Iterable[Ingredient]) -> List[Ingredient]:
    return [p for p in pantry if p.in_stock]


def is_available(name: str, stock: Iterable[Ingredient]) -> bool:
    return any(matches(p.name, name) for p in stock)


def missing_ingredients(recipe: Recipe, pantry: Iterable[Ingredient]) -> List[str]:
    stock = in_stock(pantry)
    return [
        ri.name
        for ri in recipe.recipe_ingredients
        if not ri.optional and not is_available(ri.name, stock)
    ]


def classify(recipe: Recipe, pantry: Iterable[Ingredient]) -> Availability:
    """Work out which required ingredients the pantry cannot cover.

    Only in-stock pantry entries count. Optional ingredients never block a
    recipe and never show up in ``missing``.
    """
    missing = missing_ingredients(recipe, pantry)
    return Availability(missing=missing, cookable=not missing)


def order_for_display(recipe: Recipe, pantry: Iterable[Ingredient]) -> List[IngredientStatus]:
    # required-and-missing, then required-and-available, then optional
    stock = in_stock(pantry)
    statuses = [
        IngredientStatus(
            name=ri.name,
            optional=ri.optional,
            available=is_available(ri.name, stock),
        )
        for ri in recipe.recipe_ingredients
    ]
    return sorted(statuses, key=lambda s: (s.optional, s.optional or s.available))
