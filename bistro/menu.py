from typing import Iterable, List, Optional, Sequence

from pydantic import BaseModel, Field

from .matching import missing_ingredients
from .schemas import Ingredient, Menu, PartialMatch, Recipe

# Recipes missing more than this many ingredients are left off the menu
MAX_MISSING = 3


class MenuFilter(BaseModel):
    tags: List[str] = Field(default_factory=list)
    max_cooking_time: Optional[int] = None

    def accepts(self, recipe: Recipe) -> bool:
        if any(tag not in recipe.tags for tag in self.tags):
            return False
        if self.max_cooking_time and recipe.cooking_time > self.max_cooking_time:
            return False
        return True


def partition(recipes: Sequence[Recipe], pantry: Iterable[Ingredient]) -> Menu:
    """Split recipes into ready-to-cook and almost-ready lists.

    Every recipe is judged by its required ingredients only. ``partial``
    holds recipes missing between one and ``MAX_MISSING`` ingredients,
    fewest missing first.
    """
    pantry = list(pantry)
    available = []
    partial = []
    for recipe in recipes:
        missing = missing_ingredients(recipe, pantry)
        if not missing:
            available.append(recipe)
        elif len(missing) <= MAX_MISSING:
            partial.append(PartialMatch(recipe=recipe, missing=missing))
    partial.sort(key=lambda p: len(p.missing))
    return Menu(available=available, partial=partial)


def filter_menu(menu: Menu, menu_filter: Optional[MenuFilter] = None) -> Menu:
    if menu_filter is None:
        return menu.model_copy(deep=True)
    return Menu(
        available=[r for r in menu.available if menu_filter.accepts(r)],
        partial=[p for p in menu.partial if menu_filter.accepts(p.recipe)],
    )


def all_tags(recipes: Iterable[Recipe]) -> List[str]:
    seen = {}
    for recipe in recipes:
        for tag in recipe.tags:
            seen.setdefault(tag, None)
    return list(seen)
