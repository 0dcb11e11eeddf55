import random
from typing import Callable, Dict, Iterable, NamedTuple, Optional, Sequence, Union

from .matching import classify
from .schemas import Ingredient, Recipe

RecipePredicate = Callable[[Recipe], bool]


class Mood(NamedTuple):
    slug: str
    label: str
    emoji: str
    predicate: RecipePredicate


def _has_any_tag(*wanted):
    wanted = {w.lower() for w in wanted}

    def predicate(recipe: Recipe) -> bool:
        return any(tag.lower() in wanted for tag in recipe.tags)

    return predicate


MOODS: Dict[str, Mood] = {
    m.slug: m
    for m in [
        Mood("quick", "Quick & Easy", "⚡", lambda r: r.cooking_time <= 30),
        Mood("comfort", "Comfort Food", "🤗", _has_any_tag("comfort", "hearty", "warm")),
        Mood("healthy", "Healthy", "🥗", _has_any_tag("healthy", "light", "fresh")),
        Mood("adventurous", "Adventurous", "🌶️", _has_any_tag("spicy", "exotic", "international")),
        Mood("family", "Family Dinner", "👨‍👩‍👧‍👦", lambda r: r.servings >= 4),
        Mood(
            "date-night", "Date Night", "💕",
            lambda r: r.servings <= 2 and r.cooking_time >= 45,
        ),
    ]
}


def _pick(recipes: Sequence[Recipe], rng) -> Recipe:
    return recipes[int(rng.random() * len(recipes))]


def suggest_random(
    recipes: Sequence[Recipe],
    pantry: Iterable[Ingredient] = (),
    prefer_available: bool = True,
    rng: Optional[random.Random] = None,
) -> Optional[Recipe]:
    """Pick a recipe uniformly at random.

    With ``prefer_available`` the pick comes from the cookable recipes when
    there are any, otherwise from all of them. Returns None for an empty
    recipe list.
    """
    if not recipes:
        return None
    rng = rng or random
    candidates = list(recipes)
    if prefer_available:
        pantry = list(pantry)
        cookable = [r for r in candidates if classify(r, pantry).cookable]
        if cookable:
            candidates = cookable
    return _pick(candidates, rng)


def suggest_by_mood(
    recipes: Sequence[Recipe],
    mood: Union[str, RecipePredicate],
    pantry: Iterable[Ingredient] = (),
    prefer_available: bool = True,
    rng: Optional[random.Random] = None,
) -> Optional[Recipe]:
    """Pick a random recipe matching a mood, or any recipe if none match.

    ``mood`` is either one of the ``MOODS`` slugs or a predicate. An unknown
    slug raises KeyError.
    """
    predicate = MOODS[mood].predicate if isinstance(mood, str) else mood
    matching = [r for r in recipes if predicate(r)]
    if not matching:
        return suggest_random(recipes, pantry, prefer_available, rng)
    return _pick(matching, rng or random)
