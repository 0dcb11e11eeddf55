# flake8: noqa
import sys
from pathlib import Path

# Ensure project root is on sys.path so `bistro` can be imported when tests are run
sys.path.insert(0, str(Path(__file__).resolve().parent.parent))  # noqa: E402

import random

import pytest

from bistro.lucky import MOODS, suggest_by_mood, suggest_random
from bistro.schemas import Ingredient, Recipe


def make(rid, ingredients, cooking_time=30, servings=4, tags=()):
    return Recipe(
        id=rid,
        name=f"Recipe {rid}",
        recipe_ingredients=ingredients,
        cooking_time=cooking_time,
        servings=servings,
        tags=list(tags),
    )


PANTRY = [Ingredient(id=1, name="Rice"), Ingredient(id=2, name="Eggs")]

RECIPES = [
    make(1, ["Rice"]),
    make(2, ["Beef", "Rice"]),
    make(3, ["Egg", "Rice"]),
    make(4, ["Salmon"]),
    make(5, ["Tofu", "Soy sauce"]),
]


def test_prefer_available_only_picks_cookable():
    rng = random.Random(42)
    picks = {suggest_random(RECIPES, PANTRY, True, rng).id for _ in range(1000)}
    assert picks == {1, 3}


def test_no_cookable_recipes_falls_back_to_all():
    rng = random.Random(7)
    picks = {suggest_random(RECIPES, [], True, rng).id for _ in range(500)}
    assert picks == {1, 2, 3, 4, 5}


def test_without_preference_any_recipe_can_come_up():
    rng = random.Random(3)
    picks = {suggest_random(RECIPES, PANTRY, False, rng).id for _ in range(500)}
    assert picks == {1, 2, 3, 4, 5}


def test_empty_recipe_list():
    assert suggest_random([], PANTRY) is None
    assert suggest_by_mood([], "quick") is None


class FixedRandom:
    def __init__(self, value):
        self.value = value

    def random(self):
        return self.value


def test_uniform_index_selection():
    assert suggest_random(RECIPES, [], False, FixedRandom(0.0)).id == 1
    assert suggest_random(RECIPES, [], False, FixedRandom(0.999)).id == 5
    assert suggest_random(RECIPES, [], False, FixedRandom(0.5)).id == 3


def test_mood_predicates():
    quick = make(1, [], cooking_time=30)
    slow_pair = make(2, [], cooking_time=45, servings=2)
    crowd = make(3, [], cooking_time=90, servings=6)
    assert MOODS["quick"].predicate(quick)
    assert not MOODS["quick"].predicate(slow_pair)
    assert MOODS["date-night"].predicate(slow_pair)
    assert not MOODS["date-night"].predicate(quick)
    assert MOODS["family"].predicate(crowd)
    assert not MOODS["family"].predicate(slow_pair)

    assert MOODS["comfort"].predicate(make(4, [], tags=["WARM"]))
    assert MOODS["healthy"].predicate(make(5, [], tags=["Light"]))
    assert MOODS["adventurous"].predicate(make(6, [], tags=["international"]))
    assert not MOODS["adventurous"].predicate(make(7, [], tags=["mild"]))


def test_mood_picks_only_matching_recipes():
    recipes = RECIPES + [make(10, ["Chili"], tags=["Spicy"]), make(11, ["Curry"], tags=["exotic"])]
    rng = random.Random(1)
    picks = {suggest_by_mood(recipes, "adventurous", PANTRY, rng=rng).id for _ in range(200)}
    assert picks == {10, 11}


def test_mood_accepts_custom_predicate():
    rng = random.Random(1)
    pick = suggest_by_mood(RECIPES, lambda r: r.id == 4, rng=rng)
    assert pick.id == 4


def test_mood_without_matches_falls_back_to_random():
    rng = random.Random(5)
    picks = {suggest_by_mood(RECIPES, "date-night", PANTRY, rng=rng).id for _ in range(200)}
    # nothing is a date-night recipe, so the cookable preference applies
    assert picks == {1, 3}


def test_unknown_mood():
    with pytest.raises(KeyError):
        suggest_by_mood(RECIPES, "grumpy")
