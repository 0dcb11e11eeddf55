# flake8: noqa
import sys
from pathlib import Path

# Ensure project root is on sys.path so `bistro` can be imported when tests are run
sys.path.insert(0, str(Path(__file__).resolve().parent.parent))  # noqa: E402

from bistro.matching import (
    classify,
    find_likely_duplicates,
    is_likely_duplicate,
    matches,
    order_for_display,
)
from bistro.schemas import Ingredient, Recipe


def pantry(*names, out_of_stock=()):
    items = [Ingredient(id=i, name=n) for i, n in enumerate(names, start=1)]
    items += [
        Ingredient(id=100 + i, name=n, in_stock=False)
        for i, n in enumerate(out_of_stock)
    ]
    return items


def recipe(*ingredients, **extra):
    return Recipe(id=1, name="Dish", recipe_ingredients=list(ingredients), **extra)


NAMES = ["tomato", "Cherry Tomatoes", "egg", "Eggplant", "", "BASIL", "basil leaves", "x"]


def test_matches_is_symmetric():
    for a in NAMES:
        for b in NAMES:
            assert matches(a, b) == matches(b, a), (a, b)


def test_matches_substring_either_way():
    assert matches("tomato", "Cherry Tomatoes")
    assert matches("Cherry Tomatoes", "TOMATO")
    assert matches("Basil", "basil")
    assert not matches("basil", "oregano")


def test_short_names_still_match_longer_words():
    # known false positive, kept on purpose
    assert matches("egg", "eggplant")


def test_empty_name_never_matches():
    assert not matches("", "flour")
    assert not matches("flour", "")
    assert not matches("", "")


def test_blank_name_never_matches():
    assert not matches(" ", "olive oil")
    assert not matches("olive oil", "   ")
    assert matches(" Olive Oil ", "extra virgin olive oil")


def test_likely_duplicate():
    assert is_likely_duplicate("Tomato", "tomato")
    assert is_likely_duplicate("tomato", "tomatoes")
    assert is_likely_duplicate("egg", "eggs")
    # too far apart in length
    assert not is_likely_duplicate("egg", "eggplant")
    # shorter side below three characters
    assert not is_likely_duplicate("ab", "abc")
    assert not is_likely_duplicate("milk", "silk")


def test_find_likely_duplicates():
    items = pantry("Tomatoes", "Basil", "Eggplant")
    assert [i.name for i in find_likely_duplicates("tomato", items)] == ["Tomatoes"]
    assert find_likely_duplicates("egg", items) == []


def test_missing_basil_blocks_recipe():
    items = pantry("Tomato", out_of_stock=["Basil"])
    result = classify(recipe("Tomato", "Basil"), items)
    assert result.missing == ["Basil"]
    assert result.cookable is False


def test_optional_ingredient_never_blocks():
    items = pantry("Flour")
    r = recipe({"name": "Flour", "optional": False}, {"name": "Sugar", "optional": True})
    result = classify(r, items)
    assert result.cookable is True
    assert result.missing == []


def test_optional_milk_missing_still_cookable():
    r = recipe("Bread flour", {"name": "milk", "optional": True})
    assert classify(r, pantry("flour")).cookable


def test_empty_pantry_misses_everything():
    result = classify(recipe("Rice", "Beans"), [])
    assert result.missing == ["Rice", "Beans"]
    assert not result.cookable


def test_recipe_without_ingredients_is_cookable():
    assert classify(recipe(), []).cookable


def test_order_for_display():
    items = pantry("Pasta", out_of_stock=["Garlic"])
    r = recipe(
        "Pasta",
        {"name": "Chili", "optional": True},
        "Garlic",
        "Olive oil",
        {"name": "Pasta water", "optional": True},
    )
    ordered = order_for_display(r, items)
    assert [(s.name, s.available) for s in ordered] == [
        ("Garlic", False),
        ("Olive oil", False),
        ("Pasta", True),
        ("Chili", False),
        ("Pasta water", True),
    ]
