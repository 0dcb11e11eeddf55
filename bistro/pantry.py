from datetime import date, timedelta
from typing import Iterable, Optional

from .config import EXPIRY_WARNING_DAYS
from .schemas import Ingredient, PantrySummary


def is_expiring_soon(ingredient: Ingredient, today: Optional[date] = None, days: int = EXPIRY_WARNING_DAYS) -> bool:
    # already-expired entries count as well
    if ingredient.expiry_date is None:
        return False
    today = today or date.today()
    return ingredient.expiry_date <= today + timedelta(days=days)


def summarize(ingredients: Iterable[Ingredient], today: Optional[date] = None) -> PantrySummary:
    ingredients = list(ingredients)
    stocked = sum(1 for i in ingredients if i.in_stock)
    return PantrySummary(
        in_stock=stocked,
        out_of_stock=len(ingredients) - stocked,
        expiring_soon=sum(1 for i in ingredients if is_expiring_soon(i, today)),
    )
