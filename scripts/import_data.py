import json
import logging
from pathlib import Path

from bistro import crud, models, schemas
from bistro.config import configure_logging
from bistro.db import SessionLocal, init_db

logger = logging.getLogger(__name__)

DATA_DIR = Path(__file__).resolve().parents[1] / 'data'


def load_json(name):
    """Return the list stored in ``data/<name>``, or [] if the file is absent."""
    p = DATA_DIR / name
    if not p.exists():
        print(f'data/{name} not found')
        return []
    return json.loads(p.read_text(encoding='utf-8'))


def import_recipes(db, rows):
    added = 0
    for r in rows:
        name = r.get('name')
        if not name or crud.get_recipe_by_name(db, name):
            continue
        crud.create_recipe(db, schemas.RecipeCreate(**r))
        added += 1
    return added


def import_pantry(db, rows):
    added = 0
    for r in rows:
        name = r.get('name')
        if not name:
            continue
        exists = (
            db.query(models.Ingredient)
            .filter(models.Ingredient.name == name)
            .first()
        )
        if exists:
            continue
        crud.create_ingredient(db, schemas.IngredientCreate(**r))
        added += 1
    return added


def main():
    configure_logging()
    init_db()
    db = SessionLocal()
    try:
        recipes = import_recipes(db, load_json('recipes.json'))
        pantry = import_pantry(db, load_json('pantry.json'))
    finally:
        db.close()
    print(f'Imported {recipes} recipes and {pantry} pantry ingredients')


if __name__ == '__main__':
    main()
