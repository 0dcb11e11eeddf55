import json
import logging
from contextlib import contextmanager
from typing import List, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from . import models, schemas

logger = logging.getLogger(__name__)


def _loads(value):
    return json.loads(value or "[]")


def recipe_to_schema(db_recipe: models.Recipe) -> schemas.Recipe:
    return schemas.Recipe(
        id=db_recipe.id,
        name=db_recipe.name,
        recipe_ingredients=_loads(db_recipe.ingredients),
        instructions=_loads(db_recipe.instructions),
        tags=_loads(db_recipe.tags),
        image=db_recipe.image,
        cooking_time=db_recipe.cooking_time,
        servings=db_recipe.servings,
        created_at=db_recipe.created_at,
    )


def _apply_recipe(db_recipe: models.Recipe, recipe: schemas.RecipeCreate):
    db_recipe.name = recipe.name
    db_recipe.ingredients = json.dumps(
        [ri.model_dump() for ri in recipe.recipe_ingredients]
    )
    db_recipe.instructions = json.dumps(recipe.instructions)
    db_recipe.tags = json.dumps(recipe.tags)
    db_recipe.image = recipe.image
    db_recipe.cooking_time = recipe.cooking_time
    db_recipe.servings = recipe.servings


def get_recipe(db: Session, recipe_id: int):
    return db.query(models.Recipe).filter(models.Recipe.id == recipe_id).first()


def get_recipe_by_name(db: Session, name: str):
    return db.query(models.Recipe).filter(models.Recipe.name == name).first()


def get_recipes(db: Session, skip: int = 0, limit: int = 100, q: Optional[str] = None):
    query = db.query(models.Recipe)
    if q:
        query = query.filter(models.Recipe.name.ilike(f"%{q}%"))
    return query.order_by(models.Recipe.created_at.desc(), models.Recipe.id.desc()).offset(skip).limit(limit).all()


def count_recipes(db: Session, q: Optional[str] = None) -> int:
    query = db.query(models.Recipe)
    if q:
        query = query.filter(models.Recipe.name.ilike(f"%{q}%"))
    return query.count()


def create_recipe(db: Session, recipe: schemas.RecipeCreate):
    db_recipe = models.Recipe()
    _apply_recipe(db_recipe, recipe)
    db.add(db_recipe)
    db.commit()
    db.refresh(db_recipe)
    logger.info("created recipe %s (%r)", db_recipe.id, db_recipe.name)
    return db_recipe


def update_recipe(db: Session, recipe_id: int, recipe: schemas.RecipeCreate):
    db_recipe = get_recipe(db, recipe_id)
    if not db_recipe:
        return None
    _apply_recipe(db_recipe, recipe)
    db.add(db_recipe)
    db.commit()
    db.refresh(db_recipe)
    logger.info("updated recipe %s", recipe_id)
    return db_recipe


def delete_recipe(db: Session, recipe_id: int):
    db_recipe = get_recipe(db, recipe_id)
    if not db_recipe:
        return False
    db.delete(db_recipe)
    db.commit()
    logger.info("deleted recipe %s", recipe_id)
    return True


def get_ingredient(db: Session, ingredient_id: int):
    return db.query(models.Ingredient).filter(models.Ingredient.id == ingredient_id).first()


def get_ingredients(db: Session, search: Optional[str] = None, category: Optional[str] = None):
    query = db.query(models.Ingredient)
    if search:
        query = query.filter(models.Ingredient.name.ilike(f"%{search}%"))
    if category:
        query = query.filter(models.Ingredient.category == category)
    return query.order_by(models.Ingredient.name.asc(), models.Ingredient.id.asc()).all()


def _apply_ingredient(db_ingredient: models.Ingredient, ingredient: schemas.IngredientBase):
    for field, value in ingredient.model_dump(include=set(schemas.IngredientCreate.model_fields)).items():
        setattr(db_ingredient, field, value)


def create_ingredient(db: Session, ingredient: schemas.IngredientCreate):
    db_ingredient = models.Ingredient()
    _apply_ingredient(db_ingredient, ingredient)
    db.add(db_ingredient)
    db.commit()
    db.refresh(db_ingredient)
    logger.info("added pantry ingredient %s (%r)", db_ingredient.id, db_ingredient.name)
    return db_ingredient


def update_ingredient(db: Session, ingredient_id: int, ingredient: schemas.IngredientCreate):
    db_ingredient = get_ingredient(db, ingredient_id)
    if not db_ingredient:
        return None
    _apply_ingredient(db_ingredient, ingredient)
    db.add(db_ingredient)
    db.commit()
    db.refresh(db_ingredient)
    logger.info("updated pantry ingredient %s", ingredient_id)
    return db_ingredient


def delete_ingredient(db: Session, ingredient_id: int):
    db_ingredient = get_ingredient(db, ingredient_id)
    if not db_ingredient:
        return False
    db.delete(db_ingredient)
    db.commit()
    logger.info("deleted pantry ingredient %s", ingredient_id)
    return True


def batch_update_ingredients(db: Session, updates: List[schemas.IngredientUpdate]):
    # one transaction for the whole batch
    for update in updates:
        db_ingredient = get_ingredient(db, update.id)
        if db_ingredient is None:
            db.rollback()
            raise LookupError(f"ingredient {update.id} not found")
        _apply_ingredient(db_ingredient, update.data)
    db.commit()
    logger.info("batch updated %d pantry ingredients", len(updates))


class PantryStore:
    """Pantry storage as seen by the bulk editor.

    A failed statement is rolled back before the error propagates so the
    same session can carry on with the next call.
    """

    def __init__(self, db: Session):
        self.db = db

    def get_all(self) -> List[schemas.Ingredient]:
        return [schemas.Ingredient.model_validate(i) for i in get_ingredients(self.db)]

    def add(self, ingredient: schemas.IngredientCreate) -> schemas.Ingredient:
        with _rollback_on_error(self.db):
            return schemas.Ingredient.model_validate(create_ingredient(self.db, ingredient))

    def update(self, ingredient_id: int, ingredient: schemas.IngredientCreate) -> bool:
        with _rollback_on_error(self.db):
            return update_ingredient(self.db, ingredient_id, ingredient) is not None

    def delete(self, ingredient_id: int) -> bool:
        with _rollback_on_error(self.db):
            return delete_ingredient(self.db, ingredient_id)

    def batch_update(self, updates: List[schemas.IngredientUpdate]):
        with _rollback_on_error(self.db):
            batch_update_ingredients(self.db, updates)


class RecipeStore:
    def __init__(self, db: Session):
        self.db = db

    def get_all(self) -> List[schemas.Recipe]:
        return [recipe_to_schema(r) for r in self.db.query(models.Recipe).order_by(models.Recipe.id).all()]

    def add(self, recipe: schemas.RecipeCreate) -> schemas.Recipe:
        with _rollback_on_error(self.db):
            return recipe_to_schema(create_recipe(self.db, recipe))

    def update(self, recipe_id: int, recipe: schemas.RecipeCreate) -> bool:
        with _rollback_on_error(self.db):
            return update_recipe(self.db, recipe_id, recipe) is not None

    def delete(self, recipe_id: int) -> bool:
        with _rollback_on_error(self.db):
            return delete_recipe(self.db, recipe_id)


@contextmanager
def _rollback_on_error(db: Session):
    try:
        yield db
    except SQLAlchemyError as exc:
        logger.error("rolling back after database error: %s", exc)
        db.rollback()
        raise
