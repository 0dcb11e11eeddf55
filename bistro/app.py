import logging
from contextlib import asynccontextmanager
from typing import List, Optional

from fastapi import APIRouter, Depends, FastAPI, HTTPException, Query, Request, Response
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from . import crud, schemas
from .auth import require_user
from .config import CORS_ORIGINS, configure_logging
from .db import SessionLocal, init_db
from .lucky import MOODS, suggest_by_mood, suggest_random
from .matching import classify, find_likely_duplicates, order_for_display
from .menu import MenuFilter, all_tags, filter_menu, partition
from .pantry import summarize
from .reconcile import PantryEditSession, enforce_stock_rule

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    configure_logging()
    init_db()
    logger.info("database ready")
    yield


app = FastAPI(title="ZZ Bistro", lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


router = APIRouter(prefix="/api", dependencies=[Depends(require_user)])


def _recipe_or_404(db: Session, recipe_id: int):
    r = crud.get_recipe(db, recipe_id)
    if not r:
        raise HTTPException(status_code=404, detail="Recipe not found")
    return r


def _ingredient_or_404(db: Session, ingredient_id: int):
    i = crud.get_ingredient(db, ingredient_id)
    if not i:
        raise HTTPException(status_code=404, detail="Ingredient not found")
    return i


def _pantry(db: Session) -> List[schemas.Ingredient]:
    return crud.PantryStore(db).get_all()


def _recipes(db: Session) -> List[schemas.Recipe]:
    return crud.RecipeStore(db).get_all()


# --- recipes ---

@router.get("/recipes")
def list_recipes(
    request: Request,
    response: Response,
    q: Optional[str] = None,
    page: int = Query(1, ge=1),
    page_size: int = Query(20, ge=1, le=100),
    db: Session = Depends(get_db),
):
    total = crud.count_recipes(db, q)
    rows = crud.get_recipes(db, skip=(page - 1) * page_size, limit=page_size, q=q)
    links = []
    if page > 1:
        links.append(f'<{request.url.include_query_params(page=page - 1)}>; rel="prev"')
    if page * page_size < total:
        links.append(f'<{request.url.include_query_params(page=page + 1)}>; rel="next"')
    if links:
        response.headers["Link"] = ", ".join(links)
    return {
        "items": [crud.recipe_to_schema(r) for r in rows],
        "total": total,
        "page": page,
        "page_size": page_size,
    }


@router.post("/recipes", response_model=schemas.Recipe)
def create_recipe(recipe: schemas.RecipeCreate, db: Session = Depends(get_db)):
    if crud.get_recipe_by_name(db, recipe.name):
        raise HTTPException(status_code=400, detail="Recipe with this name already exists")
    try:
        return crud.recipe_to_schema(crud.create_recipe(db, recipe))
    except IntegrityError:
        db.rollback()
        raise HTTPException(status_code=400, detail="Recipe with this name already exists")


@router.get("/recipes/{recipe_id}", response_model=schemas.Recipe)
def get_recipe(recipe_id: int, db: Session = Depends(get_db)):
    return crud.recipe_to_schema(_recipe_or_404(db, recipe_id))


@router.put("/recipes/{recipe_id}", response_model=schemas.Recipe)
def update_recipe(recipe_id: int, recipe: schemas.RecipeCreate, db: Session = Depends(get_db)):
    _recipe_or_404(db, recipe_id)
    existing = crud.get_recipe_by_name(db, recipe.name)
    if existing and existing.id != recipe_id:
        raise HTTPException(status_code=400, detail="Recipe with this name already exists")
    return crud.recipe_to_schema(crud.update_recipe(db, recipe_id, recipe))


@router.delete("/recipes/{recipe_id}")
def delete_recipe(recipe_id: int, db: Session = Depends(get_db)):
    if not crud.delete_recipe(db, recipe_id):
        raise HTTPException(status_code=404, detail="Recipe not found")
    return {"deleted": True}


@router.get("/recipes/{recipe_id}/availability", response_model=schemas.RecipeAvailability)
def recipe_availability(recipe_id: int, db: Session = Depends(get_db)):
    recipe = crud.recipe_to_schema(_recipe_or_404(db, recipe_id))
    pantry = _pantry(db)
    availability = classify(recipe, pantry)
    return schemas.RecipeAvailability(
        recipe_id=recipe.id,
        missing=availability.missing,
        cookable=availability.cookable,
        ingredients=order_for_display(recipe, pantry),
    )


# --- pantry ---

@router.get("/ingredients", response_model=List[schemas.Ingredient])
def list_ingredients(
    search: Optional[str] = None,
    category: Optional[str] = None,
    db: Session = Depends(get_db),
):
    return [schemas.Ingredient.model_validate(i) for i in crud.get_ingredients(db, search, category)]


@router.post("/ingredients", response_model=schemas.Ingredient)
def create_ingredient(ingredient: schemas.IngredientCreate, db: Session = Depends(get_db)):
    return schemas.Ingredient.model_validate(crud.create_ingredient(db, ingredient))


@router.get("/ingredients/categories", response_model=List[str])
def ingredient_categories():
    return schemas.CATEGORIES


@router.get("/ingredients/summary", response_model=schemas.PantrySummary)
def pantry_summary(db: Session = Depends(get_db)):
    return summarize(_pantry(db))


@router.get("/ingredients/duplicates", response_model=List[schemas.Ingredient])
def likely_duplicates(name: str = Query(..., min_length=1), db: Session = Depends(get_db)):
    return find_likely_duplicates(name, _pantry(db))


@router.post("/ingredients/bulk", response_model=schemas.BulkEditResponse)
def bulk_edit_ingredients(
    edit: schemas.BulkEditRequest,
    response: Response,
    db: Session = Depends(get_db),
):
    store = crud.PantryStore(db)
    session = PantryEditSession(store.get_all())
    unknown = []
    for entry in edit.entries:
        if isinstance(entry, schemas.ExistingIngredient) and entry.id not in session.working:
            logger.warning("bulk edit skipped unknown ingredient %s", entry.id)
            unknown.append(entry.id)
            continue
        session.working[entry.key] = enforce_stock_rule(entry)
    for ingredient_id in edit.deleted_ids:
        if ingredient_id in session.working:
            session.delete(ingredient_id)

    changes = session.changes()
    result = session.commit(store)
    result.failures.extend(
        schemas.OperationFailure(operation="update", key=i, error="not found") for i in unknown
    )
    if not result.ok:
        response.status_code = 207
    return schemas.BulkEditResponse(changes=changes, result=result, ingredients=session.original)


@router.get("/ingredients/{ingredient_id}", response_model=schemas.Ingredient)
def get_ingredient(ingredient_id: int, db: Session = Depends(get_db)):
    return schemas.Ingredient.model_validate(_ingredient_or_404(db, ingredient_id))


@router.put("/ingredients/{ingredient_id}", response_model=schemas.Ingredient)
def update_ingredient(ingredient_id: int, ingredient: schemas.IngredientCreate, db: Session = Depends(get_db)):
    _ingredient_or_404(db, ingredient_id)
    return schemas.Ingredient.model_validate(crud.update_ingredient(db, ingredient_id, ingredient))


@router.delete("/ingredients/{ingredient_id}")
def delete_ingredient(ingredient_id: int, db: Session = Depends(get_db)):
    if not crud.delete_ingredient(db, ingredient_id):
        raise HTTPException(status_code=404, detail="Ingredient not found")
    return {"deleted": True}


# --- what's for dinner ---

@router.get("/menu", response_model=schemas.MenuResponse)
def menu(
    tag: List[str] = Query([]),
    max_cooking_time: Optional[int] = Query(None, ge=0),
    db: Session = Depends(get_db),
):
    recipes = _recipes(db)
    pantry = _pantry(db)
    visible = filter_menu(
        partition(recipes, pantry),
        MenuFilter(tags=tag, max_cooking_time=max_cooking_time),
    )
    return schemas.MenuResponse(
        available=visible.available,
        partial=visible.partial,
        in_stock_count=sum(1 for i in pantry if i.in_stock),
        tags=all_tags(recipes),
    )


@router.get("/moods")
def moods():
    return [{"slug": m.slug, "label": m.label, "emoji": m.emoji} for m in MOODS.values()]


def _suggestion(recipe, pantry) -> schemas.Suggestion:
    if recipe is None:
        raise HTTPException(status_code=404, detail="No recipes to choose from")
    availability = classify(recipe, pantry)
    return schemas.Suggestion(recipe=recipe, missing=availability.missing, cookable=availability.cookable)


@router.get("/lucky", response_model=schemas.Suggestion)
def lucky(prefer_available: bool = True, db: Session = Depends(get_db)):
    pantry = _pantry(db)
    return _suggestion(suggest_random(_recipes(db), pantry, prefer_available), pantry)


@router.get("/lucky/{mood}", response_model=schemas.Suggestion)
def lucky_mood(mood: str, prefer_available: bool = True, db: Session = Depends(get_db)):
    if mood not in MOODS:
        raise HTTPException(status_code=404, detail=f"Unknown mood {mood!r}")
    pantry = _pantry(db)
    return _suggestion(suggest_by_mood(_recipes(db), mood, pantry, prefer_available), pantry)


app.include_router(router)
