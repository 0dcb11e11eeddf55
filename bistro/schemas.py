from datetime import date, datetime, timezone
from typing import Annotated, List, Literal, Optional, Union
from uuid import uuid4

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

CATEGORIES = [
    "Vegetables", "Fruits", "Meat", "Dairy",
    "Grains", "Spices", "Condiments", "Other",
]


class RecipeIngredient(BaseModel):
    name: str = Field(..., json_schema_extra={"example": "flour"})
    optional: bool = False


class RecipeBase(BaseModel):
    name: str = Field(
        ..., min_length=1, json_schema_extra={"example": "Simple Pancakes"}
    )
    recipe_ingredients: List[RecipeIngredient] = Field(
        default_factory=list,
        json_schema_extra={
            "example": [
                {"name": "flour", "optional": False},
                {"name": "milk", "optional": False},
                {"name": "blueberries", "optional": True},
            ]
        },
    )
    instructions: List[str] = Field(
        default_factory=list,
        json_schema_extra={
            "example": [
                "Mix dry ingredients",
                "Add wet ingredients",
                "Cook on skillet until golden",
            ]
        },
    )
    image: Optional[str] = None
    cooking_time: int = Field(30, ge=0, description="Minutes")
    servings: int = Field(4, ge=1)
    tags: List[str] = Field(default_factory=list)

    @field_validator("recipe_ingredients", mode="before")
    @classmethod
    def _accept_plain_names(cls, value):
        # older clients send a flat list of names; those are all required
        if value is None:
            return []
        return [{"name": v} if isinstance(v, str) else v for v in value]

    @field_validator("instructions", "tags", mode="before")
    @classmethod
    def _none_is_empty(cls, value):
        return [] if value is None else value


class RecipeCreate(RecipeBase):
    pass


class Recipe(RecipeBase):
    id: int
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    model_config = ConfigDict(from_attributes=True)


class IngredientBase(BaseModel):
    name: str = Field(..., min_length=1, json_schema_extra={"example": "Tomatoes"})
    quantity: float = Field(1, ge=0)
    unit: Optional[str] = None
    category: str = "Other"
    expiry_date: Optional[date] = None
    in_stock: bool = True

    @model_validator(mode="after")
    def _out_of_stock_is_empty(self):
        if not self.in_stock:
            self.quantity = 0
            self.expiry_date = None
        return self


class IngredientCreate(IngredientBase):
    pass


class Ingredient(IngredientBase):
    id: int

    model_config = ConfigDict(from_attributes=True)


# Bulk pantry editing: rows are tagged by kind instead of by an id prefix,
# so a draft can never collide with a stored id.

class ExistingIngredient(IngredientBase):
    kind: Literal["existing"] = "existing"
    id: int

    @property
    def key(self):
        return self.id


class NewIngredient(IngredientBase):
    kind: Literal["new"] = "new"
    draft_id: str = Field(default_factory=lambda: uuid4().hex)

    @property
    def key(self):
        return self.draft_id


WorkingIngredient = Annotated[
    Union[ExistingIngredient, NewIngredient], Field(discriminator="kind")
]


class IngredientUpdate(BaseModel):
    id: int
    data: IngredientCreate


class PantryChanges(BaseModel):
    to_create: List[IngredientCreate] = Field(default_factory=list)
    to_update: List[IngredientUpdate] = Field(default_factory=list)
    to_delete: List[int] = Field(default_factory=list)

    @property
    def empty(self) -> bool:
        return not (self.to_create or self.to_update or self.to_delete)


class OperationFailure(BaseModel):
    operation: Literal["create", "update", "delete"]
    key: Union[int, str]
    error: str


class CommitResult(BaseModel):
    created: List[Ingredient] = Field(default_factory=list)
    updated: List[int] = Field(default_factory=list)
    deleted: List[int] = Field(default_factory=list)
    failures: List[OperationFailure] = Field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.failures


class BulkEditRequest(BaseModel):
    entries: List[WorkingIngredient] = Field(default_factory=list)
    deleted_ids: List[int] = Field(default_factory=list)


class BulkEditResponse(BaseModel):
    changes: PantryChanges
    result: CommitResult
    ingredients: List[Ingredient]


# Read-side results of the matching engine

class Availability(BaseModel):
    missing: List[str] = Field(default_factory=list)
    cookable: bool


class IngredientStatus(BaseModel):
    name: str
    optional: bool
    available: bool


class RecipeAvailability(Availability):
    recipe_id: int
    ingredients: List[IngredientStatus] = Field(default_factory=list)


class PartialMatch(BaseModel):
    recipe: Recipe
    missing: List[str]


class Menu(BaseModel):
    available: List[Recipe] = Field(default_factory=list)
    partial: List[PartialMatch] = Field(default_factory=list)


class MenuResponse(Menu):
    in_stock_count: int
    tags: List[str] = Field(default_factory=list)


class Suggestion(BaseModel):
    recipe: Recipe
    missing: List[str]
    cookable: bool


class PantrySummary(BaseModel):
    in_stock: int
    out_of_stock: int
    expiring_soon: int
