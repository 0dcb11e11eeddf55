from datetime import datetime, timezone

from sqlalchemy import (
    Boolean, Column, Date, DateTime, Float, Integer, String, Text
)

from .db import Base


class Recipe(Base):
    __tablename__ = "recipes"
    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(200), unique=True, index=True, nullable=False)
    ingredients = Column(Text, nullable=True)  # JSON-encoded [{name, optional}]
    instructions = Column(Text, nullable=True)  # JSON-encoded list
    tags = Column(Text, nullable=True)  # JSON-encoded list
    image = Column(String(500), nullable=True)
    cooking_time = Column(Integer, nullable=False, default=30)
    servings = Column(Integer, nullable=False, default=4)
    created_at = Column(DateTime, nullable=False, default=lambda: datetime.now(timezone.utc))


class Ingredient(Base):
    __tablename__ = "ingredients"
    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(200), index=True, nullable=False)
    quantity = Column(Float, nullable=False, default=0)
    unit = Column(String(50), nullable=True)
    category = Column(String(50), nullable=False, default="Other")
    expiry_date = Column(Date, nullable=True)
    in_stock = Column(Boolean, nullable=False, default=True)
