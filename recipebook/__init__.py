"""Recipe management: grocery list consolidation for selected recipes."""

from .types import Recipe, RecipeIngredient, RecipeVariant

__all__ = [
    "Recipe",
    "RecipeIngredient",
    "RecipeVariant",
]
