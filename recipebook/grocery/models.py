"""Data models for grocery lists and ingredient consolidation."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

from ..types import Recipe
from .ingredients import ParsedIngredient


@dataclass
class GroceryListItem:
    """An item on a shopping list.

    ``quantity`` is kept as formatted text ("1 1/2", "1 cup + 1 tbsp") so
    fractions and unconverted unit pairs survive a round trip.
    """

    id: str
    name: str
    quantity: str | None = None
    unit: str | None = None
    notes: str | None = None
    is_completed: bool = False
    category: str | None = None
    order: int = 0


@dataclass
class RecipeSelection:
    """A recipe picked for the list, with its scaling multiplier."""

    recipe: Recipe
    multiplier: float = 1.0
    variant_id: str | None = None


@dataclass(frozen=True)
class ContributingRecipe:
    """Which recipe line an ingredient came from."""

    recipe_id: str
    title: str
    ingredient_line: str


@dataclass(frozen=True)
class SourcedIngredient:
    """A parsed ingredient together with the recipe line(s) it came from."""

    ingredient: ParsedIngredient
    sources: tuple[ContributingRecipe, ...]

    @property
    def recipe_ids(self) -> list[str]:
        return [s.recipe_id for s in self.sources]


class MatchType(str, Enum):
    EXISTING_ITEM = "existing-item"
    RECIPE_TO_RECIPE = "recipe-to-recipe"


class MatchDecision(str, Enum):
    MERGE = "merge"
    SEPARATE = "separate"
    SKIP = "skip"


@dataclass
class IngredientMatch:
    """A recipe ingredient (or cluster of them) and what it may merge into.

    ``members`` holds every contributing ingredient; for an existing-item
    match that is a single entry, for a recipe-to-recipe cluster one entry
    per contributing recipe line.
    """

    match_id: str
    ingredient: ParsedIngredient
    members: list[SourcedIngredient]
    confidence: float
    match_type: MatchType = MatchType.EXISTING_ITEM
    existing_item: GroceryListItem | None = None

    @property
    def contributing_recipes(self) -> list[ContributingRecipe]:
        return [s for m in self.members for s in m.sources]

    def to_dict(self) -> dict:
        return {
            "match_id": self.match_id,
            "ingredient": self.ingredient.ingredient_name,
            "quantity": self.ingredient.quantity_text,
            "unit": self.ingredient.unit,
            "confidence": round(self.confidence, 2),
            "match_type": self.match_type.value,
            "existing_item": (
                {
                    "id": self.existing_item.id,
                    "name": self.existing_item.name,
                    "quantity": self.existing_item.quantity,
                    "unit": self.existing_item.unit,
                }
                if self.existing_item
                else None
            ),
            "contributing_recipes": [
                {"title": r.title, "ingredient_line": r.ingredient_line}
                for r in self.contributing_recipes
            ],
        }


@dataclass
class AnalysisResult:
    """Output of the analyze phase; nothing has been written yet."""

    exact_matches: list[IngredientMatch] = field(default_factory=list)
    partial_matches: list[IngredientMatch] = field(default_factory=list)
    new_items: list[SourcedIngredient] = field(default_factory=list)
    recipe_count: int = 0

    @property
    def needs_decisions(self) -> bool:
        return bool(self.partial_matches)

    def get_partial(self, match_id: str) -> IngredientMatch:
        for match in self.partial_matches:
            if match.match_id == match_id:
                return match
        raise KeyError(match_id)

    def summary_dict(self) -> dict:
        return {
            "total_recipes": self.recipe_count,
            "partial_match_count": len(self.partial_matches),
            "exact_match_count": len(self.exact_matches),
            "new_item_count": len(self.new_items),
        }
