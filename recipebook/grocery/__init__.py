"""Grocery list module: parse recipe ingredients and merge them into lists."""

from .commit import (
    CommitResult,
    CommitSession,
    CommitState,
    CommitStateError,
    UnresolvedDecisionsError,
    commit_analysis,
)
from .config import DatabaseConfig, GroceryConfig, MatchingConfig, load_config
from .consolidation import ConsolidationEngine, analyze_recipes
from .duplicates import (
    DuplicateGroup,
    DuplicateResolution,
    find_duplicates,
    resolve_duplicates,
)
from .ingredients import ParsedIngredient, parse_ingredient_line
from .matching import SynonymTable, similarity
from .models import (
    AnalysisResult,
    ContributingRecipe,
    GroceryListItem,
    IngredientMatch,
    MatchDecision,
    MatchType,
    RecipeSelection,
    SourcedIngredient,
)

__all__ = [
    "ParsedIngredient",
    "parse_ingredient_line",
    "SynonymTable",
    "similarity",
    "GroceryListItem",
    "RecipeSelection",
    "ContributingRecipe",
    "SourcedIngredient",
    "IngredientMatch",
    "MatchType",
    "MatchDecision",
    "AnalysisResult",
    "ConsolidationEngine",
    "analyze_recipes",
    "CommitSession",
    "CommitState",
    "CommitResult",
    "CommitStateError",
    "UnresolvedDecisionsError",
    "commit_analysis",
    "DuplicateGroup",
    "DuplicateResolution",
    "find_duplicates",
    "resolve_duplicates",
    "GroceryConfig",
    "MatchingConfig",
    "DatabaseConfig",
    "load_config",
]
