"""Analyze phase: bucket recipe ingredients against an existing grocery list."""

from __future__ import annotations

import hashlib
import logging
from typing import Sequence

from .ingredients import ParsedIngredient, ingredient_from_structured
from .matching import (
    DEFAULT_SYNONYMS,
    MATCH_THRESHOLD,
    SynonymTable,
    best_match,
    is_candidate,
    similarity,
)
from .models import (
    AnalysisResult,
    ContributingRecipe,
    GroceryListItem,
    IngredientMatch,
    MatchType,
    RecipeSelection,
    SourcedIngredient,
)
from .quantity import (
    RangeMode,
    combine_all,
    join_notes,
    normalize_unit,
    parse_quantity,
    units_compatible,
)

logger = logging.getLogger(__name__)


def normalize_name(name: str) -> str:
    return " ".join(name.lower().split())


def collect_ingredients(selections: Sequence[RecipeSelection]) -> list[SourcedIngredient]:
    """Parse and scale every non-blank ingredient of the selected recipes."""
    result: list[SourcedIngredient] = []
    for selection in selections:
        recipe = selection.recipe
        for entry in recipe.ingredients_for(selection.variant_id):
            if not entry.ingredient or not entry.ingredient.strip():
                continue
            parsed = ingredient_from_structured(entry, selection.multiplier)
            source = ContributingRecipe(
                recipe_id=recipe.id,
                title=recipe.title,
                ingredient_line=parsed.original_text,
            )
            result.append(SourcedIngredient(parsed, (source,)))
    return result


def is_exact_match(ingredient: ParsedIngredient, item: GroceryListItem) -> bool:
    """Same normalized name and units that can be added together."""
    return normalize_name(ingredient.ingredient_name) == normalize_name(
        item.name
    ) and units_compatible(ingredient.unit, item.unit)


def _cluster_is_uniform(members: Sequence[SourcedIngredient]) -> bool:
    names = {normalize_name(m.ingredient.ingredient_name) for m in members}
    units = {normalize_unit(m.ingredient.unit) for m in members} - {None}
    return len(names) == 1 and len(units) <= 1


def consolidate_members(members: Sequence[SourcedIngredient]) -> SourcedIngredient:
    """Fold a cluster of same-item ingredients into one ingredient."""
    primary = members[0].ingredient
    combined = combine_all(
        (m.ingredient.quantity_text, m.ingredient.unit) for m in members
    )
    ingredient = ParsedIngredient(
        original_text=" + ".join(m.ingredient.original_text for m in members),
        ingredient_name=primary.ingredient_name,
        quantity=parse_quantity(combined.quantity, RangeMode.SHOPPING),
        unit=combined.unit,
        notes=join_notes(m.ingredient.notes for m in members),
    )
    return SourcedIngredient(
        ingredient, tuple(s for m in members for s in m.sources)
    )


class ConsolidationEngine:
    """Sorts recipe ingredients into exact matches, partial matches and new items.

    Analysis only reads its inputs; nothing is written until a CommitSession
    applies the result.
    """

    def __init__(
        self,
        threshold: float = MATCH_THRESHOLD,
        synonyms: SynonymTable = DEFAULT_SYNONYMS,
        auto_merge_uniform_clusters: bool = True,
    ) -> None:
        self._threshold = threshold
        self._synonyms = synonyms
        self._auto_merge = auto_merge_uniform_clusters

    def similarity(self, a: str, b: str) -> float:
        return similarity(a, b, self._synonyms)

    def analyze(
        self,
        selections: Sequence[RecipeSelection],
        existing_items: Sequence[GroceryListItem],
    ) -> AnalysisResult:
        """Run the analyze phase for a batch of recipe selections.

        Ingredients from different recipes that name the same item are first
        clustered together (recipe-to-recipe matching). Each cluster or
        single ingredient is then compared against the existing list items.

        Returns:
            AnalysisResult with every ingredient in exactly one bucket.
        """
        sourced = collect_ingredients(selections)
        result = AnalysisResult(recipe_count=len(selections))
        used_ids: set[str] = set()
        processed: set[int] = set()

        for i, current in enumerate(sourced):
            if i in processed:
                continue
            processed.add(i)

            cluster = [current]
            scores: list[float] = []
            for j in range(i + 1, len(sourced)):
                other = sourced[j]
                if j in processed or other.recipe_ids == current.recipe_ids:
                    continue
                score = self.similarity(
                    current.ingredient.ingredient_name,
                    other.ingredient.ingredient_name,
                )
                if is_candidate(score, self._threshold):
                    cluster.append(other)
                    scores.append(score)
                    processed.add(j)

            if len(cluster) > 1:
                self._classify_cluster(
                    cluster, min(scores), existing_items, result, used_ids
                )
            else:
                existing, confidence = self._target(current.ingredient, existing_items)
                self._classify_single(current, existing, confidence, result, used_ids)

        logger.info(
            "Analyzed %d recipes: %d exact, %d partial, %d new",
            result.recipe_count,
            len(result.exact_matches),
            len(result.partial_matches),
            len(result.new_items),
        )
        return result

    def _target(
        self,
        ingredient: ParsedIngredient,
        existing_items: Sequence[GroceryListItem],
    ) -> tuple[GroceryListItem | None, float]:
        """Pick the existing item an ingredient should be compared against.

        An item with the same name and compatible units wins over a higher
        scoring fuzzy match, so "2 tbsp butter" lands on the tbsp entry even
        when a cup entry of butter comes first.
        """
        for item in existing_items:
            if is_exact_match(ingredient, item):
                return item, self.similarity(ingredient.ingredient_name, item.name)
        return best_match(
            ingredient.ingredient_name,
            existing_items,
            threshold=self._threshold,
            synonyms=self._synonyms,
        )

    def _classify_single(
        self,
        current: SourcedIngredient,
        existing: GroceryListItem | None,
        confidence: float,
        result: AnalysisResult,
        used_ids: set[str],
    ) -> None:
        if existing is None:
            result.new_items.append(current)
            return

        match = IngredientMatch(
            match_id=_match_id(current.ingredient, [current], existing, used_ids),
            ingredient=current.ingredient,
            members=[current],
            confidence=confidence,
            match_type=MatchType.EXISTING_ITEM,
            existing_item=existing,
        )
        if is_exact_match(current.ingredient, existing):
            result.exact_matches.append(match)
        else:
            result.partial_matches.append(match)

    def _classify_cluster(
        self,
        cluster: list[SourcedIngredient],
        cluster_confidence: float,
        existing_items: Sequence[GroceryListItem],
        result: AnalysisResult,
        used_ids: set[str],
    ) -> None:
        primary = cluster[0].ingredient
        logger.debug(
            "Recipe-to-recipe cluster %r: %s",
            primary.ingredient_name,
            [m.ingredient.original_text for m in cluster],
        )

        if self._auto_merge and _cluster_is_uniform(cluster):
            consolidated = consolidate_members(cluster)
            existing, confidence = self._target(consolidated.ingredient, existing_items)
            if existing is None:
                result.new_items.append(consolidated)
                return
            if is_exact_match(consolidated.ingredient, existing):
                result.exact_matches.append(
                    IngredientMatch(
                        match_id=_match_id(primary, cluster, existing, used_ids),
                        ingredient=consolidated.ingredient,
                        members=cluster,
                        confidence=confidence,
                        match_type=MatchType.RECIPE_TO_RECIPE,
                        existing_item=existing,
                    )
                )
                return
        else:
            existing, confidence = self._target(primary, existing_items)

        if existing is None:
            confidence = cluster_confidence
        result.partial_matches.append(
            IngredientMatch(
                match_id=_match_id(primary, cluster, existing, used_ids),
                ingredient=primary,
                members=cluster,
                confidence=confidence,
                match_type=MatchType.RECIPE_TO_RECIPE,
                existing_item=existing,
            )
        )


def _match_id(
    ingredient: ParsedIngredient,
    members: Sequence[SourcedIngredient],
    existing: GroceryListItem | None,
    used_ids: set[str],
) -> str:
    """Stable id from the ingredient name, contributing recipes and target item.

    Re-running the same analysis yields the same ids, so decisions can be
    keyed by id rather than by position.
    """
    recipe_ids = sorted(rid for m in members for rid in m.recipe_ids)
    key = "|".join(
        [
            normalize_name(ingredient.ingredient_name),
            ",".join(recipe_ids),
            existing.id if existing else "",
        ]
    )
    base = hashlib.sha1(key.encode("utf-8")).hexdigest()[:12]
    match_id = base
    n = 2
    while match_id in used_ids:
        match_id = f"{base}-{n}"
        n += 1
    used_ids.add(match_id)
    return match_id


def analyze_recipes(
    selections: Sequence[RecipeSelection],
    existing_items: Sequence[GroceryListItem],
    **engine_kwargs,
) -> AnalysisResult:
    """Shortcut for ConsolidationEngine(**engine_kwargs).analyze(...)."""
    return ConsolidationEngine(**engine_kwargs).analyze(selections, existing_items)
