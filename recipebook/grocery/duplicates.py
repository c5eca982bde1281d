"""Finding and merging near-duplicate items already on a grocery list."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace
from typing import Mapping, Sequence

from .matching import DEFAULT_SYNONYMS, MATCH_THRESHOLD, SynonymTable, is_candidate, similarity
from .models import GroceryListItem, MatchDecision
from .quantity import combine_all, join_notes

logger = logging.getLogger(__name__)


@dataclass
class DuplicateGroup:
    primary_item: GroceryListItem
    duplicate_items: list[GroceryListItem]
    confidence: float

    @property
    def group_id(self) -> str:
        return self.primary_item.id


@dataclass
class DuplicateResolution:
    updated: list[GroceryListItem] = field(default_factory=list)
    deleted_ids: list[str] = field(default_factory=list)

    @property
    def merged_groups(self) -> int:
        return len(self.updated)


def find_duplicates(
    items: Sequence[GroceryListItem],
    threshold: float = MATCH_THRESHOLD,
    synonyms: SynonymTable = DEFAULT_SYNONYMS,
) -> list[DuplicateGroup]:
    """Group list items whose names look like the same product.

    Each item is compared with the items after it; an item joins at most one
    group. Group confidence is the best score against the primary item.
    """
    groups: list[DuplicateGroup] = []
    grouped: set[str] = set()

    for i, primary in enumerate(items):
        if primary.id in grouped:
            continue
        duplicates: list[GroceryListItem] = []
        best = 0.0
        for other in items[i + 1:]:
            if other.id in grouped:
                continue
            score = similarity(primary.name, other.name, synonyms)
            if is_candidate(score, threshold):
                duplicates.append(other)
                grouped.add(other.id)
                best = max(best, score)
        if duplicates:
            grouped.add(primary.id)
            groups.append(DuplicateGroup(primary, duplicates, best))

    logger.debug("Found %d duplicate groups among %d items", len(groups), len(items))
    return groups


def resolve_duplicates(
    groups: Sequence[DuplicateGroup],
    decisions: Mapping[str, MatchDecision | str],
) -> DuplicateResolution:
    """Merge groups marked ``merge`` into their primary item.

    Groups without a decision, or marked ``separate``/``skip``, are left as
    they are. Returns the updated primaries and the ids to delete.
    """
    resolution = DuplicateResolution()
    for group in groups:
        decision = decisions.get(group.group_id)
        if decision is None or MatchDecision(decision) is not MatchDecision.MERGE:
            continue

        primary = group.primary_item
        combined = combine_all(
            [(primary.quantity, primary.unit)]
            + [(d.quantity, d.unit) for d in group.duplicate_items if d.quantity]
        )
        resolution.updated.append(
            replace(
                primary,
                quantity=combined.quantity,
                unit=combined.unit,
                notes=join_notes(
                    [primary.notes, *(d.notes for d in group.duplicate_items)]
                ),
            )
        )
        resolution.deleted_ids.extend(d.id for d in group.duplicate_items)

    logger.info(
        "Merged %d duplicate groups, %d items to delete",
        resolution.merged_groups,
        len(resolution.deleted_ids),
    )
    return resolution
