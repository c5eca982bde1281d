"""Commit phase: apply decisions on partial matches and build list mutations."""

from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Callable, Iterable, Mapping, Sequence

from .models import (
    AnalysisResult,
    GroceryListItem,
    IngredientMatch,
    MatchDecision,
    SourcedIngredient,
)
from .quantity import combine_all, join_notes

logger = logging.getLogger(__name__)


class CommitState(str, Enum):
    ANALYZED = "analyzed"
    AWAITING_DECISIONS = "awaiting_decisions"
    ALL_RESOLVED = "all_resolved"
    COMMITTED = "committed"


class UnresolvedDecisionsError(ValueError):
    """Raised when commit is attempted before every partial match is decided."""

    def __init__(self, missing: Iterable[str]) -> None:
        self.missing = list(missing)
        super().__init__(
            f"{len(self.missing)} partial match(es) have no decision: "
            + ", ".join(self.missing)
        )


class CommitStateError(RuntimeError):
    """Raised when a session is used after it has been committed."""


@dataclass
class CommitResult:
    """Item mutations for the storage layer to write."""

    created: list[GroceryListItem] = field(default_factory=list)
    updated: list[GroceryListItem] = field(default_factory=list)

    @property
    def mutations(self) -> list[GroceryListItem]:
        return [*self.created, *self.updated]


def _new_item_id() -> str:
    return str(uuid.uuid4())


class CommitSession:
    """One analyze → decide → commit cycle for a single grocery list.

    Decisions are keyed by match id. Exact matches and new items are applied
    automatically; partial matches follow the recorded decision. Nothing is
    produced until commit() succeeds, and a session commits at most once.
    """

    def __init__(
        self,
        analysis: AnalysisResult,
        existing_items: Sequence[GroceryListItem],
        id_factory: Callable[[], str] = _new_item_id,
    ) -> None:
        self._analysis = analysis
        self._existing = list(existing_items)
        self._id_factory = id_factory
        self._decisions: dict[str, MatchDecision] = {}
        self._committed = False

    @property
    def analysis(self) -> AnalysisResult:
        return self._analysis

    @property
    def state(self) -> CommitState:
        if self._committed:
            return CommitState.COMMITTED
        if not self._analysis.partial_matches:
            return CommitState.ANALYZED
        if not self.missing_decisions():
            return CommitState.ALL_RESOLVED
        return CommitState.AWAITING_DECISIONS

    @property
    def decisions(self) -> dict[str, MatchDecision]:
        return dict(self._decisions)

    def decide(self, match_id: str, decision: MatchDecision | str) -> None:
        """Record (or change) the decision for one partial match.

        Raises:
            CommitStateError: If the session was already committed.
            KeyError: If match_id is not one of the partial matches.
            ValueError: If decision is not merge / separate / skip.
        """
        if self._committed:
            raise CommitStateError("session already committed")
        self._analysis.get_partial(match_id)
        self._decisions[match_id] = MatchDecision(decision)

    def decide_all(self, decisions: Mapping[str, MatchDecision | str]) -> None:
        for match_id, decision in decisions.items():
            self.decide(match_id, decision)

    def missing_decisions(self) -> list[str]:
        return [
            m.match_id
            for m in self._analysis.partial_matches
            if m.match_id not in self._decisions
        ]

    def commit(self) -> CommitResult:
        """Apply every bucket and return the resulting creates/updates.

        Raises:
            CommitStateError: If called a second time.
            UnresolvedDecisionsError: If any partial match lacks a decision.
        """
        if self._committed:
            raise CommitStateError("session already committed")
        missing = self.missing_decisions()
        if missing:
            raise UnresolvedDecisionsError(missing)

        builder = _MutationBuilder(self._existing, self._id_factory)

        for match in self._analysis.partial_matches:
            decision = self._decisions[match.match_id]
            self._apply_decision(builder, match, decision)

        for match in self._analysis.exact_matches:
            builder.merge_into(match.existing_item, match.members)

        for item in self._analysis.new_items:
            builder.create(item.ingredient.ingredient_name, [item])

        self._committed = True
        result = builder.result()
        logger.info(
            "Committed: %d created, %d updated", len(result.created), len(result.updated)
        )
        return result

    @staticmethod
    def _apply_decision(
        builder: _MutationBuilder, match: IngredientMatch, decision: MatchDecision
    ) -> None:
        logger.debug("Decision %s for %s (%s)", decision.value, match.match_id,
                     match.ingredient.ingredient_name)
        if decision is MatchDecision.SKIP:
            return
        if decision is MatchDecision.SEPARATE:
            for member in match.members:
                builder.create(member.ingredient.ingredient_name, [member])
            return
        if match.existing_item is not None:
            builder.merge_into(match.existing_item, match.members)
        else:
            builder.create(match.ingredient.ingredient_name, match.members)


class _MutationBuilder:
    """Accumulates item changes so repeated merges into one item stack up."""

    def __init__(
        self, existing: Sequence[GroceryListItem], id_factory: Callable[[], str]
    ) -> None:
        self._current = {item.id: item for item in existing}
        self._updated: dict[str, GroceryListItem] = {}
        self._created: list[GroceryListItem] = []
        self._id_factory = id_factory
        self._next_order = max((item.order for item in existing), default=-1) + 1

    def merge_into(
        self, item: GroceryListItem | None, members: Sequence[SourcedIngredient]
    ) -> None:
        if item is None:
            raise ValueError("merge target is missing")
        base = self._updated.get(item.id) or self._current.get(item.id, item)
        combined = combine_all(
            [(base.quantity, base.unit)]
            + [(m.ingredient.quantity_text, m.ingredient.unit) for m in members]
        )
        self._updated[item.id] = replace(
            base,
            quantity=combined.quantity,
            unit=combined.unit,
            notes=join_notes([base.notes, *(m.ingredient.notes for m in members)]),
        )

    def create(self, name: str, members: Sequence[SourcedIngredient]) -> None:
        if len(members) == 1:
            ingredient = members[0].ingredient
            quantity, unit = ingredient.quantity_text, ingredient.unit
        else:
            quantity, unit = combine_all(
                (m.ingredient.quantity_text, m.ingredient.unit) for m in members
            )
        self._created.append(
            GroceryListItem(
                id=self._id_factory(),
                name=name,
                quantity=quantity,
                unit=unit,
                notes=join_notes(m.ingredient.notes for m in members),
                order=self._next_order,
            )
        )
        self._next_order += 1

    def result(self) -> CommitResult:
        return CommitResult(created=self._created, updated=list(self._updated.values()))


def commit_analysis(
    analysis: AnalysisResult,
    existing_items: Sequence[GroceryListItem],
    decisions: Mapping[str, MatchDecision | str] | None = None,
) -> CommitResult:
    """Decide and commit in one call; raises like CommitSession.commit()."""
    session = CommitSession(analysis, existing_items)
    if decisions:
        session.decide_all(decisions)
    return session.commit()
