"""Tests for the commit phase state machine."""

import itertools

import pytest

from recipebook.grocery.commit import (
    CommitSession,
    CommitState,
    CommitStateError,
    UnresolvedDecisionsError,
    commit_analysis,
)
from recipebook.grocery.consolidation import ConsolidationEngine, analyze_recipes
from recipebook.grocery.models import GroceryListItem, MatchDecision, RecipeSelection
from recipebook.types import Recipe, RecipeIngredient


def _recipe(recipe_id, title, *lines):
    return Recipe(
        id=recipe_id,
        title=title,
        ingredients=[RecipeIngredient(ingredient=line) for line in lines],
    )


def _ids():
    counter = itertools.count(1)
    return lambda: f"new-{next(counter)}"


@pytest.fixture
def milk_item():
    return GroceryListItem(id="i1", name="milk", quantity="1", unit="cup", order=4)


@pytest.fixture
def partial_analysis(milk_item):
    """One partial match (whole milk ~ milk) and one new item (eggs)."""
    selections = [
        RecipeSelection(_recipe("r1", "Custard", "1 cup whole milk, cold", "3 eggs"))
    ]
    return analyze_recipes(selections, [milk_item])


@pytest.fixture
def cluster_analysis():
    """A recipe-to-recipe cluster of three milk lines with no existing item."""
    selections = [
        RecipeSelection(_recipe("r1", "Custard", "1 cup milk")),
        RecipeSelection(_recipe("r2", "Porridge", "2 cups whole milk")),
        RecipeSelection(_recipe("r3", "Pudding", "1/2 cup skim milk")),
    ]
    return analyze_recipes(selections, [])


class TestStates:
    def test_no_partials_is_analyzed(self):
        selections = [RecipeSelection(_recipe("r1", "Omelette", "3 eggs"))]
        session = CommitSession(analyze_recipes(selections, []), [])
        assert session.state is CommitState.ANALYZED

    def test_awaiting_then_resolved(self, partial_analysis, milk_item):
        session = CommitSession(partial_analysis, [milk_item])
        assert session.state is CommitState.AWAITING_DECISIONS

        match_id = partial_analysis.partial_matches[0].match_id
        session.decide(match_id, "merge")
        assert session.state is CommitState.ALL_RESOLVED

        session.commit()
        assert session.state is CommitState.COMMITTED

    def test_no_partials_commits_directly(self):
        selections = [RecipeSelection(_recipe("r1", "Omelette", "3 eggs"))]
        session = CommitSession(analyze_recipes(selections, []), [], id_factory=_ids())
        result = session.commit()
        assert [i.name for i in result.created] == ["eggs"]
        assert session.state is CommitState.COMMITTED


class TestRejection:
    def test_missing_decision_rejected(self, partial_analysis, milk_item):
        session = CommitSession(partial_analysis, [milk_item])
        match_id = partial_analysis.partial_matches[0].match_id

        with pytest.raises(UnresolvedDecisionsError) as exc_info:
            session.commit()

        assert exc_info.value.missing == [match_id]
        assert session.state is CommitState.AWAITING_DECISIONS
        assert milk_item.quantity == "1"

    def test_unknown_match_id(self, partial_analysis, milk_item):
        session = CommitSession(partial_analysis, [milk_item])
        with pytest.raises(KeyError):
            session.decide("does-not-exist", "merge")

    def test_invalid_decision(self, partial_analysis, milk_item):
        session = CommitSession(partial_analysis, [milk_item])
        match_id = partial_analysis.partial_matches[0].match_id
        with pytest.raises(ValueError):
            session.decide(match_id, "maybe")

    def test_commit_twice(self, partial_analysis, milk_item):
        session = CommitSession(partial_analysis, [milk_item])
        session.decide_all({m.match_id: "skip" for m in partial_analysis.partial_matches})
        session.commit()

        with pytest.raises(CommitStateError):
            session.commit()
        with pytest.raises(CommitStateError):
            session.decide(partial_analysis.partial_matches[0].match_id, "merge")

    def test_decision_can_be_changed(self, partial_analysis, milk_item):
        session = CommitSession(partial_analysis, [milk_item])
        match_id = partial_analysis.partial_matches[0].match_id
        session.decide(match_id, "skip")
        session.decide(match_id, MatchDecision.MERGE)
        assert session.decisions == {match_id: MatchDecision.MERGE}


class TestDecisions:
    def test_merge_into_existing(self, partial_analysis, milk_item):
        match_id = partial_analysis.partial_matches[0].match_id
        result = commit_analysis(partial_analysis, [milk_item], {match_id: "merge"})

        assert len(result.updated) == 1
        updated = result.updated[0]
        assert updated.id == "i1"
        assert updated.quantity == "2"
        assert updated.unit == "cup"
        assert updated.notes == "cold"
        # eggs is a new item and always applied
        assert [i.name for i in result.created] == ["eggs"]

    def test_separate_creates_item(self, partial_analysis, milk_item):
        match_id = partial_analysis.partial_matches[0].match_id
        session = CommitSession(partial_analysis, [milk_item], id_factory=_ids())
        session.decide(match_id, "separate")
        result = session.commit()

        assert result.updated == []
        created = {i.name: i for i in result.created}
        assert set(created) == {"whole milk", "eggs"}
        assert created["whole milk"].quantity == "1"
        assert created["whole milk"].unit == "cup"

    def test_skip_discards(self, partial_analysis, milk_item):
        match_id = partial_analysis.partial_matches[0].match_id
        result = commit_analysis(partial_analysis, [milk_item], {match_id: "skip"})

        assert result.updated == []
        assert [i.name for i in result.created] == ["eggs"]

    def test_cluster_merge_makes_one_item(self, cluster_analysis):
        (match,) = cluster_analysis.partial_matches
        result = commit_analysis(cluster_analysis, [], {match.match_id: "merge"})

        assert len(result.created) == 1
        item = result.created[0]
        assert item.name == "milk"
        assert item.quantity == "3 1/2"
        assert item.unit == "cup"

    def test_cluster_separate_makes_n_items(self, cluster_analysis):
        (match,) = cluster_analysis.partial_matches
        result = commit_analysis(cluster_analysis, [], {match.match_id: "separate"})

        assert [i.name for i in result.created] == ["milk", "whole milk", "skim milk"]

    def test_cluster_skip_makes_nothing(self, cluster_analysis):
        (match,) = cluster_analysis.partial_matches
        result = commit_analysis(cluster_analysis, [], {match.match_id: "skip"})
        assert result.mutations == []

    def test_exact_match_applied_automatically(self, milk_item):
        selections = [RecipeSelection(_recipe("r1", "Custard", "2 cups milk"))]
        analysis = analyze_recipes(selections, [milk_item])

        result = commit_analysis(analysis, [milk_item])

        assert result.created == []
        assert result.updated[0].quantity == "3"
        assert result.updated[0].unit == "cup"

    def test_mismatched_units_kept_side_by_side(self, milk_item):
        selections = [RecipeSelection(_recipe("r1", "Custard", "2 tbsp milk"))]
        analysis = analyze_recipes(selections, [milk_item])
        match_id = analysis.partial_matches[0].match_id

        result = commit_analysis(analysis, [milk_item], {match_id: "merge"})

        assert result.updated[0].quantity == "1 cup + 2 tbsp"
        assert result.updated[0].unit is None

    def test_new_items_ordered_after_existing(self, partial_analysis, milk_item):
        match_id = partial_analysis.partial_matches[0].match_id
        session = CommitSession(partial_analysis, [milk_item], id_factory=_ids())
        session.decide(match_id, "separate")
        result = session.commit()

        assert [i.order for i in result.created] == [5, 6]
        assert [i.id for i in result.created] == ["new-1", "new-2"]


class TestEndToEnd:
    def test_flour_from_two_recipes(self):
        selections = [
            RecipeSelection(_recipe("r1", "Pancakes", "1 cup flour"), multiplier=1),
            RecipeSelection(_recipe("r2", "Bread", "1/2 cup flour"), multiplier=2),
        ]
        result = commit_analysis(analyze_recipes(selections, []), [])

        assert len(result.created) == 1
        item = result.created[0]
        assert (item.name, item.quantity, item.unit) == ("flour", "2", "cup")

    def test_flour_with_explicit_merge(self):
        selections = [
            RecipeSelection(_recipe("r1", "Pancakes", "1 cup flour"), multiplier=1),
            RecipeSelection(_recipe("r2", "Bread", "1/2 cup flour"), multiplier=2),
        ]
        engine = ConsolidationEngine(auto_merge_uniform_clusters=False)
        analysis = engine.analyze(selections, [])
        decisions = {m.match_id: "merge" for m in analysis.partial_matches}

        result = commit_analysis(analysis, [], decisions)

        assert len(result.created) == 1
        item = result.created[0]
        assert (item.name, item.quantity, item.unit) == ("flour", "2", "cup")
