"""Tests for ingredient name similarity."""

import pytest

from recipebook.grocery.matching import (
    DEFAULT_SYNONYMS,
    SynonymTable,
    best_match,
    is_candidate,
    similarity,
    word_overlap,
)
from recipebook.grocery.models import GroceryListItem


class TestSimilarity:
    def test_identical(self):
        assert similarity("milk", "milk") == 1.0

    def test_case_insensitive(self):
        assert similarity("Milk", "milk ") == 1.0

    def test_containment(self):
        assert similarity("whole milk", "milk") == 0.9

    def test_shared_word_unrelated_rest(self):
        score = similarity("almond milk", "oat milk")
        assert 0.5 <= score < 0.8
        assert score == pytest.approx(0.6)

    def test_shared_word_and_synonym(self):
        assert similarity("chicken breast", "poultry breast") == pytest.approx(0.875)

    def test_synonym_only(self):
        assert similarity("cilantro", "coriander") == pytest.approx(0.8)

    def test_partial_word(self):
        assert similarity("peppercorn", "pepper mill") == pytest.approx(0.5)

    def test_edit_distance_capped(self):
        assert similarity("rice", "mice") == pytest.approx(0.4)

    def test_edit_distance_below_cap(self):
        # kale -> kiwi is three substitutions over four characters
        assert similarity("kale", "kiwi") == pytest.approx(0.25)

    def test_unrelated(self):
        assert similarity("abc", "xyz") == 0.0

    def test_empty_side(self):
        assert similarity("", "milk") == 0.0

    def test_custom_synonyms(self):
        table = SynonymTable([("ketchup", "catsup")])
        assert similarity("ketchup", "catsup", table) == pytest.approx(0.8)
        assert similarity("ketchup", "catsup") <= 0.4


class TestWordOverlap:
    def test_counts(self):
        overlap = word_overlap(["chicken", "breast"], ["poultry", "breast"])
        assert overlap.exact == 1
        assert overlap.synonym == 1
        assert overlap.partial == 0
        assert overlap.max_words == 2
        assert overlap.score == pytest.approx(1.4)


class TestSynonymTable:
    def test_word_in_several_groups(self):
        table = SynonymTable([("a", "b"), ("b", "c")])
        assert table.groups_for("b") == {0, 1}
        assert table.same_group("A", "b")
        assert not table.same_group("a", "c")

    def test_unknown_word(self):
        assert DEFAULT_SYNONYMS.groups_for("tofu") == set()

    def test_default_groups(self):
        assert DEFAULT_SYNONYMS.same_group("milk", "cream")
        assert DEFAULT_SYNONYMS.same_group("chicken", "poultry")
        assert DEFAULT_SYNONYMS.same_group("canola", "olive oil")

    def test_extended_leaves_original_untouched(self):
        extended = DEFAULT_SYNONYMS.extended([("ketchup", "catsup")])
        assert extended.same_group("ketchup", "catsup")
        assert extended.same_group("milk", "dairy")
        assert not DEFAULT_SYNONYMS.same_group("ketchup", "catsup")

    def test_blank_group_ignored(self):
        table = SynonymTable([("", "  ")])
        assert table.groups == []


class TestCandidates:
    def test_threshold_is_exclusive(self):
        assert not is_candidate(0.6)
        assert is_candidate(0.61)

    def test_best_match_picks_highest(self):
        items = [
            GroceryListItem(id="1", name="bread"),
            GroceryListItem(id="2", name="whole milk"),
            GroceryListItem(id="3", name="milk"),
        ]
        item, confidence = best_match("milk", items)
        assert item.id == "3"
        assert confidence == 1.0

    def test_best_match_tie_goes_to_first(self):
        items = [
            GroceryListItem(id="1", name="whole milk"),
            GroceryListItem(id="2", name="skim milk"),
        ]
        item, confidence = best_match("milk", items)
        assert item.id == "1"
        assert confidence == 0.9

    def test_best_match_none(self):
        items = [GroceryListItem(id="1", name="bread")]
        assert best_match("tofu", items) == (None, 0.0)

    def test_best_match_custom_key(self):
        names = ["eggs", "butter"]
        item, _ = best_match("butter", names, key=lambda n: n)
        assert item == "butter"
