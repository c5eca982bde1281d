"""Heuristic ingredient-name similarity for grocery consolidation."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Sequence, TypeVar

from rapidfuzz.distance import Levenshtein

# Names scoring above this are considered the same grocery item
MATCH_THRESHOLD = 0.6

_EXACT_WORD_SCORE = 0.8
_SYNONYM_WORD_SCORE = 0.6
_PARTIAL_WORD_SCORE = 0.3

DEFAULT_SYNONYM_GROUPS: tuple[tuple[str, ...], ...] = (
    ("milk", "dairy", "cream"),
    ("chicken", "poultry"),
    ("beef", "steak"),
    ("pork", "ham", "bacon"),
    ("oil", "olive oil", "vegetable oil", "canola"),
    ("onion", "onions", "shallot", "shallots"),
    ("scallion", "scallions", "green onion", "green onions"),
    ("tomato", "tomatoes"),
    ("potato", "potatoes"),
    ("pepper", "peppers", "capsicum"),
    ("cilantro", "coriander"),
    ("sugar", "sweetener"),
    ("flour", "wheat"),
    ("stock", "broth", "bouillon"),
    ("pasta", "spaghetti", "penne", "macaroni", "noodles"),
    ("yogurt", "yoghurt"),
    ("zucchini", "courgette"),
    ("eggplant", "aubergine"),
)

T = TypeVar("T")


class SynonymTable:
    """Static word → synonym-group lookup.

    Groups are identified by their position; a word may belong to several
    groups. Extra groups can be appended without touching the scoring code.
    """

    def __init__(self, groups: Iterable[Iterable[str]] = DEFAULT_SYNONYM_GROUPS) -> None:
        self._groups: list[tuple[str, ...]] = []
        self._index: dict[str, set[int]] = {}
        for group in groups:
            self.add_group(group)

    def add_group(self, words: Iterable[str]) -> None:
        group = tuple(w.strip().lower() for w in words if w and w.strip())
        if not group:
            return
        group_id = len(self._groups)
        self._groups.append(group)
        for word in group:
            self._index.setdefault(word, set()).add(group_id)

    def groups_for(self, word: str) -> set[int]:
        return self._index.get(word.lower(), set())

    def same_group(self, a: str, b: str) -> bool:
        return bool(self.groups_for(a) & self.groups_for(b))

    @property
    def groups(self) -> list[tuple[str, ...]]:
        return list(self._groups)

    def extended(self, extra: Iterable[Iterable[str]]) -> SynonymTable:
        """Return a new table with extra groups appended."""
        return SynonymTable([*self._groups, *extra])


DEFAULT_SYNONYMS = SynonymTable()


@dataclass(frozen=True)
class WordOverlap:
    """Counts from comparing every word of one name with every word of another."""

    exact: int
    synonym: int
    partial: int
    max_words: int
    score: float


def word_overlap(
    words_a: Sequence[str],
    words_b: Sequence[str],
    synonyms: SynonymTable = DEFAULT_SYNONYMS,
) -> WordOverlap:
    exact = synonym = partial = 0
    score = 0.0
    for wa in words_a:
        for wb in words_b:
            if wa == wb:
                exact += 1
                score += _EXACT_WORD_SCORE
            elif synonyms.same_group(wa, wb):
                synonym += 1
                score += _SYNONYM_WORD_SCORE
            elif wa in wb or wb in wa:
                partial += 1
                score += _PARTIAL_WORD_SCORE
    return WordOverlap(
        exact=exact,
        synonym=synonym,
        partial=partial,
        max_words=max(len(words_a), len(words_b)),
        score=score,
    )


def similarity(a: str, b: str, synonyms: SynonymTable = DEFAULT_SYNONYMS) -> float:
    """Score how likely two ingredient names denote the same grocery item.

    Tiers, first hit wins:

    1. identical names → 1.0
    2. one name contains the other → 0.9
    3. word overlap: exact shared words score at least 0.6, synonym-only
       overlap at least 0.5, partial word containment at most 0.5
    4. character edit distance, capped at 0.4

    Comparison is case-insensitive.
    """
    a = a.strip().lower()
    b = b.strip().lower()

    if a == b:
        return 1.0
    if not a or not b:
        return 0.0
    if a in b or b in a:
        return 0.9

    overlap = word_overlap(a.split(), b.split(), synonyms)

    if overlap.exact > 0:
        ratio = (overlap.exact + 0.75 * overlap.synonym) / overlap.max_words
        bonus = 0.1 if overlap.exact > 1 else 0.0
        return min(1.0, max(0.6, ratio) + bonus)

    if overlap.synonym > 0:
        return max(0.5, overlap.synonym / overlap.max_words * 0.8)

    if overlap.partial > 0:
        return min(0.5, overlap.partial / overlap.max_words)

    distance = Levenshtein.distance(a, b)
    return min(0.4, max(0.0, 1 - distance / max(len(a), len(b))))


def is_candidate(confidence: float, threshold: float = MATCH_THRESHOLD) -> bool:
    return confidence > threshold


def best_match(
    name: str,
    candidates: Iterable[T],
    key=lambda c: c.name,
    threshold: float = MATCH_THRESHOLD,
    synonyms: SynonymTable = DEFAULT_SYNONYMS,
) -> tuple[T | None, float]:
    """Pick the highest-scoring candidate above threshold.

    Ties go to the earliest candidate. Returns (None, 0.0) when nothing
    clears the threshold.
    """
    best: T | None = None
    best_confidence = 0.0
    for candidate in candidates:
        confidence = similarity(name, key(candidate), synonyms)
        if confidence > best_confidence and is_candidate(confidence, threshold):
            best = candidate
            best_confidence = confidence
    return best, best_confidence
