"""Ingredient line parsing: "2 cups flour, sifted" → quantity, unit, name, notes."""

from __future__ import annotations

import re
from dataclasses import dataclass, replace
from typing import Callable

from ..types import RecipeIngredient
from .quantity import (
    Quantity,
    RangeMode,
    format_fraction,
    is_known_unit,
    multiply_quantity,
    normalize_unit,
    parse_quantity,
    scale_quantity,
)
from .quantity.amounts import replace_unicode_fractions


@dataclass(frozen=True)
class ParsedIngredient:
    original_text: str
    ingredient_name: str
    quantity: Quantity | None = None
    unit: str | None = None
    notes: str | None = None

    @property
    def quantity_text(self) -> str | None:
        """Quantity formatted for a list item ("1 1/2"), or None."""
        if self.quantity is None:
            return None
        return format_fraction(self.quantity)

    @property
    def canonical_unit(self) -> str | None:
        return normalize_unit(self.unit)


_NUMBER = r"\d+\s+\d+/\d+|\d+/\d+|\d+(?:\.\d+)?"
_QTY_PREFIX_RE = re.compile(
    rf"^(?P<qty>(?:{_NUMBER})(?:\s*(?:[-–—]|\bto\b|\bor\b)\s*(?:{_NUMBER}))?)"
    r"\s*(?P<rest>.*)$",
    re.IGNORECASE,
)
_NAME_NOTES_RE = re.compile(r"^(?P<name>[^,]+?)(?:,\s*(?P<notes>.+))?$")

# Longest unit spelling we try to peel off the front of the name ("fluid ounces")
_MAX_UNIT_WORDS = 2


def _split_notes(text: str) -> tuple[str, str | None] | None:
    m = _NAME_NOTES_RE.match(text.strip())
    if not m:
        return None
    name = m.group("name").strip()
    if not name:
        return None
    notes = m.group("notes")
    return name, notes.strip() if notes else None


def _parse_qty(text: str) -> Quantity | None:
    return parse_quantity(text, RangeMode.SHOPPING)


def _match_quantity_unit_name(original: str, text: str) -> ParsedIngredient | None:
    m = _QTY_PREFIX_RE.match(text)
    if not m:
        return None
    split = _split_notes(m.group("rest"))
    if split is None:
        return None
    name, notes = split
    words = name.split()
    for count in range(min(_MAX_UNIT_WORDS, len(words) - 1), 0, -1):
        unit = " ".join(words[:count])
        if is_known_unit(unit):
            return ParsedIngredient(
                original_text=original,
                ingredient_name=" ".join(words[count:]),
                quantity=_parse_qty(m.group("qty")),
                unit=unit,
                notes=notes,
            )
    return None


def _match_quantity_name(original: str, text: str) -> ParsedIngredient | None:
    m = _QTY_PREFIX_RE.match(text)
    if not m:
        return None
    split = _split_notes(m.group("rest"))
    if split is None:
        return None
    name, notes = split
    return ParsedIngredient(
        original_text=original,
        ingredient_name=name,
        quantity=_parse_qty(m.group("qty")),
        notes=notes,
    )


def _match_name_only(original: str, text: str) -> ParsedIngredient | None:
    split = _split_notes(text)
    if split is None:
        return None
    name, notes = split
    return ParsedIngredient(original_text=original, ingredient_name=name, notes=notes)


@dataclass(frozen=True)
class LineMatcher:
    """A named line pattern; ``match`` returns None when the line doesn't fit."""

    name: str
    match: Callable[[str, str], ParsedIngredient | None]


# Order is precedence: the first matcher that fits wins.
LINE_MATCHERS: tuple[LineMatcher, ...] = (
    LineMatcher("quantity-unit-name", _match_quantity_unit_name),
    LineMatcher("quantity-name", _match_quantity_name),
    LineMatcher("name", _match_name_only),
)


def parse_ingredient_line(text: str) -> ParsedIngredient:
    """Split a free-text ingredient line into its parts.

    Lines containing several numbers ("2 8-oz cans tomatoes") are only split
    on the first one; the rest stays in the ingredient name.
    """
    original = text.strip()
    normalized = replace_unicode_fractions(original)
    for matcher in LINE_MATCHERS:
        parsed = matcher.match(original, normalized)
        if parsed is not None:
            return parsed
    return ParsedIngredient(original_text=original, ingredient_name=original)


def ingredient_from_structured(
    entry: RecipeIngredient, multiplier: float = 1
) -> ParsedIngredient:
    """Turn a stored recipe ingredient into a ParsedIngredient scaled by multiplier.

    Entries with an explicit quantity or unit are used as-is (the quantity is
    multiplied as text, then re-parsed); bare text lines go through
    parse_ingredient_line.
    """
    if entry.quantity or entry.unit:
        adjusted = (
            multiply_quantity(entry.quantity.strip(), multiplier)
            if entry.quantity
            else None
        )
        name = entry.ingredient.strip()
        original = " ".join(p for p in (adjusted, entry.unit, name) if p)
        return ParsedIngredient(
            original_text=original,
            ingredient_name=name,
            quantity=_parse_qty(adjusted) if adjusted else None,
            unit=entry.unit.strip() if entry.unit else None,
            notes=entry.notes,
        )

    parsed = parse_ingredient_line(entry.ingredient)
    return replace(
        parsed,
        quantity=scale_quantity(parsed.quantity, multiplier),
        notes=parsed.notes or entry.notes,
    )
