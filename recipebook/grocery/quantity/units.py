"""Cooking unit synonym table and canonicalization."""

from __future__ import annotations

# Spelling / abbreviation / plural → canonical singular form
_UNIT_SYNONYMS: dict[str, str] = {
    # Volume
    "teaspoon": "teaspoon",
    "teaspoons": "teaspoon",
    "tsp": "teaspoon",
    "tsps": "teaspoon",
    "tablespoon": "tablespoon",
    "tablespoons": "tablespoon",
    "tbsp": "tablespoon",
    "tbsps": "tablespoon",
    "tbs": "tablespoon",
    "tbl": "tablespoon",
    "cup": "cup",
    "cups": "cup",
    "c": "cup",
    "pint": "pint",
    "pints": "pint",
    "pt": "pint",
    "pts": "pint",
    "quart": "quart",
    "quarts": "quart",
    "qt": "quart",
    "qts": "quart",
    "gallon": "gallon",
    "gallons": "gallon",
    "gal": "gallon",
    "gals": "gallon",
    "fluid ounce": "fluid ounce",
    "fluid ounces": "fluid ounce",
    "fl oz": "fluid ounce",
    "fl ozs": "fluid ounce",
    "floz": "fluid ounce",
    "milliliter": "milliliter",
    "milliliters": "milliliter",
    "millilitre": "milliliter",
    "millilitres": "milliliter",
    "ml": "milliliter",
    "liter": "liter",
    "liters": "liter",
    "litre": "liter",
    "litres": "liter",
    "l": "liter",
    # Weight
    "ounce": "ounce",
    "ounces": "ounce",
    "oz": "ounce",
    "ozs": "ounce",
    "pound": "pound",
    "pounds": "pound",
    "lb": "pound",
    "lbs": "pound",
    "gram": "gram",
    "grams": "gram",
    "g": "gram",
    "kilogram": "kilogram",
    "kilograms": "kilogram",
    "kg": "kilogram",
    # Count / other
    "piece": "piece",
    "pieces": "piece",
    "pc": "piece",
    "pcs": "piece",
    "slice": "slice",
    "slices": "slice",
    "clove": "clove",
    "cloves": "clove",
    "head": "head",
    "heads": "head",
    "bunch": "bunch",
    "bunches": "bunch",
    "package": "package",
    "packages": "package",
    "pkg": "package",
    "pkgs": "package",
    "can": "can",
    "cans": "can",
    "jar": "jar",
    "jars": "jar",
    "bottle": "bottle",
    "bottles": "bottle",
    "bag": "bag",
    "bags": "bag",
    "box": "box",
    "boxes": "box",
    "container": "container",
    "containers": "container",
    "pinch": "pinch",
    "pinches": "pinch",
    "dash": "dash",
    "dashes": "dash",
    "drop": "drop",
    "drops": "drop",
}

CANONICAL_UNITS: frozenset[str] = frozenset(_UNIT_SYNONYMS.values())


def _clean(unit: str) -> str:
    # "Tbsp." / "fl. oz" → "tbsp" / "fl oz"
    return " ".join(unit.lower().replace(".", " ").split())


def normalize_unit(unit: str | None) -> str | None:
    """Map a unit spelling to its canonical form.

    Unknown units are returned lowercased and trimmed; empty input gives None.
    """
    if unit is None or not unit.strip():
        return None
    cleaned = _clean(unit)
    return _UNIT_SYNONYMS.get(cleaned, cleaned)


def is_known_unit(unit: str | None) -> bool:
    """True if the spelling maps onto one of the canonical units."""
    if unit is None or not unit.strip():
        return False
    return _clean(unit) in _UNIT_SYNONYMS


def units_compatible(unit1: str | None, unit2: str | None) -> bool:
    """Units combine when their canonical forms match or either is absent."""
    canonical1 = normalize_unit(unit1)
    canonical2 = normalize_unit(unit2)
    if canonical1 is None or canonical2 is None:
        return True
    return canonical1 == canonical2
