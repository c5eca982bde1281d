"""Quantity parsing, formatting and unit handling for grocery lists."""

from .amounts import (
    Quantity,
    QuantityError,
    RangeMode,
    format_fraction,
    format_fraction_with_unicode,
    multiply_quantity,
    parse_fraction,
    parse_fraction_for_shopping,
    parse_quantity,
    scale_quantity,
)
from .combine import CombinedQuantity, combine_all, combine_quantities, join_notes
from .units import CANONICAL_UNITS, is_known_unit, normalize_unit, units_compatible

__all__ = [
    "Quantity",
    "QuantityError",
    "RangeMode",
    "parse_quantity",
    "parse_fraction",
    "parse_fraction_for_shopping",
    "format_fraction",
    "format_fraction_with_unicode",
    "multiply_quantity",
    "scale_quantity",
    "normalize_unit",
    "is_known_unit",
    "units_compatible",
    "CANONICAL_UNITS",
    "combine_quantities",
    "combine_all",
    "join_notes",
    "CombinedQuantity",
]
