"""Combining list quantities."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Iterable, NamedTuple

from .amounts import format_fraction, parse_fraction_for_shopping
from .units import normalize_unit

# One side of a previously combined "1 cup + 2 tbsp" string
_AMOUNT_RE = re.compile(
    r"^(?P<qty>\d+\s+\d+/\d+|\d+/\d+|\d+(?:\.\d+)?)\s*(?P<unit>.*)$"
)
_JOINER = " + "


class CombinedQuantity(NamedTuple):
    quantity: str
    unit: str | None


@dataclass
class _UnitGroup:
    canonical: str
    unit: str  # first spelling seen
    total: float = 0.0
    raw: list[str] = field(default_factory=list)
    seen: bool = False

    def add(self, quantity: str) -> None:
        self.seen = True
        value = parse_fraction_for_shopping(quantity)
        if value > 0:
            self.total += value
        else:
            self.raw.append(quantity)

    def text(self) -> str:
        if self.total > 0:
            return format_fraction(self.total)
        return " ".join(self.raw)


def _expand(
    amounts: Iterable[tuple[str | None, str | None]],
) -> Iterable[tuple[str | None, str | None]]:
    for quantity, unit in amounts:
        if quantity and not unit and _JOINER in quantity:
            for part in quantity.split(_JOINER):
                m = _AMOUNT_RE.match(part.strip())
                if m:
                    yield m.group("qty"), m.group("unit") or None
                else:
                    yield part.strip(), None
        else:
            yield quantity, unit


def combine_all(
    amounts: Iterable[tuple[str | None, str | None]],
) -> CombinedQuantity:
    """Sum any number of (quantity, unit) pairs for one list item.

    Amounts are summed per canonical unit. Amounts without a unit join the
    first unit seen. If more than one unit remains, the per-unit totals are
    listed side by side ("1 cup + 1 tbsp") and the unit is None. A previously
    combined string is split back into its parts first.
    """
    groups: list[_UnitGroup] = []
    loose = 0.0
    loose_seen = False

    for quantity, unit in _expand(amounts):
        canonical = normalize_unit(unit)
        if canonical is None:
            if quantity:
                loose += parse_fraction_for_shopping(quantity)
                loose_seen = True
            continue
        group = next((g for g in groups if g.canonical == canonical), None)
        if group is None:
            group = _UnitGroup(canonical=canonical, unit=unit.strip())
            groups.append(group)
        if quantity:
            group.add(quantity)

    if not groups:
        return CombinedQuantity(format_fraction(loose) if loose_seen else "1", None)

    first = groups[0]
    first.total += loose
    if not loose_seen and not any(g.seen for g in groups):
        # nothing to add up; one of the item
        return CombinedQuantity("1", first.unit if len(groups) == 1 else None)
    if len(groups) == 1:
        return CombinedQuantity(first.text() or format_fraction(first.total), first.unit)

    return CombinedQuantity(
        _JOINER.join(f"{g.text()} {g.unit}".strip() for g in groups), None
    )


def combine_quantities(
    quantity1: str | None,
    quantity2: str | None,
    unit1: str | None = None,
    unit2: str | None = None,
) -> CombinedQuantity:
    """Add two quantities for the shopping list.

    Quantities whose canonical units match (or where either side has no unit)
    are summed, ranges counting as their upper end. Mismatched units are not
    converted; both amounts are kept side by side ("1 cup + 1 tbsp") and the
    unit is left empty.

    Args:
        quantity1: Existing quantity text, e.g. "1 1/2".
        quantity2: Quantity text to add.
        unit1: Unit of quantity1 as written.
        unit2: Unit of quantity2 as written.

    Returns:
        CombinedQuantity(quantity, unit). The unit keeps the original
        spelling of whichever side supplied it.
    """
    return combine_all([(quantity1, unit1), (quantity2, unit2)])


def join_notes(notes: Iterable[str | None]) -> str | None:
    """Join distinct non-empty notes with "; "."""
    seen: list[str] = []
    for note in notes:
        if note and note.strip() and note.strip() not in seen:
            seen.append(note.strip())
    return "; ".join(seen) or None
