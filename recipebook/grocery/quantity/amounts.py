"""Recipe quantity parsing, scaling and fraction formatting."""

from __future__ import annotations

import math
import re
from dataclasses import dataclass
from enum import Enum
from fractions import Fraction


class QuantityError(ValueError):
    """Raised when a Quantity would break its rational invariants."""


class RangeMode(Enum):
    DISPLAY = "display"  # midpoint of the range
    SHOPPING = "shopping"  # upper end of the range


@dataclass(frozen=True)
class Quantity:
    """Non-negative rational quantity stored as a mixed number."""

    whole: int = 0
    numerator: int = 0
    denominator: int = 1

    def __post_init__(self) -> None:
        if self.denominator <= 0:
            raise QuantityError(
                f"denominator must be positive, got {self.denominator}"
            )
        if self.whole < 0 or self.numerator < 0:
            raise QuantityError(
                f"quantity must be non-negative, got "
                f"{self.whole} {self.numerator}/{self.denominator}"
            )

    @classmethod
    def from_value(cls, value: Fraction | float | int) -> Quantity:
        """Build a Quantity from a number, snapping to common cooking fractions."""
        return _decimal_to_quantity(value)

    def to_fraction(self) -> Fraction:
        return self.whole + Fraction(self.numerator, self.denominator)

    def __float__(self) -> float:
        return float(self.to_fraction())

    def __str__(self) -> str:
        return format_fraction(self)


_UNICODE_FRACTIONS: dict[str, str] = {
    "½": "1/2",
    "⅓": "1/3",
    "⅔": "2/3",
    "¼": "1/4",
    "¾": "3/4",
    "⅕": "1/5",
    "⅖": "2/5",
    "⅗": "3/5",
    "⅘": "4/5",
    "⅙": "1/6",
    "⅚": "5/6",
    "⅛": "1/8",
    "⅜": "3/8",
    "⅝": "5/8",
    "⅞": "7/8",
}

_GLYPH_RE = re.compile(r"(\d?)\s*([" + "".join(_UNICODE_FRACTIONS) + r"])")

# Fractional parts rounded to 3 places → (numerator, denominator)
_COMMON_FRACTIONS: dict[str, tuple[int, int]] = {
    "0.500": (1, 2),
    "0.250": (1, 4),
    "0.750": (3, 4),
    "0.333": (1, 3),
    "0.667": (2, 3),
    "0.125": (1, 8),
    "0.375": (3, 8),
    "0.625": (5, 8),
    "0.875": (7, 8),
}

# A range end is a single token or a mixed number ("1 1/2")
_END = r"(\d+\s+\d+/\d+|\S+?)"

_RANGE_PATTERNS: list[tuple[re.Pattern[str], str | None]] = [
    # "1-2", "1/2-3/4", "1–2", "1—2" (separator kept as written)
    (re.compile(rf"^{_END}\s*([-–—])\s*{_END}$"), None),
    (re.compile(rf"^{_END}\s+(to)\s+{_END}$", re.IGNORECASE), " to "),
    (re.compile(rf"^{_END}\s+(or)\s+{_END}$", re.IGNORECASE), " or "),
]

_MIXED_RE = re.compile(r"^(\d+)\s+(\d+)/(\d+)$")
_SIMPLE_RE = re.compile(r"^(\d+)/(\d+)$")
_DECIMAL_RE = re.compile(r"^\d+\.\d+$")
_WHOLE_RE = re.compile(r"^\d+$")
_NON_NUMERIC_RE = re.compile(r"[^\d\s/\-.]")
_LEADING_NUMBER_RE = re.compile(r"^\s*([+-]?(?:\d+\.?\d*|\.\d+))")

_UNICODE_DISPLAY: dict[str, str] = {
    "1/2": "½",
    "1/3": "⅓",
    "2/3": "⅔",
    "1/4": "¼",
    "3/4": "¾",
    "1/8": "⅛",
    "3/8": "⅜",
    "5/8": "⅝",
    "7/8": "⅞",
}
_DISPLAY_RE = re.compile(
    r"(^|\s)(" + "|".join(re.escape(k) for k in _UNICODE_DISPLAY) + r")(?!\d)"
)


def replace_unicode_fractions(text: str) -> str:
    """Swap fraction glyphs for ASCII fractions ("1½" → "1 1/2")."""

    def _sub(m: re.Match[str]) -> str:
        digit, glyph = m.group(1), m.group(2)
        ascii_frac = _UNICODE_FRACTIONS[glyph]
        return f"{digit} {ascii_frac}" if digit else ascii_frac

    return _GLYPH_RE.sub(_sub, text)


def _split_range(text: str) -> tuple[str, str, str] | None:
    """Return (start, separator, end) if text looks like a range."""
    for pattern, separator in _RANGE_PATTERNS:
        m = pattern.match(text)
        if m:
            return m.group(1), separator or m.group(2), m.group(3)
    return None


def _parse_single(text: str) -> Quantity | None:
    normalized = _NON_NUMERIC_RE.sub("", text).strip()

    m = _MIXED_RE.match(normalized)
    if m:
        whole, num, den = (int(g) for g in m.groups())
        if den == 0:
            return None
        return _simplify(Fraction(whole) + Fraction(num, den))

    m = _SIMPLE_RE.match(normalized)
    if m:
        num, den = int(m.group(1)), int(m.group(2))
        if den == 0:
            return None
        return _simplify(Fraction(num, den))

    if _DECIMAL_RE.match(normalized):
        return _decimal_to_quantity(Fraction(normalized))

    if _WHOLE_RE.match(normalized):
        return Quantity(whole=int(normalized))

    return None


def parse_quantity(
    text: str | None, mode: RangeMode = RangeMode.DISPLAY
) -> Quantity | None:
    """Parse a free-text quantity into a rational Quantity.

    Accepts whole numbers, decimals, simple fractions, mixed numbers, unicode
    fraction glyphs and ranges ("1-2", "1 to 2", "1 or 2"). In DISPLAY mode a
    range resolves to its midpoint; in SHOPPING mode to its larger end.

    Returns:
        The parsed Quantity, or None when the text holds no usable number.
    """
    if not text or not text.strip():
        return None

    normalized = replace_unicode_fractions(text.strip())

    parts = _split_range(normalized)
    if parts is not None:
        start, _, end = parts
        low = parse_quantity(start)
        high = parse_quantity(end)
        if low is not None and high is not None:
            a, b = low.to_fraction(), high.to_fraction()
            if mode is RangeMode.SHOPPING:
                return _decimal_to_quantity(max(a, b))
            return _decimal_to_quantity((a + b) / 2)

    return _parse_single(normalized)


def _leading_number(text: str) -> float:
    m = _LEADING_NUMBER_RE.match(text)
    return float(m.group(1)) if m else 0.0


def parse_fraction(text: str | None) -> float:
    """Return the numeric value of a quantity string, or 0 if there is none."""
    if not text or not text.strip():
        return 0.0
    parsed = parse_quantity(text.strip())
    if parsed is None:
        return _leading_number(text)
    return float(parsed)


def parse_fraction_for_shopping(text: str | None) -> float:
    """Like parse_fraction, but ranges count as their upper end."""
    if not text or not text.strip():
        return 0.0
    parsed = parse_quantity(text.strip(), RangeMode.SHOPPING)
    if parsed is None:
        return _leading_number(text)
    return float(parsed)


def _simplify(value: Fraction) -> Quantity:
    whole = math.floor(value)
    rest = value - whole
    return Quantity(whole, rest.numerator, rest.denominator)


def _decimal_to_quantity(value: Fraction | float | int) -> Quantity:
    whole = math.floor(value)
    rest = value - whole
    if rest == 0:
        return Quantity(whole=int(whole))

    common = _COMMON_FRACTIONS.get(f"{float(rest):.3f}")
    if common is not None:
        return Quantity(int(whole), *common)

    numerator = round(rest * 1000)
    gcd = math.gcd(numerator, 1000)
    numerator, denominator = numerator // gcd, 1000 // gcd
    if numerator == denominator:
        return Quantity(whole=int(whole) + 1)
    return Quantity(int(whole), numerator, denominator)


def format_fraction(value: Quantity | Fraction | float | int) -> str:
    """Render a value as a cooking quantity: "2", "1/2" or "1 1/2".

    Common fractions (halves, thirds, quarters, eighths) are recognised from
    their decimal form; anything else is approximated in thousandths and
    reduced. Values that cannot be converted fall back to one decimal place.
    """
    if isinstance(value, float) and not math.isfinite(value):
        return str(round(value, 1))
    if not isinstance(value, Quantity):
        value = _decimal_to_quantity(value)

    frac = Fraction(value.numerator, value.denominator)
    whole = value.whole + frac.numerator // frac.denominator
    numerator = frac.numerator % frac.denominator

    if numerator == 0:
        return str(whole)
    if whole == 0:
        return f"{numerator}/{frac.denominator}"
    return f"{whole} {numerator}/{frac.denominator}"


def multiply_quantity(text: str, multiplier: float | Fraction) -> str:
    """Scale a quantity string, keeping ranges in range form.

    Text that cannot be parsed is returned unchanged.
    """
    if not text or not text.strip() or multiplier == 1:
        return text

    factor = _to_factor(multiplier)

    parts = _split_range(replace_unicode_fractions(text.strip()))
    if parts is not None:
        start, separator, end = parts
        low = parse_quantity(start)
        high = parse_quantity(end)
        if low is not None and high is not None:
            return (
                format_fraction(low.to_fraction() * factor)
                + separator
                + format_fraction(high.to_fraction() * factor)
            )

    parsed = parse_quantity(text)
    if parsed is None:
        return text
    return format_fraction(parsed.to_fraction() * factor)


def scale_quantity(
    quantity: Quantity | None, multiplier: float | Fraction
) -> Quantity | None:
    """Multiply a parsed quantity; None stays None."""
    if quantity is None or multiplier == 1:
        return quantity
    return _decimal_to_quantity(quantity.to_fraction() * _to_factor(multiplier))


def _to_factor(multiplier: float | Fraction) -> Fraction:
    if isinstance(multiplier, float):
        return Fraction(multiplier).limit_denominator(1000)
    return Fraction(multiplier)


def format_fraction_with_unicode(text: str) -> str:
    """Replace common ASCII fractions with unicode glyphs ("1 1/2" → "1 ½")."""
    if not text:
        return text
    parts = _split_range(text)
    if parts is not None:
        start, separator, end = parts
        return (
            _unicode_single(start) + separator + _unicode_single(end)
        )
    return _unicode_single(text)


def _unicode_single(text: str) -> str:
    return _DISPLAY_RE.sub(lambda m: m.group(1) + _UNICODE_DISPLAY[m.group(2)], text)
