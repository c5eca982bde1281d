"""Tests for quantity parsing, scaling and fraction formatting."""

from fractions import Fraction

import pytest

from recipebook.grocery.quantity import (
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


class TestParseQuantity:
    def test_whole(self):
        assert parse_quantity("2") == Quantity(2)

    def test_simple_fraction(self):
        assert parse_quantity("1/2") == Quantity(0, 1, 2)

    def test_mixed_number(self):
        assert parse_quantity("2 1/2") == Quantity(2, 1, 2)

    def test_decimal(self):
        assert parse_quantity("1.5") == Quantity(1, 1, 2)

    def test_unicode_glyph(self):
        assert parse_quantity("½") == Quantity(0, 1, 2)

    def test_unicode_glyph_after_digit(self):
        assert parse_quantity("1½") == Quantity(1, 1, 2)

    def test_range_display_is_midpoint(self):
        assert float(parse_quantity("1-2")) == 1.5

    def test_range_shopping_is_max(self):
        assert float(parse_quantity("1-2", RangeMode.SHOPPING)) == 2.0

    @pytest.mark.parametrize("text", ["1 to 2", "1 or 2", "1–2", "1—2", "1 - 2"])
    def test_range_separators(self, text):
        assert float(parse_quantity(text)) == 1.5
        assert float(parse_quantity(text, RangeMode.SHOPPING)) == 2.0

    def test_range_of_fractions(self):
        assert parse_quantity("1/2-3/4") == Quantity(0, 5, 8)

    def test_range_with_mixed_number(self):
        assert parse_quantity("1 1/2-2", RangeMode.SHOPPING) == Quantity(2)

    def test_unparseable(self):
        assert parse_quantity("a pinch") is None

    def test_empty(self):
        assert parse_quantity("") is None
        assert parse_quantity("   ") is None
        assert parse_quantity(None) is None

    def test_zero_denominator(self):
        assert parse_quantity("1/0") is None


class TestQuantity:
    def test_to_fraction(self):
        assert Quantity(1, 1, 2).to_fraction() == Fraction(3, 2)

    def test_from_value_snaps_common_fraction(self):
        assert Quantity.from_value(0.3333) == Quantity(0, 1, 3)

    def test_str(self):
        assert str(Quantity(1, 3, 4)) == "1 3/4"

    def test_negative_denominator_raises(self):
        with pytest.raises(QuantityError):
            Quantity(0, 1, -2)

    def test_zero_denominator_raises(self):
        with pytest.raises(QuantityError):
            Quantity(1, 1, 0)

    def test_negative_whole_raises(self):
        with pytest.raises(QuantityError):
            Quantity(-1)

    def test_quantity_error_is_value_error(self):
        assert issubclass(QuantityError, ValueError)


class TestFormatFraction:
    def test_integer(self):
        assert format_fraction(2) == "2"

    def test_half(self):
        assert format_fraction(0.5) == "1/2"

    def test_mixed(self):
        assert format_fraction(1.5) == "1 1/2"

    def test_third(self):
        assert format_fraction(1 / 3) == "1/3"

    def test_eighth(self):
        assert format_fraction(0.125) == "1/8"

    def test_thousandths_fallback(self):
        assert format_fraction(0.2) == "1/5"

    def test_rounds_up_to_whole(self):
        assert format_fraction(0.9999) == "1"

    def test_improper_quantity(self):
        assert format_fraction(Quantity(0, 3, 2)) == "1 1/2"

    def test_unreduced_quantity(self):
        assert format_fraction(Quantity(1, 2, 4)) == "1 1/2"

    def test_non_finite_falls_back(self):
        assert format_fraction(float("inf")) == "inf"

    @pytest.mark.parametrize(
        "value",
        [
            Fraction(1, 2),
            Fraction(1, 3),
            Fraction(2, 3),
            Fraction(1, 4),
            Fraction(3, 4),
            Fraction(1, 8),
            Fraction(3, 8),
            Fraction(5, 8),
            Fraction(7, 8),
            Fraction(5, 2),
            Fraction(7, 3),
        ],
    )
    def test_idempotent(self, value):
        formatted = format_fraction(value)
        assert format_fraction(parse_quantity(formatted)) == formatted


class TestMultiplyQuantity:
    def test_half_doubled(self):
        assert multiply_quantity("1/2", 2) == "1"

    def test_mixed_tripled(self):
        assert multiply_quantity("1 1/2", 3) == "4 1/2"

    def test_float_multiplier(self):
        assert multiply_quantity("1/3", 1.5) == "1/2"

    def test_range_keeps_form(self):
        assert multiply_quantity("1-2", 2) == "2-4"

    def test_word_range_keeps_separator(self):
        assert multiply_quantity("1 to 2", 2) == "2 to 4"

    def test_multiplier_one_unchanged(self):
        assert multiply_quantity("1.50", 1) == "1.50"

    def test_unparseable_unchanged(self):
        assert multiply_quantity("a handful", 2) == "a handful"


class TestScaleQuantity:
    def test_none(self):
        assert scale_quantity(None, 2) is None

    def test_scale(self):
        assert scale_quantity(Quantity(1), 2.5) == Quantity(2, 1, 2)


class TestParseFraction:
    def test_mixed(self):
        assert parse_fraction("1 1/2") == 1.5

    def test_range_midpoint(self):
        assert parse_fraction("1-2") == 1.5

    def test_range_for_shopping(self):
        assert parse_fraction_for_shopping("1-2") == 2.0

    def test_no_number(self):
        assert parse_fraction("some") == 0.0
        assert parse_fraction_for_shopping("") == 0.0

    def test_leading_number_fallback(self):
        assert parse_fraction("1/0") == 1.0


class TestFormatFractionWithUnicode:
    def test_mixed(self):
        assert format_fraction_with_unicode("1 1/2") == "1 ½"

    def test_with_unit(self):
        assert format_fraction_with_unicode("3/4 cup") == "¾ cup"

    def test_range(self):
        assert format_fraction_with_unicode("1/2-3/4") == "½-¾"

    def test_uncommon_fraction_unchanged(self):
        assert format_fraction_with_unicode("1/5") == "1/5"

    def test_does_not_split_numbers(self):
        assert format_fraction_with_unicode("11/2") == "11/2"
