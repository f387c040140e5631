"""Unit tests for the quantity model and accent folding."""

import pytest

from recipekit.normalize.quantity import (
    Quantity,
    format_quantity,
    normalize_amount,
    parse_quantity,
    split_leading_quantity,
)
from recipekit.normalize.text import FoldedText, fold_text, name_key

# =============================================================================
# Parsing
# =============================================================================


class TestParseQuantity:
    """Tests for parse_quantity."""

    @pytest.mark.parametrize(
        "text,expected",
        [
            ("2", 2.0),
            ("1.5", 1.5),
            ("1,5", 1.5),
            (".5", 0.5),
            ("3/4", 0.75),
            ("1 1/2", 1.5),
            ("¾", 0.75),
            ("1½", 1.5),
            ("2 ¼", 2.25),
            ("⅝", 0.625),
        ],
    )
    def test_numeric_forms(self, text, expected):
        """Test integers, decimals, fractions, glyphs and mixed forms."""
        result = parse_quantity(text)
        assert result.value == pytest.approx(expected)
        assert result.display == text

    def test_unparseable_keeps_trimmed_text(self):
        """Test that unparseable input yields value None and the trimmed text."""
        result = parse_quantity("  a handful ")
        assert result.value is None
        assert result.display == "a handful"

    def test_empty_input(self):
        """Test empty and None input."""
        assert parse_quantity("").is_empty
        assert parse_quantity(None).is_empty

    def test_zero_denominator_does_not_raise(self):
        """Test that 1/0 is treated as unparseable."""
        assert parse_quantity("1/0").value is None


class TestSplitLeadingQuantity:
    """Tests for split_leading_quantity."""

    def test_split_with_space(self):
        """Test splitting '1/2 cup'."""
        quantity, sep, rest = split_leading_quantity("1/2 cup")
        assert quantity.value == 0.5
        assert sep == " "
        assert rest == "cup"

    def test_split_without_space(self):
        """Test splitting '200g'."""
        quantity, sep, rest = split_leading_quantity("200g")
        assert quantity.value == 200
        assert sep == ""
        assert rest == "g"

    def test_no_leading_amount(self):
        """Test text without a leading amount."""
        quantity, sep, rest = split_leading_quantity("to taste")
        assert quantity.is_empty
        assert rest == "to taste"


class TestNormalizeAmount:
    """Tests for normalize_amount."""

    def test_glyph_to_ascii(self):
        """Test single glyph conversion."""
        assert normalize_amount("⅔") == "2/3"

    def test_mixed_glyph(self):
        """Test integer followed by a glyph."""
        assert normalize_amount("1½") == "1 1/2"
        assert normalize_amount("2 ¼") == "2 1/4"

    def test_plain_text_unchanged(self):
        """Test that amounts without glyphs are unchanged."""
        assert normalize_amount("1.5") == "1.5"
        assert normalize_amount("") == ""


# =============================================================================
# Formatting
# =============================================================================


class TestFormatQuantity:
    """Tests for format_quantity."""

    @pytest.mark.parametrize(
        "value,expected",
        [
            (2.0, "2"),
            (1.5, "1½"),
            (0.5, "½"),
            (0.25, "¼"),
            (2.75, "2¾"),
            (1 / 3, "⅓"),
            (0.666, "⅔"),
            (0.126, "⅛"),
            (1 / 6, "⅙"),
            (1.2, "1.2"),
            (0.1, "0.1"),
            (226.796, "226.8"),
        ],
    )
    def test_format(self, value, expected):
        """Test whole numbers, glyphs and decimal fallback."""
        assert format_quantity(value) == expected

    def test_none_and_non_finite(self):
        """Test that missing values render as empty strings."""
        assert format_quantity(None) == ""
        assert format_quantity(float("nan")) == ""

    def test_negative(self):
        """Test negative values keep their sign."""
        assert format_quantity(-0.5) == "-½"

    @pytest.mark.parametrize(
        "text", ["2", "0.3", "0.33", "1.5", "3/4", "1 1/3", "2.675", "⅞", "10", "0.05"]
    )
    def test_round_trip_within_tolerance(self, text):
        """Test that formatted values re-parse within 0.01 of the original."""
        value = parse_quantity(text).value
        reparsed = parse_quantity(normalize_amount(format_quantity(value))).value
        assert reparsed == pytest.approx(value, abs=0.01)


class TestQuantity:
    """Tests for the Quantity value object."""

    def test_from_value(self):
        """Test building a quantity from a magnitude."""
        quantity = Quantity.from_value(1.5)
        assert quantity.display == "1½"
        assert quantity.is_numeric

    def test_scaled_returns_new_instance(self):
        """Test that scaling does not modify the original."""
        original = parse_quantity("1/2")
        scaled = original.scaled(3)
        assert scaled.display == "1½"
        assert original.display == "1/2"

    def test_scaled_non_numeric_is_noop(self):
        """Test that non-numeric quantities are returned unchanged."""
        quantity = parse_quantity("some")
        assert quantity.scaled(2) is quantity


# =============================================================================
# Accent Folding
# =============================================================================


class TestFoldedText:
    """Tests for accent folding with index mapping."""

    def test_fold_text(self):
        """Test lower-casing and diacritic stripping."""
        assert fold_text("Calabacín") == "calabacin"
        assert fold_text("PIÑA") == "pina"

    def test_name_key_collapses_whitespace(self):
        """Test the cross-list matching key."""
        assert name_key("  Azúcar   Moreno ") == "azucar moreno"

    def test_original_span(self):
        """Test that folded spans map back to the accented original."""
        folded = FoldedText.build("Añade el calabacín")
        start = folded.folded.index("calabacin")
        orig_start, orig_end = folded.original_span(start, start + len("calabacin"))
        assert folded.original[orig_start:orig_end] == "calabacín"

    def test_decomposed_input(self):
        """Test text that already contains combining marks."""
        text = "jalapéno"
        folded = FoldedText.build(text)
        assert folded.folded == "jalapeno"
        start, end = folded.original_span(0, len(folded.folded))
        assert text[start:end] == text
