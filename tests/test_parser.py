"""Unit tests for the ingredient line parser."""

import pytest

from recipekit.ingest.parser import IngredientParser, parse_ingredient_line, parse_ingredient_lines
from recipekit.normalize.units import UnitTables


class TestParseIngredientLine:
    """Tests for parse_ingredient_line."""

    def test_secondary_measurement(self):
        """Test '100 g flour (⅔ cup)' keeps the parenthesized amount as variant 2."""
        result = parse_ingredient_line("100 g flour (⅔ cup)")
        assert result.name == "flour"
        assert result.amount.display == "100"
        assert result.unit == "g"
        assert result.amount2.display == "2/3"
        assert result.amount2.value == pytest.approx(2 / 3)
        assert result.unit2 == "cup"
        assert not result.is_header

    def test_quantity_unit_name(self):
        """Test the quantity + unit + name pattern."""
        result = parse_ingredient_line("2 cups sugar")
        assert (result.amount.display, result.unit, result.name) == ("2", "cups", "sugar")

    def test_unit_without_space(self):
        """Test '200g butter'."""
        result = parse_ingredient_line("200g butter")
        assert (result.amount.display, result.unit, result.name) == ("200", "g", "butter")

    def test_unit_with_period(self):
        """Test abbreviated units followed by a period."""
        result = parse_ingredient_line("3 tbsp. olive oil")
        assert (result.unit, result.name) == ("tbsp", "olive oil")

    def test_adjective_not_taken_as_unit(self):
        """Test that 'large' is not parsed as the unit 'l'."""
        result = parse_ingredient_line("2 large eggs")
        assert result.amount.display == "2"
        assert result.unit == ""
        assert result.name == "large eggs"

    def test_spanish_unit_and_connector(self):
        """Test Spanish units and the 'de' connector."""
        result = parse_ingredient_line("3 cucharadas de azúcar")
        assert (result.amount.display, result.unit, result.name) == ("3", "cucharadas", "azúcar")

    def test_glyph_amount_is_normalized(self):
        """Test that glyph amounts are stored in ASCII form."""
        result = parse_ingredient_line("1½ cups milk")
        assert result.amount.display == "1 1/2"
        assert result.amount.value == 1.5
        assert result.unit == "cups"

    def test_decimal_comma(self):
        """Test decimal comma amounts."""
        result = parse_ingredient_line("1,5 kg patatas")
        assert result.amount.value == 1.5
        assert (result.unit, result.name) == ("kg", "patatas")

    def test_name_only(self):
        """Test lines without a quantity."""
        result = parse_ingredient_line("salt to taste")
        assert result.name == "salt to taste"
        assert result.amount.is_empty
        assert result.unit == ""

    def test_non_measurement_parenthesis_stays_in_name(self):
        """Test that a descriptive parenthesis is not a secondary amount."""
        result = parse_ingredient_line("1 onion (finely chopped)")
        assert result.name == "onion (finely chopped)"
        assert result.amount2 is None

    def test_secondary_without_known_unit(self):
        """Test secondary amounts with free-text units."""
        result = parse_ingredient_line("1 can tomatoes (400 ml tin)")
        assert result.unit == "can"
        assert result.amount2.display == "400"
        assert result.unit2 == "ml"

    def test_empty_line(self):
        """Test that empty input yields an empty name."""
        assert parse_ingredient_line("").is_empty
        assert parse_ingredient_line("   ").name == ""

    def test_only_parenthesis_returns_whole_line(self):
        """Test that the worst case returns the original line as the name."""
        result = parse_ingredient_line("(½ cup)")
        assert result.name == "(½ cup)"
        assert result.amount.is_empty

    @pytest.mark.parametrize("line", ["2 1/0 cups", "1/0 g flour"])
    def test_invalid_fraction_stays_in_name(self, line):
        """Test that a zero-denominator amount is not stored as the amount."""
        result = parse_ingredient_line(line)
        assert result.name == line
        assert result.amount.is_empty
        assert result.unit == ""

    @pytest.mark.parametrize("line", ["???", "1/0 cups", "((", "2 ", "**", "o 2"])
    def test_malformed_input_never_raises(self, line):
        """Test that malformed input degrades instead of raising."""
        parse_ingredient_line(line)


class TestHeaders:
    """Tests for section header detection."""

    @pytest.mark.parametrize(
        "line,label",
        [
            ("For the base:", "For the base"),
            ("For the filling", "For the filling"),
            ("Para la masa:", "Para la masa"),
            ("**Topping**", "Topping"),
            ("**Glaseado:**", "Glaseado"),
        ],
    )
    def test_header_lines(self, line, label):
        """Test bold and 'For the X' style headers."""
        result = parse_ingredient_line(line)
        assert result.is_header
        assert result.name == label
        assert result.amount.is_empty
        assert result.unit == ""


class TestAlternatives:
    """Tests for 'or' alternatives."""

    def test_english_alternative(self):
        """Test '1 cup milk or 250 ml oat milk'."""
        result = parse_ingredient_line("1 cup milk or 250 ml oat milk")
        assert (result.name, result.amount.display, result.unit) == ("milk", "1", "cup")
        assert result.alternative is not None
        assert result.alternative.name == "oat milk"
        assert result.alternative.amount.display == "250"
        assert result.alternative.unit == "ml"

    def test_spanish_alternative(self):
        """Test the Spanish 'o' connector."""
        result = parse_ingredient_line("100 g mantequilla o 80 ml aceite")
        assert result.name == "mantequilla"
        assert result.alternative.name == "aceite"

    def test_range_is_not_an_alternative(self):
        """Test that '2 or 3 eggs' is not split into alternatives."""
        result = parse_ingredient_line("2 or 3 eggs")
        assert result.alternative is None

    def test_or_without_quantity(self):
        """Test that 'or' followed by text stays in the name."""
        result = parse_ingredient_line("1 tbsp butter or margarine")
        assert result.alternative is None
        assert result.name == "butter or margarine"


class TestParser:
    """Tests for IngredientParser with injected tables."""

    def test_custom_tables(self):
        """Test parsing with an extra locale's units."""
        parser = IngredientParser(UnitTables().extended(aliases={"tasse": "cup"}))
        result = parser.parse("2 tasse farine")
        assert (result.unit, result.name) == ("tasse", "farine")

        default = parse_ingredient_line("2 tasse farine")
        assert default.unit == ""

    def test_parse_lines_skips_empty(self, sample_ingredient_lines):
        """Test parsing several lines."""
        results = parse_ingredient_lines(sample_ingredient_lines + ["", "  "])
        assert len(results) == len(sample_ingredient_lines)
        assert results[0].is_header
        assert results[1].name == "flour"

    def test_to_dict(self):
        """Test the serialized form."""
        data = parse_ingredient_line("100 g flour (⅔ cup)").to_dict()
        assert data == {
            "name": "flour",
            "amount": "100",
            "unit": "g",
            "isHeader": False,
            "amount2": "2/3",
            "unit2": "cup",
        }
