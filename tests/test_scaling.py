"""Unit tests for serving scaling."""

import pytest

from recipekit.normalize.quantity import parse_quantity
from recipekit.plan.scaling import ServingScale, household_portions, scale_amount, scale_quantity


class TestScaleAmount:
    """Tests for scale_amount."""

    @pytest.mark.parametrize(
        "amount,multiplier,expected",
        [
            ("1/2 cup", 3, "1½ cup"),
            ("200 g", 2, "400 g"),
            ("200g", 1.5, "300g"),
            ("1.5 kg", 2, "3 kg"),
            ("2", 0.5, "1"),
            ("3 eggs", 0.5, "1½ eggs"),
            ("1 1/2 cups", 2, "3 cups"),
        ],
    )
    def test_scales_leading_amount(self, amount, multiplier, expected):
        """Test that the leading number is scaled and the rest kept."""
        assert scale_amount(amount, multiplier) == expected

    def test_ranges(self):
        """Test that both ends of a range are scaled."""
        assert scale_amount("2-3 cloves", 2) == "4-6 cloves"
        assert scale_amount("1 – 1 1/2 cups", 2) == "2 – 3 cups"

    @pytest.mark.parametrize("amount", ["1 1/2 cups", "⅔", "to taste", "2-3"])
    def test_multiplier_one_is_identity(self, amount):
        """Test that a multiplier of 1 returns the input unchanged."""
        assert scale_amount(amount, 1) == amount

    def test_zero_multiplier_is_noop(self):
        """Test that nothing is scaled to zero."""
        assert scale_amount("200 g", 0) == "200 g"

    def test_zero_target_portions_is_noop(self):
        """Test that target portions of 0 return the input."""
        assert scale_amount("200 g", 2, target_portions=0) == "200 g"

    def test_non_finite_multiplier_is_noop(self):
        """Test that inf and nan multipliers are ignored."""
        assert scale_amount("200 g", float("inf")) == "200 g"
        assert scale_amount("200 g", float("nan")) == "200 g"

    def test_non_numeric_amount(self):
        """Test that text amounts pass through."""
        assert scale_amount("to taste", 2) == "to taste"
        assert scale_amount("a pinch", 3) == "a pinch"
        assert scale_amount("", 2) == ""

    def test_scale_quantity(self):
        """Test the Quantity counterpart."""
        assert scale_quantity(parse_quantity("1/2"), 3).display == "1½"
        original = parse_quantity("1/2")
        assert scale_quantity(original, 1) is original


class TestServingScale:
    """Tests for ServingScale and household portions."""

    def test_household_portions(self):
        """Test that a child counts as half a portion."""
        assert household_portions(2, 1) == 2.5
        assert household_portions(2) == 2
        assert household_portions(-1, -2) == 0

    def test_multiplier(self):
        """Test the target/original ratio."""
        assert ServingScale(target_portions=6, original_portions=4).multiplier == 1.5

    def test_for_household(self):
        """Test building a scale from adults and children."""
        scale = ServingScale.for_household(adults=2, children=2, original_portions=4)
        assert scale.multiplier == pytest.approx(0.75)
        assert scale.scale("2 eggs") == "1½ eggs"

    def test_unknown_original_portions(self):
        """Test that a recipe without portions is not scaled."""
        scale = ServingScale(target_portions=4, original_portions=0)
        assert scale.multiplier == 1.0
        assert scale.scale("200 g") == "200 g"

    def test_zero_target(self):
        """Test that a zero target leaves amounts unchanged."""
        scale = ServingScale(target_portions=0, original_portions=4)
        assert scale.scale("200 g") == "200 g"

    def test_scale_quantity(self):
        """Test Quantity scaling through the serving scale."""
        scale = ServingScale(target_portions=8, original_portions=4)
        assert scale.scale_quantity(parse_quantity("150")).display == "300"
