"""Pytest configuration and shared fixtures."""

import pytest

from recipekit.ingest.schemas import (
    AlternativeIngredient,
    ParsedIngredient,
    RawIngredientItem,
)
from recipekit.normalize.quantity import Quantity, parse_quantity
from recipekit.plan.shopping_list import PlannedRecipe

# =============================================================================
# Pytest Configuration
# =============================================================================


def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line("markers", "slow: marks tests as slow running")


def ingredient(name: str, amount: str = "", unit: str = "", **kwargs) -> ParsedIngredient:
    """Build a ParsedIngredient from display strings."""
    return ParsedIngredient(
        name=name,
        amount=parse_quantity(amount) if amount else Quantity.empty(),
        unit=unit,
        **kwargs,
    )


# =============================================================================
# Ingredient Fixtures
# =============================================================================


@pytest.fixture
def sample_ingredient_lines():
    """Raw ingredient lines as extracted from a recipe page."""
    return [
        "For the batter:",
        "100 g flour (⅔ cup)",
        "1½ cups milk",
        "2 large eggs",
        "3 cucharadas de azúcar",
        "salt to taste",
    ]


@pytest.fixture
def variant_items():
    """Two container blocks with an identical section header in each."""
    return [
        RawIngredientItem("MOLDE 20 cm:", is_subheader=True),
        RawIngredientItem("Base", is_subheader=True),
        RawIngredientItem("200 g harina"),
        RawIngredientItem("2 huevos"),
        RawIngredientItem("MOLDE 26 cm:", is_subheader=True),
        RawIngredientItem("Base", is_subheader=True),
        RawIngredientItem("350 g harina"),
        RawIngredientItem("3 huevos"),
        RawIngredientItem("1 pizca sal"),
    ]


@pytest.fixture
def pancake_ingredients():
    """Parsed ingredients of a pancake recipe."""
    return [
        ParsedIngredient.header("Batter"),
        ingredient("flour", "200", "g", amount2=parse_quantity("300"), unit2="g"),
        ingredient(
            "milk",
            "1",
            "cup",
            alternative=AlternativeIngredient(
                name="oat milk", amount=parse_quantity("250"), unit="ml"
            ),
        ),
        ingredient("salt"),
    ]


# =============================================================================
# Plan Fixtures
# =============================================================================


@pytest.fixture
def pancake_plan(pancake_ingredients):
    """Pancakes planned once."""
    return PlannedRecipe(
        plan_id="plan-1",
        recipe_id="recipe-pancakes",
        title="Pancakes",
        ingredients=pancake_ingredients,
    )


@pytest.fixture
def second_pancake_plan(pancake_ingredients):
    """The same recipe planned on another day."""
    return PlannedRecipe(
        plan_id="plan-2",
        recipe_id="recipe-pancakes",
        title="Pancakes",
        ingredients=pancake_ingredients,
    )


@pytest.fixture
def make_ingredient():
    """Factory for ParsedIngredient records built from display strings."""
    return ingredient
