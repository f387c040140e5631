"""Scaling and shopping list aggregation."""

from recipekit.plan.scaling import (
    ServingScale,
    household_portions,
    scale_amount,
    scale_quantity,
)
from recipekit.plan.shopping_list import (
    CATEGORY_ORDER,
    AggregatedItem,
    PlannedRecipe,
    QuantityCombiner,
    ShoppingListAggregator,
    ShoppingQuantity,
    aggregate_shopping_list,
    categorize_ingredient,
    combine_quantities,
)

__all__ = [
    "CATEGORY_ORDER",
    "AggregatedItem",
    "PlannedRecipe",
    "QuantityCombiner",
    "ServingScale",
    "ShoppingListAggregator",
    "ShoppingQuantity",
    "aggregate_shopping_list",
    "categorize_ingredient",
    "combine_quantities",
    "household_portions",
    "scale_amount",
    "scale_quantity",
]
