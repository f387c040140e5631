"""recipekit - ingredient interpretation and scaling engine for recipe apps."""

__version__ = "0.1.0"

from recipekit.annotate import EnrichedPart, enrich_step_with_ingredients
from recipekit.ingest import ParsedIngredient, parse_ingredient_line
from recipekit.normalize import (
    Quantity,
    convert_ingredient,
    format_quantity,
    normalize_unit,
    parse_quantity,
)
from recipekit.plan import AggregatedItem, combine_quantities, scale_amount

__all__ = [
    "AggregatedItem",
    "EnrichedPart",
    "ParsedIngredient",
    "Quantity",
    "combine_quantities",
    "convert_ingredient",
    "enrich_step_with_ingredients",
    "format_quantity",
    "normalize_unit",
    "parse_ingredient_line",
    "parse_quantity",
    "scale_amount",
]
