"""Ingestion of raw recipe text: ingredient lines, variant blocks, instructions."""

from recipekit.ingest.instructions import normalize_instructions
from recipekit.ingest.parser import IngredientParser, parse_ingredient_line, parse_ingredient_lines
from recipekit.ingest.schemas import (
    AlternativeIngredient,
    Instruction,
    ParsedIngredient,
    ParsedIngredientList,
    RawIngredientItem,
)
from recipekit.ingest.translation import (
    BestEffortTranslator,
    TranslationError,
    detect_language,
    detect_recipe_language,
    translate_with_dictionary,
)
from recipekit.ingest.variants import (
    detect_variant_blocks,
    merge_variant_blocks,
    parse_ingredient_items,
)

__all__ = [
    "AlternativeIngredient",
    "BestEffortTranslator",
    "IngredientParser",
    "Instruction",
    "ParsedIngredient",
    "ParsedIngredientList",
    "RawIngredientItem",
    "TranslationError",
    "detect_language",
    "detect_recipe_language",
    "detect_variant_blocks",
    "merge_variant_blocks",
    "normalize_instructions",
    "parse_ingredient_items",
    "parse_ingredient_line",
    "parse_ingredient_lines",
    "translate_with_dictionary",
]
