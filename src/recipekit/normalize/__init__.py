"""Quantity model, accent folding and unit conversion."""

from recipekit.normalize.quantity import (
    Quantity,
    format_quantity,
    normalize_amount,
    parse_quantity,
    split_leading_quantity,
)
from recipekit.normalize.text import FoldedText, fold_text, name_key
from recipekit.normalize.units import (
    COMMON_UNITS,
    ConversionEngine,
    ConversionResult,
    DensityEntry,
    UnitTables,
    convert_ingredient,
    get_default_engine,
    get_ingredient_density,
    is_volume_unit,
    is_weight_unit,
    normalize_unit,
)

__all__ = [
    "COMMON_UNITS",
    "ConversionEngine",
    "ConversionResult",
    "DensityEntry",
    "FoldedText",
    "Quantity",
    "UnitTables",
    "convert_ingredient",
    "fold_text",
    "format_quantity",
    "get_default_engine",
    "get_ingredient_density",
    "is_volume_unit",
    "is_weight_unit",
    "name_key",
    "normalize_amount",
    "normalize_unit",
    "parse_quantity",
    "split_leading_quantity",
]
