"""Unit normalization and conversion utilities."""

from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Literal

from recipekit.logging_config import get_logger
from recipekit.normalize.quantity import Quantity, format_quantity, parse_quantity
from recipekit.normalize.text import fold_text

logger = get_logger(__name__)

UnitSystem = Literal["metric", "american"]

# Grams-per-cup is expressed against the US cup
ML_PER_CUP = 236.588


# =============================================================================
# Unit Conversion Tables
# =============================================================================

# Spelling/locale variants -> canonical unit token
UNIT_ALIASES: dict[str, str] = {
    # Volume
    "cup": "cup",
    "cups": "cup",
    "c": "cup",
    "taza": "cup",
    "tazas": "cup",
    "tbsp": "tbsp",
    "tbsps": "tbsp",
    "tbs": "tbsp",
    "tablespoon": "tbsp",
    "tablespoons": "tbsp",
    "cucharada": "tbsp",
    "cucharadas": "tbsp",
    "cda": "tbsp",
    "cdas": "tbsp",
    "tsp": "tsp",
    "tsps": "tsp",
    "teaspoon": "tsp",
    "teaspoons": "tsp",
    "cucharadita": "tsp",
    "cucharaditas": "tsp",
    "cdta": "tsp",
    "cdtas": "tsp",
    "ml": "ml",
    "milliliter": "ml",
    "milliliters": "ml",
    "millilitre": "ml",
    "millilitres": "ml",
    "mililitro": "ml",
    "mililitros": "ml",
    "l": "l",
    "liter": "l",
    "liters": "l",
    "litre": "l",
    "litres": "l",
    "litro": "l",
    "litros": "l",
    "fl oz": "fl oz",
    "fluid ounce": "fl oz",
    "fluid ounces": "fl oz",
    "onza liquida": "fl oz",
    # Weight
    "g": "g",
    "gr": "g",
    "gram": "g",
    "grams": "g",
    "gramo": "g",
    "gramos": "g",
    "kg": "kg",
    "kilogram": "kg",
    "kilograms": "kg",
    "kilo": "kg",
    "kilos": "kg",
    "oz": "oz",
    "ounce": "oz",
    "ounces": "oz",
    "onza": "oz",
    "onzas": "oz",
    "lb": "lb",
    "lbs": "lb",
    "pound": "lb",
    "pounds": "lb",
    "libra": "lb",
    "libras": "lb",
    # Count / informal
    "pinch": "pinch",
    "pinches": "pinch",
    "pizca": "pinch",
    "pizcas": "pinch",
    "dash": "dash",
    "dashes": "dash",
    "clove": "clove",
    "cloves": "clove",
    "diente": "clove",
    "dientes": "clove",
    "piece": "piece",
    "pieces": "piece",
    "pieza": "piece",
    "piezas": "piece",
    "trozo": "piece",
    "trozos": "piece",
    "unidad": "piece",
    "unidades": "piece",
    "slice": "slice",
    "slices": "slice",
    "rebanada": "slice",
    "rebanadas": "slice",
    "rodaja": "slice",
    "rodajas": "slice",
    "can": "can",
    "cans": "can",
    "lata": "can",
    "latas": "can",
    "bote": "can",
    "botes": "can",
    "package": "package",
    "packages": "package",
    "pkg": "package",
    "paquete": "package",
    "paquetes": "package",
    "sobre": "package",
    "sobres": "package",
}

# Volume conversions (base unit: ml)
VOLUME_ML: dict[str, float] = {
    "ml": 1.0,
    "l": 1000.0,
    "cup": ML_PER_CUP,
    "tbsp": 14.787,
    "tsp": 4.929,
    "fl oz": 29.574,
}

# Weight conversions (base unit: g)
WEIGHT_G: dict[str, float] = {
    "g": 1.0,
    "kg": 1000.0,
    "oz": 28.3495,
    "lb": 453.592,
}

METRIC_UNITS = frozenset({"ml", "l", "g", "kg"})


@dataclass(frozen=True)
class DensityEntry:
    """Grams per US cup for ingredients whose name contains ``ingredient_name_pattern``."""

    ingredient_name_pattern: str
    grams_per_cup: float


DENSITIES: tuple[DensityEntry, ...] = tuple(
    DensityEntry(pattern, grams)
    for pattern, grams in (
        # Flours
        ("flour", 125),
        ("harina", 125),
        ("all-purpose flour", 125),
        ("harina de trigo", 125),
        ("bread flour", 127),
        ("harina de fuerza", 127),
        ("whole wheat flour", 120),
        ("harina integral", 120),
        ("almond flour", 96),
        ("harina de almendra", 96),
        ("coconut flour", 112),
        ("harina de coco", 112),
        # Sugars
        ("sugar", 200),
        ("azucar", 200),
        ("white sugar", 200),
        ("azucar blanco", 200),
        ("brown sugar", 220),
        ("azucar moreno", 220),
        ("powdered sugar", 120),
        ("icing sugar", 120),
        ("azucar glas", 120),
        ("azucar glass", 120),
        ("honey", 340),
        ("miel", 340),
        ("maple syrup", 322),
        ("sirope de arce", 322),
        # Fats
        ("butter", 227),
        ("mantequilla", 227),
        ("oil", 218),
        ("aceite", 218),
        ("olive oil", 216),
        ("aceite de oliva", 216),
        # Dairy
        ("milk", 245),
        ("leche", 245),
        ("buttermilk", 245),
        ("suero de leche", 245),
        ("cream", 238),
        ("nata", 238),
        ("crema", 238),
        ("sour cream", 242),
        ("crema agria", 242),
        ("yogurt", 245),
        ("yogur", 245),
        ("greek yogurt", 284),
        ("yogur griego", 284),
        ("cream cheese", 232),
        ("queso crema", 232),
        # Liquids
        ("water", 237),
        ("agua", 237),
        # Grains & starches
        ("rice", 185),
        ("arroz", 185),
        ("oats", 80),
        ("avena", 80),
        ("cornstarch", 128),
        ("maicena", 128),
        ("almidon de maiz", 128),
        # Nuts & seeds
        ("almonds", 143),
        ("almendras", 143),
        ("walnuts", 120),
        ("nueces", 120),
        ("pecans", 109),
        ("peanuts", 146),
        ("cacahuetes", 146),
        ("mani", 146),
        ("cashews", 137),
        ("anacardos", 137),
        # Chocolate & cocoa
        ("cocoa powder", 86),
        ("cacao en polvo", 86),
        ("chocolate chips", 170),
        ("chispas de chocolate", 170),
        # Other
        ("salt", 288),
        ("sal", 288),
        ("baking powder", 230),
        ("polvo de hornear", 230),
        ("levadura quimica", 230),
        ("baking soda", 288),
        ("bicarbonato", 288),
        ("yeast", 128),
        ("levadura", 128),
    )
)

# Water-like fallback: 1 g per ml
DEFAULT_GRAMS_PER_CUP = 237.0

# Fallback for dry goods missing from the density table
DRY_GOODS_KEYWORDS: tuple[str, ...] = (
    "powder",
    "polvo",
    "meal",
    "semolina",
    "semola",
    "polenta",
    "cornmeal",
    "breadcrumbs",
    "pan rallado",
    "couscous",
    "cuscus",
    "quinoa",
    "grain",
    "seeds",
    "semillas",
    "starch",
    "almidon",
    "cereal",
)
DRY_GOODS_GRAMS_PER_CUP = 150.0

# Units offered by unit pickers
COMMON_UNITS: dict[str, tuple[str, ...]] = {
    "volume": ("cup", "tbsp", "tsp", "ml", "l"),
    "weight": ("g", "kg", "oz", "lb"),
}


@dataclass(frozen=True)
class UnitTables:
    """Immutable lookup tables injected into the conversion engine and parser."""

    aliases: Mapping[str, str] = field(default_factory=lambda: MappingProxyType(UNIT_ALIASES))
    volume_ml: Mapping[str, float] = field(default_factory=lambda: MappingProxyType(VOLUME_ML))
    weight_g: Mapping[str, float] = field(default_factory=lambda: MappingProxyType(WEIGHT_G))
    densities: tuple[DensityEntry, ...] = DENSITIES
    default_grams_per_cup: float = DEFAULT_GRAMS_PER_CUP
    dry_goods_keywords: tuple[str, ...] = DRY_GOODS_KEYWORDS
    dry_goods_grams_per_cup: float = DRY_GOODS_GRAMS_PER_CUP

    def extended(
        self,
        aliases: Mapping[str, str] | None = None,
        densities: Iterable[DensityEntry] = (),
    ) -> "UnitTables":
        """Return a copy with extra aliases/densities (e.g. another locale)."""
        merged = dict(self.aliases)
        merged.update({fold_text(k): v for k, v in (aliases or {}).items()})
        return UnitTables(
            aliases=MappingProxyType(merged),
            volume_ml=self.volume_ml,
            weight_g=self.weight_g,
            densities=self.densities + tuple(densities),
            default_grams_per_cup=self.default_grams_per_cup,
            dry_goods_keywords=self.dry_goods_keywords,
            dry_goods_grams_per_cup=self.dry_goods_grams_per_cup,
        )

    @property
    def unit_tokens(self) -> list[str]:
        """All recognised unit spellings, longest first (for regex alternation)."""
        return sorted(self.aliases, key=len, reverse=True)


@dataclass(frozen=True)
class ConversionResult:
    """Outcome of a unit conversion."""

    success: bool
    amount: str
    unit: str
    approximate: bool = False


class ConversionEngine:
    """Converts amounts between metric and imperial cooking units."""

    def __init__(self, tables: UnitTables | None = None):
        self.tables = tables or UnitTables()
        self._canonical_units = frozenset(self.tables.aliases.values())
        # Longest patterns first so "olive oil" wins over "oil"
        self._density_patterns = [
            (fold_text(entry.ingredient_name_pattern), entry.grams_per_cup)
            for entry in sorted(
                self.tables.densities,
                key=lambda e: len(e.ingredient_name_pattern),
                reverse=True,
            )
        ]
        self._dry_keywords = [fold_text(k) for k in self.tables.dry_goods_keywords]

    # -------------------------------------------------------------------------
    # Classification
    # -------------------------------------------------------------------------

    def normalize_unit(self, unit: str | None) -> str:
        """
        Canonicalize a unit spelling.

        Examples:
            >>> engine.normalize_unit("Cucharadas")
            'tbsp'
            >>> engine.normalize_unit("tbsp.")
            'tbsp'
        """
        if not unit:
            return ""
        cleaned = " ".join(unit.lower().strip().rstrip(".").split())
        if cleaned in self.tables.aliases:
            return self.tables.aliases[cleaned]
        folded = fold_text(cleaned)
        return self.tables.aliases.get(folded, cleaned)

    def is_volume_unit(self, unit: str | None) -> bool:
        return self.normalize_unit(unit) in self.tables.volume_ml

    def is_weight_unit(self, unit: str | None) -> bool:
        return self.normalize_unit(unit) in self.tables.weight_g

    def unit_family(self, unit: str | None) -> str:
        """Return "volume", "weight", "count" or "unknown"."""
        canonical = self.normalize_unit(unit)
        if canonical in self.tables.volume_ml:
            return "volume"
        if canonical in self.tables.weight_g:
            return "weight"
        if not canonical or canonical in self._canonical_units:
            return "count"
        return "unknown"

    def unit_factor(self, unit: str | None) -> float | None:
        """Size of one ``unit`` in its family's base unit (ml or g)."""
        canonical = self.normalize_unit(unit)
        if canonical in self.tables.volume_ml:
            return self.tables.volume_ml[canonical]
        return self.tables.weight_g.get(canonical)

    # -------------------------------------------------------------------------
    # Density
    # -------------------------------------------------------------------------

    def density_for(self, ingredient_name: str | None) -> tuple[float, bool]:
        """
        Look up grams-per-cup for an ingredient.

        Returns:
            Tuple of (grams_per_cup, matched) where ``matched`` is False when a
            default density was used.
        """
        name = fold_text(ingredient_name or "").strip()
        if name:
            for pattern, grams in self._density_patterns:
                if pattern in name:
                    return grams, True
            for keyword in self._dry_keywords:
                if keyword in name:
                    logger.debug(f"Using dry-goods density for {ingredient_name!r}")
                    return self.tables.dry_goods_grams_per_cup, False

        logger.debug(f"No density for {ingredient_name!r}, using default")
        return self.tables.default_grams_per_cup, False

    # -------------------------------------------------------------------------
    # Conversion
    # -------------------------------------------------------------------------

    def convert_value(
        self,
        value: float,
        from_unit: str,
        to_unit: str,
        ingredient_name: str = "",
    ) -> float | None:
        """Convert a magnitude, returning None when either unit is unusable."""
        source = self.normalize_unit(from_unit)
        target = self.normalize_unit(to_unit)

        if source == target and source:
            return value

        volume = self.tables.volume_ml
        weight = self.tables.weight_g

        if source in volume and target in volume:
            return value * volume[source] / volume[target]
        if source in weight and target in weight:
            return value * weight[source] / weight[target]

        if source in volume and target in weight:
            grams_per_cup, _ = self.density_for(ingredient_name)
            cups = value * volume[source] / ML_PER_CUP
            return cups * grams_per_cup / weight[target]
        if source in weight and target in volume:
            grams_per_cup, _ = self.density_for(ingredient_name)
            cups = value * weight[source] / grams_per_cup
            return cups * ML_PER_CUP / volume[target]

        return None

    def convert_ingredient(
        self,
        amount: str | Quantity,
        from_unit: str,
        to_unit: str,
        ingredient_name: str = "",
    ) -> ConversionResult:
        """
        Convert an amount of an ingredient from one unit to another.

        Same-family conversions use fixed ratios. Weight <-> volume uses the
        ingredient's density, falling back to a default density (the result is
        then flagged ``approximate``); a missing density never fails the
        conversion.
        """
        quantity = amount if isinstance(amount, Quantity) else parse_quantity(amount)
        if quantity.value is None:
            logger.debug(f"Cannot convert non-numeric amount {quantity.display!r}")
            return ConversionResult(success=False, amount="", unit=to_unit)

        source_family = self.unit_family(from_unit)
        if source_family not in ("volume", "weight") and self.normalize_unit(
            from_unit
        ) != self.normalize_unit(to_unit):
            logger.debug(f"Unrecognised source unit {from_unit!r}")
            return ConversionResult(success=False, amount="", unit=to_unit)

        converted = self.convert_value(quantity.value, from_unit, to_unit, ingredient_name)
        if converted is None:
            logger.debug(f"Unrecognised target unit {to_unit!r}")
            return ConversionResult(success=False, amount="", unit=to_unit)

        cross_family = source_family != self.unit_family(to_unit)
        return ConversionResult(
            success=True,
            amount=format_quantity(converted),
            unit=to_unit,
            approximate=cross_family,
        )

    # -------------------------------------------------------------------------
    # Display bucketing
    # -------------------------------------------------------------------------

    def bucket_volume_american(self, ml: float) -> tuple[float, str]:
        """Express ml in cups, escalating to tbsp/tsp for awkwardly small amounts."""
        volume = self.tables.volume_ml
        cups = ml / volume["cup"]
        if cups >= 0.1:
            return cups, "cup"
        tbsp = ml / volume["tbsp"]
        if tbsp >= 1:
            return tbsp, "tbsp"
        return ml / volume["tsp"], "tsp"

    def bucket_weight_metric(self, grams: float) -> tuple[float, str]:
        """Express grams in kilograms once they reach 1000 g."""
        if grams >= 1000:
            return grams / self.tables.weight_g["kg"], "kg"
        return grams, "g"

    def to_display_system(
        self,
        amount: str | Quantity,
        unit: str,
        ingredient_name: str = "",
        system: UnitSystem = "metric",
    ) -> ConversionResult:
        """
        Re-express an ingredient amount for the American or metric display mode.

        American mode turns metric weights and volumes into cups/tbsp/tsp.
        Metric mode turns cups/tbsp/tsp into grams (kilograms from 1000 g),
        ounces/pounds into grams and fluid ounces into ml. Amounts already in
        the requested system are returned unchanged with ``success=True``;
        count units and non-numeric amounts come back with ``success=False``.
        """
        quantity = amount if isinstance(amount, Quantity) else parse_quantity(amount)
        canonical = self.normalize_unit(unit)
        family = self.unit_family(unit)

        if quantity.value is None or family not in ("volume", "weight"):
            return ConversionResult(success=False, amount=quantity.display, unit=unit)

        value = quantity.value
        if system == "american":
            if canonical not in METRIC_UNITS:
                return ConversionResult(success=True, amount=quantity.display, unit=unit)
            if family == "weight":
                grams = value * self.tables.weight_g[canonical]
                grams_per_cup, _ = self.density_for(ingredient_name)
                ml = grams / grams_per_cup * ML_PER_CUP
                approximate = True
            else:
                ml = value * self.tables.volume_ml[canonical]
                approximate = False
            converted, target = self.bucket_volume_american(ml)
            return ConversionResult(
                success=True,
                amount=format_quantity(converted),
                unit=target,
                approximate=approximate,
            )

        # Metric
        if canonical in METRIC_UNITS:
            return ConversionResult(success=True, amount=quantity.display, unit=unit)
        if canonical == "fl oz":
            ml = value * self.tables.volume_ml[canonical]
            return ConversionResult(success=True, amount=format_quantity(ml), unit="ml")
        if family == "weight":
            grams = value * self.tables.weight_g[canonical]
            approximate = False
        else:
            grams_per_cup, _ = self.density_for(ingredient_name)
            grams = value * self.tables.volume_ml[canonical] / ML_PER_CUP * grams_per_cup
            approximate = True
        converted, target = self.bucket_weight_metric(grams)
        return ConversionResult(
            success=True,
            amount=format_quantity(converted),
            unit=target,
            approximate=approximate,
        )

    def suggested_conversion_unit(self, unit: str) -> str:
        """Default target unit for a converter widget."""
        if self.is_weight_unit(unit):
            return "ml"
        return "g"


# =============================================================================
# Module-level defaults
# =============================================================================

_default_engine = ConversionEngine()


def get_default_engine() -> ConversionEngine:
    """Engine built from the default tables."""
    return _default_engine


def normalize_unit(unit: str | None) -> str:
    return _default_engine.normalize_unit(unit)


def is_volume_unit(unit: str | None) -> bool:
    return _default_engine.is_volume_unit(unit)


def is_weight_unit(unit: str | None) -> bool:
    return _default_engine.is_weight_unit(unit)


def get_ingredient_density(ingredient_name: str) -> float:
    """Grams per cup for ``ingredient_name`` using the default tables."""
    grams, _ = _default_engine.density_for(ingredient_name)
    return grams


def convert_ingredient(
    amount: str | Quantity,
    from_unit: str,
    to_unit: str,
    ingredient_name: str = "",
) -> ConversionResult:
    return _default_engine.convert_ingredient(amount, from_unit, to_unit, ingredient_name)
