"""Shopping list generation from planned recipes."""

import math
import re
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field
from fractions import Fraction
from functools import lru_cache

from recipekit.config import get_settings
from recipekit.ingest.schemas import ParsedIngredient
from recipekit.logging_config import LoggingContext, get_logger
from recipekit.normalize.quantity import Quantity, parse_quantity, split_leading_quantity
from recipekit.normalize.text import fold_text, name_key
from recipekit.normalize.units import ConversionEngine, get_default_engine
from recipekit.plan.scaling import scale_quantity

logger = get_logger(__name__)


# =============================================================================
# Categories
# =============================================================================

CATEGORY_ORDER: tuple[str, ...] = (
    "Produce",
    "Dairy",
    "Meat & Seafood",
    "Bakery",
    "Frozen",
    "Beverages",
    "Pantry",
    "Other",
)

# Checked in order, first match wins. Keywords are accent-free.
CATEGORY_KEYWORDS: tuple[tuple[str, tuple[str, ...]], ...] = (
    (
        "Produce",
        (
            "lettuce", "tomato", "onion", "garlic", "pepper", "carrot", "celery",
            "potato", "broccoli", "spinach", "kale", "cucumber", "zucchini", "squash",
            "mushroom", "avocado", "lemon", "lime", "orange", "apple", "banana",
            "berry", "berries", "fruit", "vegetable", "herb", "cilantro", "parsley",
            "basil", "mint", "thyme", "rosemary", "lechuga", "tomate", "cebolla",
            "ajo", "pimiento", "zanahoria", "apio", "patata", "papa", "brocoli",
            "espinaca", "pepino", "calabacin", "champinon", "aguacate", "limon",
            "naranja", "manzana", "platano", "fruta", "verdura", "hierba", "perejil",
            "albahaca", "menta", "romero",
        ),
    ),
    (
        "Dairy",
        (
            "milk", "cheese", "butter", "cream", "yogurt", "egg", "leche", "queso",
            "mantequilla", "nata", "crema", "yogur", "huevo",
        ),
    ),
    (
        "Meat & Seafood",
        (
            "chicken", "beef", "pork", "lamb", "turkey", "fish", "salmon", "shrimp",
            "bacon", "sausage", "meat", "steak", "pollo", "res", "cerdo", "cordero",
            "pavo", "pescado", "camaron", "gamba", "tocino", "salchicha", "carne",
            "bistec",
        ),
    ),
    ("Bakery", ("bread", "roll", "bun", "bagel", "tortilla", "pita", "croissant", "pan", "bollo")),
    ("Frozen", ("frozen", "ice cream", "congelado", "helado")),
    (
        "Beverages",
        (
            "juice", "soda", "water", "wine", "beer", "coffee", "tea", "zumo", "jugo",
            "refresco", "agua", "vino", "cerveza", "cafe", "te",
        ),
    ),
    (
        "Pantry",
        (
            "flour", "sugar", "salt", "oil", "vinegar", "sauce", "pasta", "rice",
            "bean", "can", "stock", "broth", "spice", "seasoning", "harina", "azucar",
            "sal", "aceite", "vinagre", "salsa", "arroz", "frijol", "alubia", "lata",
            "caldo", "especia", "condimento",
        ),
    ),
)

_CATEGORY_PATTERNS = [
    (category, re.compile(r"\b(?:" + "|".join(map(re.escape, words)) + r")(?:s|es)?\b"))
    for category, words in CATEGORY_KEYWORDS
]


def categorize_ingredient(name: str) -> str:
    """Assign a grocery category from English or Spanish keywords in ``name``."""
    folded = fold_text(name or "")
    for category, pattern in _CATEGORY_PATTERNS:
        if pattern.search(folded):
            return category
    return "Other"


# =============================================================================
# Quantity Merging
# =============================================================================

GroupKey = tuple[str, str]

# Unit sizes within each measuring system, as exact multiples of the system's
# smallest unit. Amounts of different systems are never converted here.
MEASURE_SYSTEMS: dict[GroupKey, dict[str, int]] = {
    ("weight", "metric"): {"kg": 1000, "g": 1},
    ("weight", "us"): {"lb": 16, "oz": 1},
    ("volume", "metric"): {"l": 1000, "ml": 1},
    ("volume", "us"): {"cup": 48, "fl oz": 6, "tbsp": 3, "tsp": 1},
}

# Units used for output, largest first
DISPLAY_UNITS: dict[GroupKey, tuple[str, ...]] = {
    ("weight", "metric"): ("kg", "g"),
    ("weight", "us"): ("lb", "oz"),
    ("volume", "metric"): ("l", "ml"),
    ("volume", "us"): ("cup", "tbsp", "tsp"),
}

# Output order of term groups
_FAMILY_RANK = {"weight": 0, "volume": 1, "count": 2, "unknown": 2, "text": 3}

# "⅓" is held as 1/3, "1.25" as 5/4
_MAX_DENOMINATOR = 10**6


def _exact(value: float) -> Fraction:
    return Fraction(value).limit_denominator(_MAX_DENOMINATOR)


def _shown(value: Fraction) -> Quantity:
    return Quantity.from_value(float(value))


def _shows_exactly(value: Fraction) -> bool:
    """True when the formatted amount reads back as ``value``."""
    parsed = parse_quantity(_shown(value).display).value
    return parsed is not None and _exact(parsed) == value


def _bucket_unit(key: GroupKey, total: Fraction) -> str:
    family, system = key
    if system == "metric":
        large, small = DISPLAY_UNITS[key]
        return large if total >= 1000 else small
    if family == "weight":
        return "lb" if total >= 16 else "oz"
    # cups from 0.1 cup, tablespoons from 1 tbsp
    if total >= Fraction(48, 10):
        return "cup"
    return "tbsp" if total >= 3 else "tsp"


def _measure_terms(key: GroupKey, total: Fraction) -> list[tuple[Fraction, str]]:
    """Express an exact total of one measuring system in display units."""
    sizes = MEASURE_SYSTEMS[key]
    units = DISPLAY_UNITS[key]
    bucket = _bucket_unit(key, total)
    if _shows_exactly(total / sizes[bucket]):
        return [(total / sizes[bucket], bucket)]

    if key[1] == "metric":
        for unit in units:
            if _shows_exactly(total / sizes[unit]):
                return [(total / sizes[unit], unit)]
        return [(total, units[-1])]

    # "2 cup + 3 tbsp" rather than "2.19 cup"
    terms: list[tuple[Fraction, str]] = []
    remaining = total
    for unit in units[units.index(bucket) :]:
        amount = remaining / sizes[unit]
        if unit == units[-1] or (amount >= 1 and _shows_exactly(amount)):
            terms.append((amount, unit))
            break
        whole = math.floor(amount)
        if whole:
            terms.append((Fraction(whole), unit))
            remaining -= whole * sizes[unit]
    return terms


@dataclass(frozen=True)
class ShoppingQuantity:
    """
    Exact shopping totals, one entry per measurement group.

    Weights and volumes are held as fractions of their measuring system's
    smallest unit (g, ml, oz, tsp), so a total never depends on the order in
    which amounts were added. Count groups keep their unit label and text
    groups their wording. Formatting only happens in ``terms``.
    """

    # (group key, exact total or None for text, unit label or text)
    groups: tuple[tuple[GroupKey, Fraction | None, str], ...] = ()

    def __bool__(self) -> bool:
        return bool(self.groups)

    def __add__(self, other: "ShoppingQuantity") -> "ShoppingQuantity":
        merged = {key: (total, label) for key, total, label in self.groups}
        for key, total, label in other.groups:
            if key not in merged:
                merged[key] = (total, label)
                continue
            current, current_label = merged[key]
            if total is None or current is None:
                merged[key] = (None, min(current_label, label))
            else:
                # "cloves" over "clove"; ties broken alphabetically
                preferred = max(current_label, label, key=lambda u: (len(u), u))
                merged[key] = (current + total, preferred)

        groups = sorted(
            ((key, total, label) for key, (total, label) in merged.items()),
            key=lambda group: (_FAMILY_RANK[group[0][0]], group[0][1]),
        )
        return ShoppingQuantity(tuple(groups))

    def terms(self) -> list[tuple[Quantity, str]]:
        """(amount, unit) display terms in a fixed order."""
        rendered: list[tuple[Quantity, str]] = []
        for key, total, label in self.groups:
            if total is None:
                rendered.append((Quantity(value=None, display=label), ""))
            elif key in MEASURE_SYSTEMS:
                rendered.extend(
                    (_shown(amount), unit) for amount, unit in _measure_terms(key, total)
                )
            else:
                rendered.append((_shown(total), label))
        return rendered


def _split_terms(text: str, separator: str) -> list[str]:
    token = separator.strip()
    if not token:
        return [text.strip()] if text.strip() else []
    parts = re.split(rf"\s*{re.escape(token)}\s*", text)
    return [part.strip() for part in parts if part.strip()]


class QuantityCombiner:
    """
    Adds shopping quantities such as "200 g" + "1 kg".

    Both sides are read as sets of terms joined by the separator, so
    "2 cloves + 500 g" can absorb another "1 clove". Amounts of one measuring
    system are summed exactly; metric and US customary amounts stay side by
    side, as do different count units and free text. Rendered totals read
    back as the same exact total, so chained combines agree in any grouping.
    """

    def __init__(self, engine: ConversionEngine | None = None, separator: str | None = None):
        self.engine = engine or get_default_engine()
        self.separator = separator if separator is not None else get_settings().merge_separator

    def term(self, quantity: Quantity, unit: str = "") -> ShoppingQuantity:
        """Exact total of a single amount in ``unit``."""
        if quantity.value is None:
            text = f"{quantity.display} {unit}".strip()
            if not text:
                return ShoppingQuantity()
            return ShoppingQuantity(((("text", name_key(text)), None, text),))

        value = _exact(quantity.value)
        family = self.engine.unit_family(unit)
        canonical = self.engine.normalize_unit(unit)
        if family in ("volume", "weight"):
            for key, sizes in MEASURE_SYSTEMS.items():
                if key[0] == family and canonical in sizes:
                    return ShoppingQuantity(((key, value * sizes[canonical], ""),))
            return ShoppingQuantity((((family, canonical), value, canonical),))

        if family == "unknown" and canonical.endswith("s") and len(canonical) > 1:
            canonical = canonical[:-1]
        return ShoppingQuantity((((family, canonical), value, unit.strip()),))

    def parse(self, text: str) -> ShoppingQuantity:
        """Read a quantity such as "2 cloves + 500 g" into exact totals."""
        total = ShoppingQuantity()
        for part in _split_terms(text or "", self.separator):
            quantity, _, rest = split_leading_quantity(part)
            if quantity.value is None:
                total += self.term(Quantity(value=None, display=part))
            else:
                total += self.term(quantity, rest.strip())
        return total

    def render(self, quantity: ShoppingQuantity) -> str:
        return self.separator.join(
            f"{amount.display} {unit}".strip() for amount, unit in quantity.terms()
        )

    def combine(self, existing: str, incoming: str, ingredient_name: str = "") -> str:
        """
        Combine two quantity strings for the same ingredient.

        Returns:
            The merged quantity text, e.g. "500 g" or "1 bulb + 2 cloves".
        """
        existing = (existing or "").strip()
        incoming = (incoming or "").strip()
        if not existing:
            return incoming
        if not incoming:
            return existing

        total = self.parse(existing) + self.parse(incoming)
        if len(total.groups) > 1:
            logger.debug(
                f"Keeping {len(total.groups)} separate quantities for {ingredient_name!r}"
            )
        return self.render(total)


@lru_cache(maxsize=1)
def get_default_combiner() -> QuantityCombiner:
    """Combiner built from the default unit tables and settings."""
    return QuantityCombiner()


def combine_quantities(existing: str, incoming: str, ingredient_name: str = "") -> str:
    """
    Combine two shopping quantities with the default unit tables.

    Examples:
        >>> combine_quantities("200 g", "300 g", "sugar")
        '500 g'
        >>> combine_quantities("200 g", "1 kg", "flour")
        '1.2 kg'
    """
    return get_default_combiner().combine(existing, incoming, ingredient_name)


# =============================================================================
# Aggregation
# =============================================================================


@dataclass
class PlannedRecipe:
    """A recipe placed in the meal plan, with the user's per-plan choices."""

    plan_id: str
    recipe_id: str
    title: str
    ingredients: list[ParsedIngredient] = field(default_factory=list)
    servings_multiplier: float = 1.0
    selected_variant: int = 1
    # ingredient index -> use the alternative ingredient
    alternative_selections: dict[int, bool] = field(default_factory=dict)


@dataclass
class AggregatedItem:
    """A single shopping list line."""

    name: str
    quantity: str = ""
    category: str = "Other"
    source_recipes: set[str] = field(default_factory=set)
    # (plan_id, ingredient index) pairs already counted in ``amount``
    contributions: set[tuple[str, int]] = field(default_factory=set)
    # Exact totals behind ``quantity``; None for lines known only as text
    amount: ShoppingQuantity | None = None

    @property
    def key(self) -> str:
        return " ".join(self.name.lower().split())

    @property
    def display(self) -> str:
        return f"{self.quantity} {self.name}".strip()

    @property
    def terms(self) -> list[tuple[Quantity, str]]:
        """Structured (amount, unit) terms of the total."""
        return self.amount.terms() if self.amount is not None else []


def _sort_key(item: AggregatedItem, order: Sequence[str]) -> tuple[int, str]:
    rank = order.index(item.category) if item.category in order else len(order)
    return rank, item.name.lower()


class ShoppingListAggregator:
    """
    Builds a shopping list from planned recipes.

    Quantities for the same ingredient are merged with QuantityCombiner.
    Each (plan_id, ingredient index) pair is counted at most once, so
    regenerating a list from an overlapping set of plans never doubles an
    amount, while the same recipe planned twice does.
    """

    def __init__(
        self,
        combiner: QuantityCombiner | None = None,
        category_order: Sequence[str] = CATEGORY_ORDER,
    ):
        self.combiner = combiner or QuantityCombiner()
        self.category_order = tuple(category_order)

    def aggregate(self, plans: Iterable[PlannedRecipe]) -> list[AggregatedItem]:
        """
        Aggregate the ingredients of all ``plans``.

        Args:
            plans: Planned recipes, typically every plan in a date range.

        Returns:
            Shopping list items sorted by category order, then name.
        """
        items: dict[str, AggregatedItem] = {}
        plan_count = 0

        for plan in plans:
            plan_count += 1
            with LoggingContext(recipe_id=plan.recipe_id):
                self._add_plan(items, plan)

        logger.info(f"Aggregated {len(items)} shopping items from {plan_count} planned recipes")
        return self.sorted(items.values())

    def merge_into_existing(
        self,
        existing: Iterable[AggregatedItem],
        incoming: Iterable[AggregatedItem],
    ) -> list[AggregatedItem]:
        """Merge freshly aggregated items into an existing shopping list."""
        items: dict[str, AggregatedItem] = {}
        for item in existing:
            self._merge_item(items, item)
        for item in incoming:
            self._merge_item(items, item)
        return self.sorted(items.values())

    def _add_plan(self, items: dict[str, AggregatedItem], plan: PlannedRecipe) -> None:
        source = plan.title or plan.recipe_id
        for index, ingredient in enumerate(plan.ingredients):
            if ingredient.is_header:
                continue

            name, amount, unit = ingredient.select(
                plan.selected_variant,
                plan.alternative_selections.get(index, False),
            )
            if not name.strip():
                continue

            amount = scale_quantity(amount, plan.servings_multiplier)
            incoming = AggregatedItem(
                name=name.strip(),
                amount=self.combiner.term(amount, unit) if not amount.is_empty else None,
                category=categorize_ingredient(name),
                source_recipes={source},
                contributions={(plan.plan_id, index)},
            )
            self._merge_item(items, incoming)

    def sorted(self, items: Iterable[AggregatedItem]) -> list[AggregatedItem]:
        return sorted(items, key=lambda item: _sort_key(item, self.category_order))

    def _merge_item(self, items: dict[str, AggregatedItem], incoming: AggregatedItem) -> None:
        amount = incoming.amount
        if amount is None:
            amount = self.combiner.parse(incoming.quantity)

        current = items.get(incoming.key)
        if current is None:
            items[incoming.key] = AggregatedItem(
                name=incoming.name,
                quantity=self.combiner.render(amount),
                category=incoming.category,
                source_recipes=set(incoming.source_recipes),
                contributions=set(incoming.contributions),
                amount=amount,
            )
            return

        current.source_recipes |= incoming.source_recipes
        if incoming.contributions and incoming.contributions <= current.contributions:
            logger.debug(f"Skipping already counted contribution for {incoming.name!r}")
            return

        current.amount = (current.amount or ShoppingQuantity()) + amount
        current.quantity = self.combiner.render(current.amount)
        current.contributions |= incoming.contributions


def aggregate_shopping_list(plans: Iterable[PlannedRecipe]) -> list[AggregatedItem]:
    """Aggregate plans with the default combiner and category order."""
    return ShoppingListAggregator().aggregate(plans)

