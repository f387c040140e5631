"""Structured ingredient and instruction records produced by the parser."""

from dataclasses import dataclass, field, replace
from typing import Any

from recipekit.normalize.quantity import Quantity, normalize_amount, parse_quantity


@dataclass(frozen=True)
class AlternativeIngredient:
    """A substitute ingredient offered as an "or" choice."""

    name: str
    amount: Quantity = field(default_factory=Quantity.empty)
    unit: str = ""
    amount2: Quantity | None = None
    unit2: str | None = None


@dataclass(frozen=True)
class ParsedIngredient:
    """One ingredient line (or section header) of a recipe."""

    name: str
    amount: Quantity = field(default_factory=Quantity.empty)
    unit: str = ""
    amount2: Quantity | None = None
    unit2: str | None = None
    is_header: bool = False
    alternative: AlternativeIngredient | None = None

    @classmethod
    def header(cls, label: str) -> "ParsedIngredient":
        return cls(name=label, is_header=True)

    @property
    def is_empty(self) -> bool:
        """True when nothing usable was extracted."""
        return not self.name.strip()

    @property
    def has_variant(self) -> bool:
        return self.amount2 is not None and not self.amount2.is_empty

    def with_variant(self, amount2: str | Quantity | None, unit2: str | None) -> "ParsedIngredient":
        """Copy with the variant-2 slots replaced (the only user-editable fields)."""
        if isinstance(amount2, str):
            amount2 = parse_quantity(normalize_amount(amount2))
        return replace(self, amount2=amount2, unit2=unit2)

    def select(self, variant: int = 1, use_alternative: bool = False) -> tuple[str, Quantity, str]:
        """
        Pick the name, amount and unit to use for a variant/alternative choice.

        Variant 2 falls back to the primary amount when no second amount exists.
        """
        source: ParsedIngredient | AlternativeIngredient = self
        if use_alternative and self.alternative and self.alternative.name:
            source = self.alternative

        if variant == 2 and source.amount2 is not None and not source.amount2.is_empty:
            return source.name, source.amount2, source.unit2 or source.unit
        return source.name, source.amount, source.unit

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "name": self.name,
            "amount": self.amount.display,
            "unit": self.unit,
            "isHeader": self.is_header,
        }
        if self.amount2 is not None:
            data["amount2"] = self.amount2.display
            data["unit2"] = self.unit2 or ""
        if self.alternative is not None:
            alt = self.alternative
            data["alternative"] = {"name": alt.name, "amount": alt.amount.display, "unit": alt.unit}
            if alt.amount2 is not None:
                data["alternative"]["amount2"] = alt.amount2.display
                data["alternative"]["unit2"] = alt.unit2 or ""
        return data


@dataclass(frozen=True)
class Instruction:
    """A recipe step; ``ingredient_indices`` point into the recipe's ingredient list."""

    text: str
    ingredient_indices: tuple[int, ...] = ()
    is_header: bool = False


@dataclass(frozen=True)
class RawIngredientItem:
    """Already-extracted ingredient text, flagged when the source marked it a subheader."""

    text: str
    is_subheader: bool = False


@dataclass
class ParsedIngredientList:
    """Parsed ingredients of one recipe plus its variant labels, if any."""

    ingredients: list[ParsedIngredient] = field(default_factory=list)
    variant_1_label: str | None = None
    variant_2_label: str | None = None

    @property
    def has_variants(self) -> bool:
        return self.variant_1_label is not None and self.variant_2_label is not None
