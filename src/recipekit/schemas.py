"""Request and response schemas for the HTTP API."""

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

from recipekit.ingest.schemas import AlternativeIngredient, ParsedIngredient
from recipekit.normalize.quantity import Quantity, normalize_amount, parse_quantity
from recipekit.plan.shopping_list import AggregatedItem, PlannedRecipe

UnitSystemName = Literal["metric", "american"]


def _quantity(text: str | None) -> Quantity:
    return parse_quantity(normalize_amount(text or ""))


def _optional_quantity(text: str | None) -> Quantity | None:
    return _quantity(text) if text else None


# =============================================================================
# Ingredients
# =============================================================================


class AlternativeModel(BaseModel):
    """Substitute ingredient."""

    name: str
    amount: str = ""
    unit: str = ""
    amount2: str | None = None
    unit2: str | None = None


class IngredientModel(BaseModel):
    """Structured ingredient as exchanged with clients."""

    model_config = ConfigDict(populate_by_name=True)

    name: str
    amount: str = ""
    unit: str = ""
    amount2: str | None = None
    unit2: str | None = None
    is_header: bool = Field(default=False, alias="isHeader")
    alternative: AlternativeModel | None = None

    @classmethod
    def from_parsed(cls, ingredient: ParsedIngredient) -> "IngredientModel":
        alt = ingredient.alternative
        return cls(
            name=ingredient.name,
            amount=ingredient.amount.display,
            unit=ingredient.unit,
            amount2=ingredient.amount2.display if ingredient.amount2 is not None else None,
            unit2=ingredient.unit2,
            is_header=ingredient.is_header,
            alternative=(
                AlternativeModel(
                    name=alt.name,
                    amount=alt.amount.display,
                    unit=alt.unit,
                    amount2=alt.amount2.display if alt.amount2 is not None else None,
                    unit2=alt.unit2,
                )
                if alt is not None
                else None
            ),
        )

    def to_parsed(self) -> ParsedIngredient:
        alternative = None
        if self.alternative is not None:
            alternative = AlternativeIngredient(
                name=self.alternative.name,
                amount=_quantity(self.alternative.amount),
                unit=self.alternative.unit,
                amount2=_optional_quantity(self.alternative.amount2),
                unit2=self.alternative.unit2,
            )
        return ParsedIngredient(
            name=self.name,
            amount=_quantity(self.amount),
            unit=self.unit,
            amount2=_optional_quantity(self.amount2),
            unit2=self.unit2,
            is_header=self.is_header,
            alternative=alternative,
        )


class RawItemModel(BaseModel):
    """Extracted ingredient text, possibly a subheader."""

    text: str
    is_subheader: bool = False


class ParseIngredientsRequest(BaseModel):
    """Raw ingredient lines (or items with subheader flags) to parse."""

    lines: list[str] = Field(default_factory=list)
    items: list[RawItemModel] = Field(default_factory=list)


class ParseIngredientsResponse(BaseModel):
    ingredients: list[IngredientModel]
    variant_1_label: str | None = None
    variant_2_label: str | None = None


class ScaleRequest(BaseModel):
    """Amounts to scale, by explicit multiplier or by portion counts."""

    amounts: list[str]
    multiplier: float | None = Field(default=None, ge=0)
    target_portions: float | None = Field(default=None, ge=0)
    original_portions: float | None = Field(default=None, gt=0)


class ScaleResponse(BaseModel):
    amounts: list[str]
    multiplier: float


class ConvertRequest(BaseModel):
    """
    Unit conversion request.

    With ``to_unit`` the amount is converted to that unit; without it the
    amount is re-expressed for ``system`` (or the configured default).
    """

    amount: str
    from_unit: str
    to_unit: str | None = None
    ingredient_name: str = ""
    system: UnitSystemName | None = None


class ConvertResponse(BaseModel):
    success: bool
    amount: str
    unit: str
    approximate: bool = False


# =============================================================================
# Steps
# =============================================================================


class EnrichStepRequest(BaseModel):
    """Instruction text plus the recipe's ingredients and display state."""

    step: str
    ingredients: list[IngredientModel]
    multiplier: float = Field(default=1.0, ge=0)
    use_variant: bool = False
    system: UnitSystemName | None = None
    ingredient_indices: list[int] = Field(default_factory=list)


class EnrichedPartModel(BaseModel):
    type: Literal["text", "ingredient"]
    content: str
    formatted_quantity: str | None = None
    ingredient_index: int | None = None


class EnrichStepResponse(BaseModel):
    parts: list[EnrichedPartModel]


# =============================================================================
# Shopping
# =============================================================================


class CombineRequest(BaseModel):
    existing: str = ""
    incoming: str = ""
    ingredient_name: str = ""


class CombineResponse(BaseModel):
    quantity: str


class PlannedRecipeModel(BaseModel):
    """A planned recipe with the user's serving and variant choices."""

    plan_id: str
    recipe_id: str
    title: str = ""
    ingredients: list[IngredientModel] = Field(default_factory=list)
    servings_multiplier: float = Field(default=1.0, ge=0)
    selected_variant: Literal[1, 2] = 1
    alternative_selections: dict[int, bool] = Field(default_factory=dict)

    def to_planned(self) -> PlannedRecipe:
        return PlannedRecipe(
            plan_id=self.plan_id,
            recipe_id=self.recipe_id,
            title=self.title,
            ingredients=[ingredient.to_parsed() for ingredient in self.ingredients],
            servings_multiplier=self.servings_multiplier,
            selected_variant=self.selected_variant,
            alternative_selections=dict(self.alternative_selections),
        )


class ShoppingItemModel(BaseModel):
    """Shopping list line."""

    name: str
    quantity: str = ""
    category: str = "Other"
    source_recipes: list[str] = Field(default_factory=list)
    contributions: list[tuple[str, int]] = Field(default_factory=list)

    @classmethod
    def from_item(cls, item: AggregatedItem) -> "ShoppingItemModel":
        return cls(
            name=item.name,
            quantity=item.quantity,
            category=item.category,
            source_recipes=sorted(item.source_recipes),
            contributions=sorted(item.contributions),
        )

    def to_item(self) -> AggregatedItem:
        return AggregatedItem(
            name=self.name,
            quantity=self.quantity,
            category=self.category,
            source_recipes=set(self.source_recipes),
            contributions=set(self.contributions),
        )


class AggregateRequest(BaseModel):
    """Plans to aggregate, optionally merged into an existing list."""

    plans: list[PlannedRecipeModel]
    existing: list[ShoppingItemModel] = Field(default_factory=list)


class AggregateResponse(BaseModel):
    items: list[ShoppingItemModel]
    total: int
