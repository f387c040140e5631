"""API routes for ingredient parsing, scaling, unit conversion and step annotation."""

from fastapi import APIRouter

from recipekit.annotate.mentions import enrich_step_with_ingredients
from recipekit.config import get_settings
from recipekit.ingest.schemas import RawIngredientItem
from recipekit.ingest.variants import parse_ingredient_items
from recipekit.logging_config import get_logger
from recipekit.normalize.units import get_default_engine
from recipekit.plan.scaling import ServingScale, scale_amount
from recipekit.schemas import (
    ConvertRequest,
    ConvertResponse,
    EnrichedPartModel,
    EnrichStepRequest,
    EnrichStepResponse,
    IngredientModel,
    ParseIngredientsRequest,
    ParseIngredientsResponse,
    ScaleRequest,
    ScaleResponse,
)

logger = get_logger(__name__)

router = APIRouter(prefix="/api/v1", tags=["ingredients"])


# =============================================================================
# Ingredient Endpoints
# =============================================================================


@router.post("/ingredients/parse", response_model=ParseIngredientsResponse)
async def parse_ingredients(request: ParseIngredientsRequest) -> ParseIngredientsResponse:
    """
    Parse raw ingredient lines into structured ingredients.

    ``items`` carries subheader flags so two-container recipes can be merged
    into a single list with variant labels; plain ``lines`` are parsed as-is.
    """
    items = [RawIngredientItem(text=i.text, is_subheader=i.is_subheader) for i in request.items]
    items.extend(RawIngredientItem(text=line) for line in request.lines)

    parsed = parse_ingredient_items(items)
    logger.info(f"Parsed {len(parsed.ingredients)} ingredients from {len(items)} items")

    return ParseIngredientsResponse(
        ingredients=[IngredientModel.from_parsed(i) for i in parsed.ingredients],
        variant_1_label=parsed.variant_1_label,
        variant_2_label=parsed.variant_2_label,
    )


@router.post("/ingredients/scale", response_model=ScaleResponse)
async def scale_ingredients(request: ScaleRequest) -> ScaleResponse:
    """Scale amounts by a multiplier or by target/original portion counts."""
    target = request.target_portions
    if request.multiplier is not None:
        multiplier = request.multiplier
    elif target is not None and request.original_portions is not None:
        multiplier = ServingScale(target, request.original_portions).multiplier
    else:
        multiplier = 1.0

    return ScaleResponse(
        amounts=[scale_amount(amount, multiplier, target) for amount in request.amounts],
        multiplier=multiplier,
    )


@router.post("/units/convert", response_model=ConvertResponse)
async def convert_units(request: ConvertRequest) -> ConvertResponse:
    """
    Convert an ingredient amount.

    A failed conversion is reported with ``success=false``, never as an error.
    """
    engine = get_default_engine()
    if request.to_unit:
        result = engine.convert_ingredient(
            request.amount, request.from_unit, request.to_unit, request.ingredient_name
        )
    else:
        system = request.system or get_settings().default_unit_system
        result = engine.to_display_system(
            request.amount, request.from_unit, request.ingredient_name, system
        )

    return ConvertResponse(
        success=result.success,
        amount=result.amount,
        unit=result.unit,
        approximate=result.approximate,
    )


# =============================================================================
# Step Endpoints
# =============================================================================


@router.post("/steps/enrich", response_model=EnrichStepResponse)
async def enrich_step(request: EnrichStepRequest) -> EnrichStepResponse:
    """Annotate an instruction with ingredient mentions and display quantities."""
    engine = get_default_engine()
    ingredients = [i.to_parsed() for i in request.ingredients]

    def scale(amount: str) -> str:
        return scale_amount(amount, request.multiplier)

    def convert(amount: str, unit: str, name: str) -> tuple[str, str]:
        result = engine.to_display_system(amount, unit, name, request.system)
        if not result.success:
            return amount, unit
        return result.amount, result.unit

    parts = enrich_step_with_ingredients(
        request.step,
        ingredients,
        scale_fn=scale,
        use_variant=request.use_variant,
        convert_fn=convert if request.system else None,
        ingredient_indices=request.ingredient_indices,
    )

    return EnrichStepResponse(
        parts=[
            EnrichedPartModel(
                type=part.type,
                content=part.content,
                formatted_quantity=part.formatted_quantity,
                ingredient_index=part.ingredient_index,
            )
            for part in parts
        ]
    )
