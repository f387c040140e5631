"""API routes for shopping list generation."""

from fastapi import APIRouter

from recipekit.logging_config import get_logger
from recipekit.plan.shopping_list import ShoppingListAggregator, combine_quantities
from recipekit.schemas import (
    AggregateRequest,
    AggregateResponse,
    CombineRequest,
    CombineResponse,
    ShoppingItemModel,
)

logger = get_logger(__name__)

router = APIRouter(prefix="/api/v1/shopping", tags=["shopping"])


@router.post("/combine", response_model=CombineResponse)
async def combine(request: CombineRequest) -> CombineResponse:
    """Combine two quantities of the same ingredient."""
    return CombineResponse(
        quantity=combine_quantities(request.existing, request.incoming, request.ingredient_name)
    )


@router.post("/aggregate", response_model=AggregateResponse)
async def aggregate(request: AggregateRequest) -> AggregateResponse:
    """
    Build a shopping list from planned recipes.

    When ``existing`` is given the new items are merged into it; contributions
    already counted in the existing list are not added again.
    """
    aggregator = ShoppingListAggregator()
    items = aggregator.aggregate(plan.to_planned() for plan in request.plans)
    if request.existing:
        items = aggregator.merge_into_existing(
            (item.to_item() for item in request.existing),
            items,
        )

    logger.info(f"Shopping list has {len(items)} items for {len(request.plans)} plans")
    return AggregateResponse(
        items=[ShoppingItemModel.from_item(item) for item in items],
        total=len(items),
    )
