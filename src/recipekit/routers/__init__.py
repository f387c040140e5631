"""API routers for the recipekit application."""

from recipekit.routers.ingredients import router as ingredients_router
from recipekit.routers.shopping import router as shopping_router

__all__ = [
    "ingredients_router",
    "shopping_router",
]
