"""FastAPI application entry point."""

import uuid
from collections.abc import AsyncIterator, Awaitable, Callable
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, Response
from fastapi.middleware.cors import CORSMiddleware

from recipekit import __version__
from recipekit.config import get_settings
from recipekit.logging_config import LoggingContext, configure_logging, get_logger
from recipekit.routers import ingredients_router, shopping_router

settings = get_settings()

# Configure logging on module load
configure_logging(settings.log_level)
logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Application lifespan handler for startup and shutdown events."""
    logger.info(
        f"Starting recipekit API (environment={settings.environment}, "
        f"unit_system={settings.default_unit_system})"
    )
    yield
    logger.info("Shutting down recipekit API")


app = FastAPI(
    title="recipekit API",
    description="Ingredient parsing, scaling, unit conversion and shopping lists",
    version=__version__,
    lifespan=lifespan,
)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.middleware("http")
async def request_context(
    request: Request,
    call_next: Callable[[Request], Awaitable[Response]],
) -> Response:
    """Tag every log line of a request with its request id."""
    request_id = request.headers.get("X-Request-ID") or uuid.uuid4().hex[:12]
    with LoggingContext(request_id=request_id):
        response = await call_next(request)
    response.headers["X-Request-ID"] = request_id
    return response


# Include routers
app.include_router(ingredients_router)
app.include_router(shopping_router)


@app.get("/health")
async def health_check() -> dict:
    """Basic health check endpoint."""
    return {"status": "ok", "service": "recipekit-api"}


@app.get("/")
async def root() -> dict:
    """Root endpoint with API information."""
    return {
        "name": "recipekit API",
        "version": __version__,
        "docs": "/docs",
        "health": "/health",
    }


def run() -> None:
    """Serve the API with uvicorn."""
    import uvicorn

    uvicorn.run(app, host=settings.api_host, port=settings.api_port, log_config=None)


if __name__ == "__main__":
    run()
