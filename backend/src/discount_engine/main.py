"""
FastAPI application entry point.

This is the main application that ties together all components:
- API routes for discount evaluation and batch processing
- Database lifecycle management
- Error handling and logging
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from discount_engine import __version__
from discount_engine.api.routes import debug, discounts, health
from discount_engine.api.schemas import ErrorResponse
from discount_engine.config import Settings, get_settings
from discount_engine.infrastructure.database import Database
from discount_engine.logging_config import configure_logging

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan manager.

    Handles startup and shutdown tasks:
    - Create the database and the orders table
    - Dispose of connections on shutdown
    """
    settings: Settings = app.state.settings

    logger.info(f"Starting discount engine v{__version__}")
    logger.info(f"Debug mode: {settings.debug}")

    database: Database | None = None
    app.state.database = None
    try:
        database = Database(settings.database_url, echo=settings.debug)
        await database.init_db()
        app.state.database = database
        logger.info("Database initialized")
    except Exception as e:
        logger.error(f"Database initialization failed: {e}")
        # Evaluation still works without a database; batch uploads return 503

    try:
        yield  # Application runs here
    finally:
        logger.info("Shutting down discount engine")
        app.state.database = None
        if database is not None:
            await database.close()


def create_app(settings: Settings | None = None) -> FastAPI:
    """
    Create and configure the FastAPI application.

    Args:
        settings: Overrides the cached environment settings

    Returns:
        Configured FastAPI instance ready to serve requests.
    """
    settings = settings or get_settings()
    configure_logging(settings.log_level)

    app = FastAPI(
        title="Discount Engine API",
        description=(
            "Retail discount rules engine.\n\n"
            "Scores each transaction against six pricing rules, averages "
            "the two best discounts and stores the resulting orders."
        ),
        version=__version__,
        lifespan=lifespan,
        responses={500: {"model": ErrorResponse, "description": "Unhandled server error"}},
        docs_url="/docs" if settings.debug else None,
        redoc_url="/redoc" if settings.debug else None,
    )
    app.state.settings = settings

    # Register routers
    app.include_router(health.router)
    app.include_router(discounts.router, prefix="/api/v1")

    # Debug router (only in debug mode)
    if settings.debug:
        app.include_router(debug.router, prefix="/api/v1")

    # Global exception handler
    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception):
        """Catch-all exception handler for unhandled errors."""
        logger.exception(f"Unhandled error: {exc}")

        # Don't expose internal errors in production
        if settings.debug:
            detail = str(exc)
        else:
            detail = "An internal error occurred"

        return JSONResponse(
            status_code=500,
            content=ErrorResponse(error="Internal Server Error", detail=detail).model_dump(),
        )

    return app


# Create the application instance
app = create_app()


# Development server entry point
if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "discount_engine.main:app",
        host="0.0.0.0",
        port=8000,
        reload=True,
    )
