"""Main FastAPI application for the Token Pagination API."""

import logging
from contextlib import asynccontextmanager
from typing import Dict, Any

from fastapi import FastAPI

from .config import get_settings
from .db.connection import db_manager, get_db_pool
from .db.records import create_table
from .errors import register_exception_handlers
from .errors.problem_details import ServiceUnavailableError
from .routes import records_router
from .sample_data import populate_sample_data

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format=get_settings().log_format
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan events."""
    logger.info("Starting Token Pagination API")
    settings = get_settings()

    logging.getLogger().setLevel(getattr(logging, settings.log_level))

    try:
        await db_manager.initialize()
        logger.info("Database connection pool initialized")

        pool = await get_db_pool()
        async with pool.acquire() as conn:
            await conn.execute("SELECT 1")
        logger.info("Database connectivity verified")

        if settings.recreate_table_on_startup:
            await create_table()

        if settings.load_sample_data:
            await populate_sample_data(settings.sample_data_file)

    except Exception as e:
        logger.error(f"Failed to initialize database: {e}")
        raise

    yield

    logger.info("Shutting down Token Pagination API")
    try:
        await db_manager.close()
        logger.info("Database connections closed")
    except Exception as e:
        logger.error(f"Error during shutdown: {e}")


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    settings = get_settings()

    app = FastAPI(
        title=settings.app_name,
        description="Records API with continuation-token pagination",
        version="1.0.0",
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan
    )

    register_exception_handlers(app)

    app.include_router(records_router, prefix="/api/v1")

    @app.get("/health", tags=["Health"])
    async def health_check() -> Dict[str, Any]:
        """Health check endpoint with database connectivity test."""
        try:
            pool = await get_db_pool()
            async with pool.acquire() as conn:
                await conn.execute("SELECT 1")
        except Exception as e:
            logger.error(f"Health check failed: {e}")
            raise ServiceUnavailableError(
                detail="Database connection failed",
                database_error=str(e)
            )

        return {"status": "healthy"}

    return app


# Create the application instance
app = create_app()


if __name__ == "__main__":
    import uvicorn
    settings = get_settings()

    uvicorn.run(
        "token_pagination.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.debug,
        log_level=settings.log_level.lower()
    )
