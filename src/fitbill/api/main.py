"""
FastAPI application factory.

Creates and configures the main application instance.
"""

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from fitbill import __version__
from fitbill.api.middleware import ErrorHandlerMiddleware, LoggingMiddleware
from fitbill.api.middleware.error_handler import setup_exception_handlers
from fitbill.api.routes import health_router, invoices_router
from fitbill.config import configure_logging, get_logger, get_settings

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """
    Application lifespan handler.

    Configures logging, applies migrations and opens the connection pool
    on startup; closes the pool on shutdown.
    """
    settings = get_settings()
    configure_logging(settings)

    logger.info(
        "application_starting",
        host=settings.api.host,
        port=settings.api.port,
        debug=settings.api.debug,
    )

    try:
        from fitbill.infrastructure.storage.sqlite import connection
        from fitbill.infrastructure.storage.sqlite.migrations import migrator

        await migrator.run_migrations()
        logger.info("database_initialized")

        pool = await connection.get_pool()
        logger.info("connection_pool_ready", **pool.stats())

    except Exception as e:
        logger.error("database_init_failed", error=str(e))
        raise

    from fitbill.application.services import get_email_dispatcher

    logger.info("email_provider_selected", provider=get_email_dispatcher().active_kind.value)
    logger.info("application_started")

    yield

    logger.info("application_stopping")

    try:
        await connection.close_pool()

    except Exception as e:
        logger.warning("connection_pool_close_failed", error=str(e))

    logger.info("application_stopped")


def create_app() -> FastAPI:
    """
    Create and configure FastAPI application.

    Returns:
        Configured FastAPI instance
    """
    settings = get_settings()

    app = FastAPI(
        title=settings.app_name,
        description="Gym invoice numbering, PDF rendering and email delivery",
        version=__version__,
        docs_url="/docs" if settings.api.debug else None,
        redoc_url="/redoc" if settings.api.debug else None,
        lifespan=lifespan,
    )

    app.add_middleware(ErrorHandlerMiddleware)
    app.add_middleware(LoggingMiddleware)

    if settings.api.cors_origins:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=settings.api.cors_origins,
            allow_credentials=True,
            allow_methods=["*"],
            allow_headers=["*"],
        )

    setup_exception_handlers(app)

    app.include_router(health_router)
    app.include_router(invoices_router)

    # Root health endpoint (for container health checks)
    @app.get("/health")
    async def root_health() -> dict[str, str]:
        return {"status": "healthy", "version": __version__}

    return app


app = create_app()


def run() -> None:
    """Console entry point: serve the API with uvicorn."""
    import uvicorn

    configure_logging()
    settings = get_settings()
    uvicorn.run(
        "fitbill.api.main:app",
        host=settings.api.host,
        port=settings.api.port,
        reload=settings.api.debug,
    )


if __name__ == "__main__":
    run()
