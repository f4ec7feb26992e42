"""
FastAPI application entry point for the Arcade Market API.

``create_app`` builds the app with middleware, CORS, logging and all API
routers. The database is chosen once at startup and kept on ``app.state``.
"""

import logging
import os
from contextlib import asynccontextmanager
from logging.handlers import TimedRotatingFileHandler
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware

from arcade_market import __version__
from arcade_market.config import Settings
from arcade_market.core.errors import register_exception_handlers
from arcade_market.core.limiter import limiter
from arcade_market.data import Database, create_database
from arcade_market.routers import admin, auth, notifications, orders, products, shops
from arcade_market.services.auth_service import auth_service
from arcade_market.services.notification_service import NotificationService

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

logger = logging.getLogger(__name__)


def setup_logging(settings: Settings) -> None:
    logging.basicConfig(level=settings.LOG_LEVEL.upper(), format=LOG_FORMAT)
    if settings.ENABLE_FILE_LOGGING:
        os.makedirs(settings.LOG_DIR, exist_ok=True)
        handler = TimedRotatingFileHandler(
            os.path.join(settings.LOG_DIR, "arcade_market.log"), when="midnight", backupCount=14
        )
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        logging.getLogger().addHandler(handler)


def create_app(
    settings: Optional[Settings] = None,
    database: Optional[Database] = None,
    notifier: Optional[NotificationService] = None,
) -> FastAPI:
    """
    Build the application. ``database`` and ``notifier`` default to the ones
    described by ``settings``; tests pass their own.
    """
    settings = settings or Settings()
    setup_logging(settings)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        # Startup
        db = database or create_database(settings)
        logger.info(f"Initializing {db.backend} database...")
        await db.initialize()
        await auth_service.ensure_default_admin(db, settings)
        app.state.database = db
        logger.info("Database initialized successfully")

        yield

        # Shutdown
        logger.info("Shutting down application...")
        await db.close()

    app = FastAPI(
        title="Arcade Market API",
        description="Marketplace API for the shops of a physical arcade",
        version=__version__,
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.notifier = notifier or NotificationService()

    limiter.enabled = settings.RATE_LIMIT_ENABLED
    app.state.limiter = limiter
    register_exception_handlers(app)

    # Add CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Add GZip compression
    app.add_middleware(GZipMiddleware, minimum_size=1000)

    # Register routers
    prefix = settings.API_PREFIX
    app.include_router(auth.router, prefix=f"{prefix}/auth", tags=["auth"])
    app.include_router(shops.router, prefix=f"{prefix}/shops", tags=["shops"])
    app.include_router(products.router, prefix=f"{prefix}/products", tags=["products"])
    app.include_router(orders.router, prefix=f"{prefix}/orders", tags=["orders"])
    app.include_router(admin.router, prefix=f"{prefix}/admin", tags=["admin"])
    app.include_router(notifications.router, prefix=f"{prefix}/notifications", tags=["notifications"])

    async def health(request: Request):
        """Health check endpoint."""
        return {"status": "healthy", "database": request.app.state.database.backend}

    app.add_api_route("/health", health, methods=["GET"])
    app.add_api_route(f"{prefix}/health", health, methods=["GET"])

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "arcade_market.main:app",
        host="0.0.0.0",
        port=8000,
        reload=True,
        log_level="info",
    )
