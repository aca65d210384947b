"""
Application factory: builds the FastAPI app, its lifespan, middleware and routes.
"""

from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.staticfiles import StaticFiles
from starlette.exceptions import HTTPException as StarletteHTTPException
from sqlalchemy.exc import TimeoutError as PoolCheckoutTimeout
import logging
from contextlib import asynccontextmanager
from pathlib import Path
import anyio
from typing import Optional

from adapters.storage_adapter import install_placeholder
from api.routes import products, preparations, auth, search, health
from app.config import Settings, get_settings
from app.context import AppContext
from app.exceptions import KitchenGuideError
from domain.models import init_database

from api.middleware import (
    RequestLoggingMiddleware,
    validation_exception_handler,
    http_exception_handler,
    kitchen_guide_exception_handler,
    pool_timeout_exception_handler,
    general_exception_handler,
)

_logger = logging.getLogger("kitchen.app")


def _seed_admin(context: AppContext):
    with context.session_factory() as db:
        context.auth.seed_default_admin(db)


def _build_lifespan(context: AppContext):
    settings = context.settings

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """
        Lifespan context manager for application startup and shutdown.
        Creates the upload directory, then initializes the database with retries.
        """
        _logger.info(f"Starting {settings.app_name} in {settings.environment.value} mode")

        if not settings.s3_enabled:
            Path(settings.upload_dir).mkdir(parents=True, exist_ok=True)

        for attempt in range(1, settings.db_init_attempts + 1):
            try:
                # Run blocking init in a thread to avoid blocking the event loop
                await anyio.to_thread.run_sync(init_database, context.engine)
                _logger.info("Database initialization succeeded")
                break
            except Exception as exc:
                _logger.warning(
                    "Database init attempt %d/%d failed: %s",
                    attempt,
                    settings.db_init_attempts,
                    exc,
                )
                if attempt < settings.db_init_attempts:
                    await anyio.sleep(settings.db_init_delay_sec)
                else:
                    _logger.error(
                        "Database initialization failed after %d attempts", attempt
                    )
                    raise

        await anyio.to_thread.run_sync(_seed_admin, context)

        try:
            yield
        finally:
            _logger.info(f"Shutting down {settings.app_name}")
            context.close()

    return lifespan


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """Build the application around one AppContext"""
    settings = settings or get_settings()
    context = AppContext.from_settings(settings)

    app = FastAPI(
        title=settings.app_name,
        version=settings.app_version,
        lifespan=_build_lifespan(context),
        debug=settings.debug,
        openapi_url="/openapi.json" if not settings.is_production() else None,
        docs_url="/docs" if not settings.is_production() else None,
        redoc_url=None,
    )
    app.state.context = context

    # Add request logging middleware
    app.add_middleware(RequestLoggingMiddleware)

    # Register exception handlers
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(KitchenGuideError, kitchen_guide_exception_handler)
    app.add_exception_handler(PoolCheckoutTimeout, pool_timeout_exception_handler)
    app.add_exception_handler(Exception, general_exception_handler)

    app.include_router(products.router)
    app.include_router(preparations.router)
    app.include_router(auth.router)
    app.include_router(search.router)
    app.include_router(health.router)

    Path(settings.static_dir).mkdir(parents=True, exist_ok=True)
    install_placeholder(settings.static_dir, settings.placeholder_picture_url)
    app.mount("/static", StaticFiles(directory=settings.static_dir), name="static")

    return app

