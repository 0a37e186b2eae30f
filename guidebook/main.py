# guidebook/main.py
"""
GuideBook API application.

``create_app`` builds the FastAPI application around an explicit ``Database``
handle; the module-level ``app`` is what uvicorn serves.
"""

from contextlib import asynccontextmanager
import logging
from typing import AsyncGenerator, Optional

from fastapi import APIRouter, FastAPI

from .core.config import Settings, is_running_tests, settings as default_settings
from .core.constants import API_DESCRIPTION, API_TITLE, API_VERSION, BRAND_NAME
from .database import Database
from .errors import register_error_handlers
from .middleware.prometheus_middleware import PrometheusMiddleware
from .routes import health
from .routes.v1 import auth as auth_v1, bookings as bookings_v1, guides as guides_v1

# Configure logging
logging.basicConfig(
    level=default_settings.log_level,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)

logger = logging.getLogger(__name__)


def create_app(
    app_settings: Optional[Settings] = None, database: Optional[Database] = None
) -> FastAPI:
    """
    Build the application.

    Args:
        app_settings: Settings to use (defaults to the environment-loaded ones)
        database: Pre-built Database handle; tests pass one bound to their engine
    """
    config = app_settings or default_settings
    db_handle = database or Database(config.database_url, config=config)

    @asynccontextmanager
    async def app_lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
        """Handle application startup/shutdown."""
        logger.info(f"{BRAND_NAME} API starting up (environment={config.environment})")
        if is_running_tests():
            logger.info("Running under pytest (test mode active)")

        db_handle.init()
        if config.auto_create_schema:
            db_handle.create_all()
        app.state.database = db_handle

        yield

        logger.info(f"{BRAND_NAME} API shutting down...")
        db_handle.dispose()

    app = FastAPI(
        title=API_TITLE,
        description=API_DESCRIPTION,
        version=API_VERSION,
        lifespan=app_lifespan,
    )
    # Available before startup too, for TestClient use without a context manager
    app.state.database = db_handle
    app.state.settings = config

    register_error_handlers(app)
    app.add_middleware(PrometheusMiddleware)

    api_v1 = APIRouter(prefix="/api/v1")
    api_v1.include_router(auth_v1.router, prefix="/auth")
    api_v1.include_router(guides_v1.router, prefix="/guides")
    api_v1.include_router(bookings_v1.router, prefix="/bookings")

    app.include_router(health.router)
    app.include_router(api_v1)
    return app


app = create_app()
