"""
Application factory and setup functions.

This module builds the FastAPI application: body parsing and cross-origin
middleware, datastore initialisation on startup, the root and health
endpoints, the five feature routers under the API prefix, and the terminal
error handlers.

**Documentation References:**
- Entry Points: `ciudadano_digital/main.py` (ASGI) and `ciudadano_digital/server.py` (process)
- Middleware: See `ciudadano_digital/api/middleware/` and `ciudadano_digital/config/cors.py`
- Routes: See `ciudadano_digital/api/routes/`
- Configuration: See `ciudadano_digital/config/settings.py`
"""
from contextlib import asynccontextmanager
from functools import partial
from typing import Awaitable, Callable, Mapping, Optional

from fastapi import APIRouter, FastAPI

from ciudadano_digital import __version__
from ciudadano_digital.api.middleware.body_parser import BodyParserMiddleware
from ciudadano_digital.api.middleware.error_envelope import ErrorEnvelopeMiddleware
from ciudadano_digital.config import database
from ciudadano_digital.config.cors import setup_cors
from ciudadano_digital.config.sentry import capture_exception
from ciudadano_digital.config.settings import Settings
from ciudadano_digital.utils.errors import (
    AppError,
    app_error_handler,
    general_exception_handler,
)
from ciudadano_digital.utils.logger import get_logger

logger = get_logger(__name__)

DbInitializer = Callable[[], Awaitable[None]]


def create_lifespan(init_db: DbInitializer) -> Callable:
    """
    Create application lifespan context manager.

    Startup awaits `init_db` before the server accepts traffic. A failing
    initialisation is logged and reported but does not stop the server; the
    outcome is kept in `app.state.db_ready`.
    """
    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Application lifespan events."""
        logger.info("Starting application...")
        app.state.db_ready = False
        try:
            await init_db()
            app.state.db_ready = True
        except Exception as e:
            logger.error(
                "Database initialization failed, serving without datastore",
                error=str(e),
                error_type=type(e).__name__,
                exc_info=e,
            )
            capture_exception(e, tags={"phase": "startup"})
        logger.info("Application started", db_ready=app.state.db_ready)
        yield
        logger.info("Shutting down application...")
        database.dispose_database()

    return lifespan


def setup_middleware(app: FastAPI, settings: Settings) -> None:
    """
    Configure all application middleware.

    Middleware runs in reverse order of registration:
    1. CORS (last registered, first executed)
    2. Body parsing
    3. Error envelope (first registered, runs right before routing)

    The error envelope sits inside CORS so error responses carry the
    cross-origin headers.
    """
    app.add_middleware(ErrorEnvelopeMiddleware)
    app.add_middleware(BodyParserMiddleware, limit=settings.body_limit_bytes)
    setup_cors(app, settings)

    logger.info("Middleware configured successfully")


def register_routes(
    app: FastAPI,
    settings: Settings,
    routers: Mapping[str, APIRouter],
) -> None:
    """
    Register the root endpoint, the health check and the feature routers.

    Feature routers are mounted at `{api_path}/{name}` in mapping order.
    """
    from ciudadano_digital.api.routes import health, root

    app.include_router(root.router, tags=["root"])
    app.include_router(health.router, prefix=settings.api_path, tags=["health"])

    for name, router in routers.items():
        app.include_router(router, prefix=f"{settings.api_path}/{name}")
        logger.debug("Router mounted", router=name, prefix=f"{settings.api_path}/{name}")

    logger.info("Routes registered successfully", api_path=settings.api_path, routers=list(routers))


def setup_error_handlers(app: FastAPI) -> None:
    """
    Register the terminal error handlers.

    1. AppError (application errors with a declared status)
    2. Exception (catch-all, status from the failure or 500)

    Router failures are turned into the envelope by `ErrorEnvelopeMiddleware`;
    the `Exception` handler only sees failures raised by the middleware
    stack itself.

    Framework HTTP exceptions (unknown paths, wrong methods) keep FastAPI's
    default responses.
    """
    app.add_exception_handler(AppError, app_error_handler)
    app.add_exception_handler(Exception, general_exception_handler)

    logger.info("Error handlers registered successfully")


def create_application(
    settings: Settings,
    routers: Optional[Mapping[str, APIRouter]] = None,
    init_db: Optional[DbInitializer] = None,
) -> FastAPI:
    """
    Create and configure FastAPI application instance.

    Args:
        settings: Process configuration
        routers: Feature routers keyed by mount segment (defaults to the five feature routers)
        init_db: Datastore initialiser awaited on startup (defaults to `database.init_db`)

    Returns:
        Configured FastAPI application instance
    """
    if routers is None:
        from ciudadano_digital.api.routes import get_feature_routers
        routers = get_feature_routers()

    if init_db is None:
        init_db = partial(database.init_db, settings)

    app = FastAPI(
        title="Ciudadano Digital API",
        version=__version__,
        lifespan=create_lifespan(init_db),
    )
    app.state.settings = settings
    app.state.db_ready = False

    setup_middleware(app, settings)
    register_routes(app, settings, routers)
    setup_error_handlers(app)

    return app
