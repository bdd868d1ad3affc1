# clientdb/main.py
"""
Client Information Database - Main Application

CRUD service for client contact records with health check, rate limiting
and secret resolution for production deployments.
"""

import enum
import logging
import signal
import sys
from contextlib import asynccontextmanager
from typing import Optional

import uvicorn
from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse, PlainTextResponse
from fastapi.staticfiles import StaticFiles
from pydantic import ValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException

from clientdb.config import Settings
from clientdb.database import (
    check_connectivity, create_db_engine, create_session_factory, describe_url, ensure_schema
)
from clientdb.middleware import (
    RATE_LIMIT_MESSAGE, RateLimitExceeded, SecurityHeadersMiddleware, SlidingWindowRateLimiter,
    security_headers
)
from clientdb.routers import clients, health, pages
from clientdb.services.secrets import SecretsService, resolve_database_url

logger = logging.getLogger(__name__)


class LifecycleState(str, enum.Enum):
    STARTING = "starting"
    SERVING = "serving"
    DRAINING = "draining"
    STOPPED = "stopped"
    STARTUP_FAILED = "startup_failed"
    SHUTDOWN_FAILED = "shutdown_failed"


def configure_logging(settings: Settings) -> None:
    logging.basicConfig(
        level=getattr(logging, settings.LOG_LEVEL.upper()),
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )


# =============================================================================
# APPLICATION LIFESPAN
# =============================================================================

@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan manager.

    Handles startup and shutdown events:
    - Startup: resolve secrets, connect, sync schema
    - Shutdown: runs after the server has drained in-flight requests; closes the pool
    """
    settings: Settings = app.state.settings
    app.state.lifecycle = LifecycleState.STARTING

    # Startup
    logger.info("=" * 80)
    logger.info(f"🚀 {settings.APP_NAME.upper()} STARTING UP")
    logger.info("=" * 80)
    logger.info(f"Environment: {settings.ENVIRONMENT}")
    logger.info(f"Debug Mode: {settings.DEBUG}")

    try:
        database_url = resolve_database_url(settings, secrets=app.state.secrets)
        logger.info(f"Database: {describe_url(database_url)}")

        engine = create_db_engine(database_url, settings)
        if not check_connectivity(engine):
            engine.dispose()
            raise RuntimeError("Database is unreachable")
        logger.info("✅ Database connection established successfully")

        added = ensure_schema(engine)
        logger.info(f"✅ Database tables created/verified ({len(added)} columns added)")
    except Exception as e:
        app.state.lifecycle = LifecycleState.STARTUP_FAILED
        logger.error(f"❌ Failed to initialize application: {e}")
        raise

    app.state.engine = engine
    app.state.session_factory = create_session_factory(engine)
    app.state.lifecycle = LifecycleState.SERVING

    logger.info(f"✅ App running at http://localhost:{settings.PORT}")
    logger.info(f"✅ Health check: http://localhost:{settings.PORT}/_health")
    logger.info(f"✅ API: http://localhost:{settings.PORT}/api/clients")
    logger.info("=" * 80)

    yield

    # Shutdown
    app.state.lifecycle = LifecycleState.DRAINING
    logger.info("=" * 80)
    logger.info("🛑 HTTP server closed, shutting down")
    logger.info("=" * 80)
    logger.info("Closing database connections...")
    try:
        engine.dispose()
    except Exception as e:
        app.state.lifecycle = LifecycleState.SHUTDOWN_FAILED
        logger.error(f"❌ Error closing database: {e}")
        return

    app.state.lifecycle = LifecycleState.STOPPED
    logger.info("✅ Database connection closed")
    logger.info("=" * 80)


# =============================================================================
# FASTAPI APPLICATION
# =============================================================================

def create_app(settings: Optional[Settings] = None, secrets: Optional[SecretsService] = None) -> FastAPI:
    """
    Build the application.

    Args:
        settings: Configuration; read from the environment when omitted
        secrets: Secret store client; created on demand in production when omitted
    """
    settings = settings or Settings()

    app = FastAPI(
        title=settings.APP_NAME,
        description="CRUD service for client contact records.",
        version=settings.APP_VERSION,
        docs_url="/docs" if settings.DEBUG else None,  # Disable in production
        redoc_url="/redoc" if settings.DEBUG else None,
        lifespan=lifespan,
        openapi_tags=[
            {"name": "Health", "description": "Health check endpoint"},
            {"name": "Clients", "description": "Client management"},
        ]
    )

    app.state.settings = settings
    app.state.secrets = secrets
    app.state.engine = None
    app.state.session_factory = None
    app.state.lifecycle = LifecycleState.STARTING
    app.state.rate_limiter = SlidingWindowRateLimiter(
        max_requests=settings.RATE_LIMIT_MAX_REQUESTS,
        window_seconds=settings.RATE_LIMIT_WINDOW_SECONDS
    )

    # =========================================================================
    # MIDDLEWARE
    # =========================================================================

    app.middleware("http")(SecurityHeadersMiddleware(settings.ASSET_HOST))

    # Request Logging Middleware
    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        """Log all incoming requests"""
        logger.info(f"{request.method} {request.url.path}")
        response = await call_next(request)
        logger.info(f"{request.method} {request.url.path} - {response.status_code}")
        return response

    # =========================================================================
    # EXCEPTION HANDLERS
    # =========================================================================

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        """Render HTTP errors as {"error": ...}"""
        return JSONResponse(
            status_code=exc.status_code,
            content={"error": exc.detail},
            headers=getattr(exc, "headers", None)
        )

    @app.exception_handler(RateLimitExceeded)
    async def rate_limit_exception_handler(request: Request, exc: RateLimitExceeded):
        return PlainTextResponse(
            RATE_LIMIT_MESSAGE,
            status_code=status.HTTP_429_TOO_MANY_REQUESTS,
            headers={
                "Retry-After": str(exc.retry_after),
                "RateLimit-Limit": str(exc.limit),
                "RateLimit-Remaining": "0",
            }
        )

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        """Handle malformed path, query or body syntax"""
        logger.error(f"Validation error on {request.url.path}: {exc.errors()}")
        return JSONResponse(
            status_code=422,
            content={
                "error": "Invalid request",
                "detail": _jsonable_errors(exc)
            }
        )

    @app.exception_handler(Exception)
    async def general_exception_handler(request: Request, exc: Exception):
        """Handle all other exceptions"""
        logger.error(f"Unhandled error on {request.url.path}: {exc}", exc_info=True)
        content = {"error": "Internal Server Error"}
        if settings.DEBUG:
            content["detail"] = str(exc)
        # Served outside the middleware stack, so the security headers are added here
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content=content,
            headers=security_headers(settings.ASSET_HOST)
        )

    # =========================================================================
    # ROUTERS
    # =========================================================================

    app.include_router(health.router, tags=["Health"])
    app.include_router(pages.router)
    app.include_router(clients.router, prefix="/api/clients", tags=["Clients"])

    # Everything else is looked up in the public directory
    app.mount("/", StaticFiles(directory=settings.STATIC_DIR, check_dir=False), name="public")

    return app


def _jsonable_errors(exc: RequestValidationError) -> list:
    return [
        {"loc": list(error.get("loc", ())), "msg": error.get("msg"), "type": error.get("type")}
        for error in exc.errors()
    ]


def exit_code(app: FastAPI) -> int:
    """Process status for the final lifecycle state; only a clean stop is 0."""
    return 0 if app.state.lifecycle == LifecycleState.STOPPED else 1


# =============================================================================
# ENTRY POINT
# =============================================================================

def run() -> None:
    """Serve until SIGTERM/SIGINT; exit 1 if startup or shutdown failed."""
    try:
        settings = Settings()
    except ValidationError as e:
        logging.basicConfig(level=logging.INFO)
        logger.error(f"❌ Invalid configuration: {e}")
        sys.exit(1)

    configure_logging(settings)
    app = create_app(settings)

    server = uvicorn.Server(uvicorn.Config(
        app,
        host=settings.HOST,
        port=settings.PORT,
        lifespan="on",
        proxy_headers=True,
        forwarded_allow_ips=settings.FORWARDED_ALLOW_IPS,
        timeout_graceful_shutdown=settings.GRACEFUL_SHUTDOWN_TIMEOUT,
        log_level=settings.LOG_LEVEL.lower()
    ))

    # uvicorn restores the previous handlers after draining and re-raises the
    # captured signal; these absorb it so the exit status below is used
    for sig in (signal.SIGINT, signal.SIGTERM):
        signal.signal(sig, _ignore_signal)
    server.run()

    sys.exit(exit_code(app))


def _ignore_signal(signum, frame) -> None:
    logger.debug(f"Signal {signum} received after shutdown")


if __name__ == "__main__":
    run()
