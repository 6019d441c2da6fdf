"""
Main FastAPI Application

Entry point for the multi-tenant resume platform.
create_app() wires settings, database, event bus and listeners, middleware,
error handlers and routes. The module-level `app` is what uvicorn serves.
"""
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy.engine import Engine
import time
from contextlib import asynccontextmanager
from typing import Optional

from resumehub import __version__
from resumehub.config import Settings, get_settings
from resumehub.core.exceptions import (
    AuthenticationError,
    InfrastructureError,
    TenantIsolationError,
)
from resumehub.core.policies import ResumePolicy
from resumehub.database import build_session_factory, engine as default_engine, init_db
from resumehub.events import EventBus
from resumehub.listeners import register_listeners
from resumehub.middleware.rate_limit import RateLimitMiddleware
from resumehub.middleware.tenant import TenantMiddleware
from resumehub.services.analysis import AnalysisService
from resumehub.services.dashboard import DashboardService
from resumehub.services.notifications import LoggingNotificationService, NotificationService
from resumehub.utils.logging import setup_logging, get_logger

from resumehub.api.endpoints import auth, dashboard, resumes

logger = get_logger(__name__)


def create_app(
    settings: Optional[Settings] = None,
    engine: Optional[Engine] = None,
    redis_client=None,
    notification_service: Optional[NotificationService] = None
) -> FastAPI:
    """
    Build the application.

    Every argument defaults to the production wiring; tests pass their own
    settings, an in-memory engine, a fake Redis and a mock notifier.
    """
    settings = settings or get_settings()
    engine = engine or default_engine

    event_bus = EventBus(max_workers=settings.EVENT_WORKERS)
    register_listeners(event_bus, notification_service or LoggingNotificationService())

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info(f"Starting application in {settings.ENVIRONMENT} mode")

        # Dev only - migrations own the schema elsewhere
        if settings.ENVIRONMENT == "development":
            logger.warning("Initializing database tables (dev mode)")
            init_db(engine)

        logger.info("Application startup complete")

        yield

        logger.info("Shutting down application")
        # Let queued notifications finish before the pool goes away
        event_bus.shutdown(wait=True)
        engine.dispose()
        logger.info("Application shutdown complete")

    app = FastAPI(
        title="ResumeHub",
        description="Multi-tenant resume management and analysis API",
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan
    )

    app.state.settings = settings
    app.state.session_factory = build_session_factory(engine)
    app.state.event_bus = event_bus
    app.state.access_guard = ResumePolicy()
    app.state.analysis_service = AnalysisService(event_bus)
    app.state.dashboard_service = DashboardService()

    # ========================================================================
    # MIDDLEWARE
    # ========================================================================
    # add_middleware() wraps the stack, so the last one added runs first.
    # Order on the way in: CORS, tenant, rate limit, timing.

    @app.middleware("http")
    async def add_process_time_header(request: Request, call_next):
        """Add X-Process-Time header to track request duration."""
        start_time = time.time()
        response = await call_next(request)
        response.headers["X-Process-Time"] = str(time.time() - start_time)
        return response

    # Needs request.state.tenant for the key namespace
    if settings.RATE_LIMIT_ENABLED:
        app.add_middleware(
            RateLimitMiddleware,
            redis_client=redis_client,
            redis_url=settings.REDIS_URL,
            cache_prefix=settings.CACHE_PREFIX
        )

    app.add_middleware(
        TenantMiddleware,
        session_factory=app.state.session_factory,
        allow_query_param=settings.tenant_query_param_allowed
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"] if settings.ENVIRONMENT == "development" else [],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # ========================================================================
    # EXCEPTION HANDLERS
    # ========================================================================

    @app.exception_handler(TenantIsolationError)
    async def tenant_isolation_error_handler(request: Request, exc: TenantIsolationError):
        logger.error(
            f"TENANT ISOLATION VIOLATION: {exc.detail}",
            extra={"tenant_id": getattr(request.state, "tenant_id", None)}
        )
        return JSONResponse(
            status_code=exc.status_code,
            content={"detail": exc.detail, "type": "tenant_isolation_error"}
        )

    @app.exception_handler(AuthenticationError)
    async def authentication_error_handler(request: Request, exc: AuthenticationError):
        return JSONResponse(
            status_code=exc.status_code,
            content={"detail": exc.detail, "type": "authentication_error"},
            headers=exc.headers or {}
        )

    @app.exception_handler(InfrastructureError)
    async def infrastructure_error_handler(request: Request, exc: InfrastructureError):
        """A backing store failed; the request may succeed later."""
        logger.error(
            f"Infrastructure failure: {exc}",
            exc_info=exc,
            extra={"tenant_id": getattr(request.state, "tenant_id", None)}
        )
        return JSONResponse(
            status_code=503,
            content={"detail": "Service temporarily unavailable", "type": "infrastructure_error"}
        )

    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception):
        """Log the full error, return a generic one unless DEBUG is on."""
        logger.error(
            f"Unhandled exception: {type(exc).__name__}: {str(exc)}",
            exc_info=exc,
            extra={"tenant_id": getattr(request.state, "tenant_id", None)}
        )

        if settings.DEBUG:
            return JSONResponse(
                status_code=500,
                content={"detail": str(exc), "type": type(exc).__name__}
            )
        return JSONResponse(
            status_code=500,
            content={"detail": "Internal server error", "type": "internal_error"}
        )

    # ========================================================================
    # ROUTES
    # ========================================================================

    @app.get("/health", tags=["health"])
    async def health_check():
        return {
            "status": "healthy",
            "environment": settings.ENVIRONMENT,
            "version": __version__
        }

    @app.get("/", tags=["root"])
    async def root():
        return {
            "message": "ResumeHub API",
            "version": __version__,
            "docs": "/docs",
            "health": "/health"
        }

    app.include_router(auth.router, prefix="/api/v1")
    app.include_router(resumes.router, prefix="/api/v1")
    app.include_router(dashboard.router, prefix="/api/v1")

    return app


_settings = get_settings()

# Once per process, before the app exists
setup_logging(
    log_level=_settings.LOG_LEVEL,
    json_format=(_settings.ENVIRONMENT == "production")
)

app = create_app(_settings)


if __name__ == "__main__":
    import uvicorn

    logger.info(f"Environment: {_settings.ENVIRONMENT}")
    logger.info(f"Debug: {_settings.DEBUG}")

    uvicorn.run(
        "resumehub.main:app",
        host="0.0.0.0",
        port=8000,
        reload=_settings.DEBUG,
        log_level=_settings.LOG_LEVEL.lower()
    )
