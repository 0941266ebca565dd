"""
TripDesk Backend — FastAPI Application Factory
================================================

What:  Builds the FastAPI application: services on app.state, middleware,
       exception handlers, routers and the startup/shutdown lifespan.
Who:   uvicorn (`uvicorn tripdesk.main:app`, or the `tripdesk` script).
       Tests call create_app() with their own Settings.

Application Architecture:
    ┌─────────────────────────────────────────────────────┐
    │                   FastAPI App                       │
    │                                                     │
    │  app.state:                                         │
    │    settings · database · repository                 │
    │    session_store · auth_service                     │
    │                                                     │
    │  Middleware:  Req ID → Logging → GZip → CORS        │
    │                                                     │
    │  Routes:                                            │
    │  ┌────────────────────┐ ┌───────────────┐ ┌───────┐ │
    │  │ POST /registrations│ │ /api/admin/*  │ │/health│ │
    │  └────────────────────┘ └───────────────┘ └───────┘ │
    │                                                     │
    │  Exception Handlers → {"message": ...}              │
    └─────────────────────────────────────────────────────┘

Lifecycle:
    Startup:
    1. Configure logging
    2. Warn about settings still at their public defaults
    3. Bootstrap: schema to head, default admin present (never fatal)

    Shutdown:
    1. Dispose the database engine
"""

import logging
import sys
from contextlib import asynccontextmanager
from typing import AsyncGenerator, Optional

import uvicorn
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from tripdesk import __version__
from tripdesk.bootstrap import bootstrap
from tripdesk.config import Settings, settings as default_settings
from tripdesk.database import Database
from tripdesk.exceptions import (
    AuthError,
    DatabaseError,
    NotFoundError,
    TripDeskError,
    ValidationError,
)
from tripdesk.middleware.logging import RequestLoggingMiddleware
from tripdesk.middleware.request_id import (
    REQUEST_ID_HEADER,
    RequestIDLogFilter,
    RequestIDMiddleware,
    request_id_var,
)
from tripdesk.routes import admin, health, registrations
from tripdesk.services.auth_service import AuthService
from tripdesk.services.repository import Repository
from tripdesk.services.session_store import InMemorySessionStore

logger = logging.getLogger(__name__)


# ══════════════════════════════════════════════════════════════════════════
# Logging Configuration
# ══════════════════════════════════════════════════════════════════════════

def setup_logging(settings: Settings) -> None:
    """
    Configure the root logger once, at startup.

    Format: %(asctime)s [%(levelname)s] %(name)s [%(request_id)s]: %(message)s
    The request id comes from RequestIDLogFilter ("-" outside a request).
    """
    handler = logging.StreamHandler(sys.stdout)
    handler.addFilter(RequestIDLogFilter())

    logging.basicConfig(
        level=getattr(logging, settings.log_level, logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s [%(request_id)s]: %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S",
        handlers=[handler],
        force=True,
    )

    # Chatty third-party loggers
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
    logging.getLogger("aiosqlite").setLevel(logging.WARNING)
    logging.getLogger("alembic.runtime.migration").setLevel(logging.WARNING)


# ══════════════════════════════════════════════════════════════════════════
# Application Lifespan
# ══════════════════════════════════════════════════════════════════════════

@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    settings: Settings = app.state.settings

    setup_logging(settings)
    logger.info("=" * 60)
    logger.info("TripDesk Backend %s starting up...", __version__)

    try:
        settings.validate_required_for_production()
    except ValueError as e:
        # Weak defaults are reported, not enforced.
        logger.warning("Configuration warning: %s", str(e))

    result = await bootstrap(
        app.state.database,
        app.state.repository,
        app.state.auth_service.hasher,
        settings,
    )
    if result.ok:
        logger.info("Bootstrap complete (schema %s)", result.schema_revision)
    else:
        logger.error("Bootstrap incomplete; admin login will not work until fixed.")

    logger.info("Server ready at http://%s:%d", settings.host, settings.port)
    logger.info("=" * 60)

    yield

    logger.info("TripDesk Backend shutting down...")
    await app.state.database.dispose()
    logger.info("Shutdown complete.")


# ══════════════════════════════════════════════════════════════════════════
# Exception Handlers
# ══════════════════════════════════════════════════════════════════════════

def _message(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"message": message})


def register_exception_handlers(app: FastAPI) -> None:
    """
    Map exceptions to status codes. Every body is exactly {"message": ...}.

        ValidationError          → 400
        AuthError                → 401
        NotFoundError            → 404
        DatabaseError            → 500 (context logged server-side)
        TripDeskError (base)     → its status_code
        RequestValidationError   → 400
        HTTPException            → its status code (unknown route, wrong method)
        Exception (fallback)     → 500
    """

    @app.exception_handler(ValidationError)
    async def handle_validation_error(request: Request, exc: ValidationError):
        logger.info("Validation error: %s", exc.message)
        return _message(400, exc.message)

    @app.exception_handler(AuthError)
    async def handle_auth_error(request: Request, exc: AuthError):
        return _message(401, exc.message)

    @app.exception_handler(NotFoundError)
    async def handle_not_found(request: Request, exc: NotFoundError):
        return _message(404, exc.message)

    @app.exception_handler(DatabaseError)
    async def handle_database_error(request: Request, exc: DatabaseError):
        logger.error("Database error: %s | Context: %s", exc.message, exc.context)
        return _message(500, exc.message)

    @app.exception_handler(TripDeskError)
    async def handle_tripdesk_error(request: Request, exc: TripDeskError):
        logger.error("%s: %s | Context: %s", type(exc).__name__, exc.message, exc.context)
        return _message(exc.status_code, exc.message)

    @app.exception_handler(RequestValidationError)
    async def handle_request_validation(request: Request, exc: RequestValidationError):
        return _message(400, "Invalid request.")

    @app.exception_handler(StarletteHTTPException)
    async def handle_http_exception(request: Request, exc: StarletteHTTPException):
        return JSONResponse(
            status_code=exc.status_code,
            content={"message": str(exc.detail)},
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception):
        rid = request_id_var.get("")
        logger.error("[%s] Unexpected error: %s", rid, str(exc), exc_info=True)
        headers = {REQUEST_ID_HEADER: rid} if rid else None
        return JSONResponse(
            status_code=500,
            content={"message": "Internal server error."},
            headers=headers,
        )


# ══════════════════════════════════════════════════════════════════════════
# Application Factory
# ══════════════════════════════════════════════════════════════════════════

def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """
    Assemble the application around one set of services.

    Passing `settings` gives a fully independent app (its own engine and
    session store), which is how tests isolate themselves.
    """
    settings = settings or default_settings

    app = FastAPI(
        title="TripDesk API",
        description="Travel registration intake with a session-protected admin API.",
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )

    # ── Services ──────────────────────────────────────────────────────────
    database = Database.from_settings(settings)
    repository = Repository(database)
    session_store = InMemorySessionStore()

    app.state.settings = settings
    app.state.database = database
    app.state.repository = repository
    app.state.session_store = session_store
    app.state.auth_service = AuthService.from_settings(settings, repository, session_store)

    # ── Middleware ────────────────────────────────────────────────────────
    # Last added runs first: RequestID → Logging → GZip → CORS.
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
        allow_headers=["Content-Type", REQUEST_ID_HEADER],
        expose_headers=[REQUEST_ID_HEADER],
    )
    app.add_middleware(GZipMiddleware, minimum_size=500)
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(RequestIDMiddleware)

    register_exception_handlers(app)

    app.include_router(registrations.router)
    app.include_router(admin.router)
    app.include_router(health.router)

    return app


def run() -> None:
    """Console-script entry point."""
    uvicorn.run(
        "tripdesk.main:app",
        host=default_settings.host,
        port=default_settings.port,
        log_level=default_settings.log_level.lower(),
    )


app = create_app()
