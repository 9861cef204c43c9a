"""
ProgressLog Backend — FastAPI Application Factory
===================================================

What:  Creates and configures the FastAPI application instance.
How:   Factory pattern: create_app() returns a configured FastAPI instance
       with its own Database handle on app.state.db.
Who:   uvicorn (`uvicorn app.main:app`, or the `progresslog` console script)
       and the test suite, which builds apps around a temporary database.

Application Architecture:
    ┌─────────────────────────────────────────────────────┐
    │                   FastAPI App                       │
    │                                                     │
    │  Middleware: Req ID → Logging → GZip → CORS         │
    │                                                     │
    │  Routes:                                            │
    │    GET/POST   /api/records                          │
    │    PUT/DELETE /api/records/{id}                     │
    │    POST       /api/records/{id}/like                │
    │    GET        /health                               │
    │    /          static assets (when STATIC_DIR set)   │
    │                                                     │
    │  Exception Handlers:                                │
    │    ValidationError → 400 │ DatabaseError → 500      │
    └─────────────────────────────────────────────────────┘

Lifecycle:
    Startup:
    1. Initialize logging
    2. Create the records table if missing; any failure aborts startup
    Shutdown:
    1. Dispose the database pool
"""

import logging
import sys
from contextlib import asynccontextmanager
from pathlib import Path
from typing import AsyncGenerator, Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles

from app import __version__
from app.config import Settings, settings as default_settings
from app.database import Database
from app.exceptions import ProgressLogError, ValidationError
from app.middleware.logging import RequestLoggingMiddleware
from app.middleware.request_id import RequestIDMiddleware, request_id_var
from app.routes import health, records

logger = logging.getLogger(__name__)


# ══════════════════════════════════════════════════════════════════════════
# Logging Configuration
# ══════════════════════════════════════════════════════════════════════════

def setup_logging(level: str) -> None:
    """
    Configure the root logger to write to stdout.

    Format: %(asctime)s [%(levelname)s] %(name)s: %(message)s
    """
    logging.basicConfig(
        level=getattr(logging, level, logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S",
        handlers=[logging.StreamHandler(sys.stdout)],
        force=True,
    )

    # Our own access logger replaces uvicorn's
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)


# ══════════════════════════════════════════════════════════════════════════
# Application Lifespan (Startup & Shutdown)
# ══════════════════════════════════════════════════════════════════════════

@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    Startup: logging, then schema bootstrap.
    Shutdown: pool disposal.

    Schema bootstrap failure is fatal. The exception is logged and
    re-raised, so uvicorn stops before accepting any request.
    """
    app_settings: Settings = app.state.settings
    database: Database = app.state.db

    setup_logging(app_settings.log_level)
    logger.info("ProgressLog %s starting up...", __version__)

    try:
        await database.init_schema()
    except Exception as e:
        logger.error("Error initializing database: %s", str(e))
        await database.dispose()
        raise

    logger.info("Server ready at http://%s:%d", app_settings.host, app_settings.port)

    yield

    logger.info("ProgressLog shutting down...")
    await database.dispose()
    logger.info("Shutdown complete.")


# ══════════════════════════════════════════════════════════════════════════
# Exception Handlers
# ══════════════════════════════════════════════════════════════════════════

def _request_id(request: Request) -> str:
    """
    Correlation ID for an error body.

    The catch-all handler runs in ServerErrorMiddleware, outside
    RequestIDMiddleware, where the ContextVar is no longer set; request.state
    (shared through the ASGI scope) and the client header still carry it.
    """
    return (
        getattr(request.state, "request_id", "")
        or request_id_var.get("")
        or request.headers.get("X-Request-ID", "")
    )


def register_exception_handlers(app: FastAPI) -> None:
    """
    Map exceptions to JSON error responses.

    Handler hierarchy:
        RequestValidationError  → 400 (malformed body, non-integer id)
        ValidationError         → 400
        ProgressLogError (base) → status_code of the subclass (DatabaseError → 500)
        Exception (fallback)    → 500

    Every body has the shape {"error": <message>, "code": <kind>, "request_id": ...}.
    """

    @app.exception_handler(ValidationError)
    async def handle_validation_error(request: Request, exc: ValidationError):
        rid = _request_id(request)
        logger.warning("[%s] Validation error: %s", rid, exc.message)
        return JSONResponse(
            status_code=exc.status_code,
            content={
                "error": exc.message,
                "code": exc.code,
                "details": exc.context,
                "request_id": rid,
            },
        )

    @app.exception_handler(RequestValidationError)
    async def handle_request_validation(request: Request, exc: RequestValidationError):
        return await handle_validation_error(request, ValidationError.from_errors(exc.errors()))

    @app.exception_handler(ProgressLogError)
    async def handle_app_error(request: Request, exc: ProgressLogError):
        rid = _request_id(request)
        logger.error("[%s] %s: %s | Context: %s", rid, exc.code, exc.message, exc.context)
        return JSONResponse(
            status_code=exc.status_code,
            content={
                "error": exc.message,
                "code": exc.code,
                "request_id": rid,
            },
        )

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception):
        rid = _request_id(request)
        logger.error("[%s] Unexpected error: %s", rid, str(exc), exc_info=True)
        # Built after RequestIDMiddleware has unwound, so the header is set here
        return JSONResponse(
            status_code=500,
            content={
                "error": str(exc) or type(exc).__name__,
                "code": "internal_error",
                "request_id": rid,
            },
            headers={"X-Request-ID": rid} if rid else None,
        )


# ══════════════════════════════════════════════════════════════════════════
# Application Factory
# ══════════════════════════════════════════════════════════════════════════

def create_app(
    app_settings: Optional[Settings] = None,
    database: Optional[Database] = None,
) -> FastAPI:
    """
    Create and configure the FastAPI application.

    Args:
        app_settings: Settings to use (module singleton by default)
        database: Pre-built Database handle; built from settings when omitted

    Returns:
        FastAPI instance with the database handle on app.state.db.
    """
    app_settings = app_settings or default_settings

    app = FastAPI(
        title="ProgressLog API",
        description="Attendance and progress records: list, create, update, delete, like.",
        version=__version__,
        lifespan=lifespan,
    )
    app.state.settings = app_settings
    app.state.db = database or Database.from_settings(app_settings)

    # ── Register Middleware ───────────────────────────────────────────────
    # Last added = first to execute: RequestID → Logging → GZip → CORS
    origins = app_settings.cors_origins_list
    app.add_middleware(
        CORSMiddleware,
        allow_origins=origins,
        allow_credentials="*" not in origins,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["X-Request-ID"],
    )
    app.add_middleware(GZipMiddleware, minimum_size=500)
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(RequestIDMiddleware)

    register_exception_handlers(app)

    # ── Register Routes ───────────────────────────────────────────────────
    app.include_router(records.router)
    app.include_router(health.router)

    # Mounted last so /api and /health win over files of the same name
    if app_settings.static_dir:
        static_path = Path(app_settings.static_dir)
        if static_path.is_dir():
            app.mount("/", StaticFiles(directory=static_path, html=True), name="static")
        else:
            logger.warning("STATIC_DIR %s is not a directory; static files disabled", static_path)

    return app


def run() -> None:
    """Console entry point: serve the app with uvicorn on HOST:PORT."""
    import uvicorn

    uvicorn.run(
        "app.main:app",
        host=default_settings.host,
        port=default_settings.port,
        log_level=default_settings.log_level.lower(),
    )


# uvicorn expects `app.main:app` to be importable
app = create_app()
