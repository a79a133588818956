"""
EchoNote Backend — FastAPI Application Factory
================================================

What:  Creates and configures the FastAPI application instance.
How:   ``create_app()`` builds the AppContext, registers middleware,
       exception handlers and routers, and returns the app.
Who:   uvicorn (``uvicorn echonote.main:app``), the ``echonote`` console
       script, and the test suite (which passes its own settings).

Application Architecture:
    ┌──────────────────────────────────────────────────────────┐
    │                      FastAPI App                         │
    │                                                          │
    │  Middleware Chain:                                       │
    │  RequestID → Logging → GZip → CORS                       │
    │                                                          │
    │  Routes (/api):                                          │
    │  signup · login · dashboard · user · notes · AI          │
    │  + GET /health                                           │
    │                                                          │
    │  Exception Handlers:                                     │
    │  EchoNoteError → its status │ request validation → 400   │
    │  HTTPException → its status │ anything else → 500        │
    └──────────────────────────────────────────────────────────┘

Lifecycle:
    Startup:
    1. Configure logging
    2. Validate configuration (abort when JWT_SECRET is missing)
    3. Ping the database (abort when unreachable)

    Shutdown:
    1. Dispose database engine (close all connections)
"""

import logging
import sys
from contextlib import asynccontextmanager
from typing import AsyncGenerator, Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from echonote import __version__
from echonote.config import Settings
from echonote.context import AppContext
from echonote.exceptions import EchoNoteError
from echonote.middleware.logging import RequestLoggingMiddleware
from echonote.middleware.request_id import RequestIDMiddleware, request_id_var
from echonote.routes import ai, auth, health, notes, users
from echonote.services.llm_base import LLMService

logger = logging.getLogger(__name__)


# ══════════════════════════════════════════════════════════════════════════
# Logging Configuration
# ══════════════════════════════════════════════════════════════════════════

def setup_logging(level: str = "INFO") -> None:
    """
    Configures the root logger once for the whole process.

    Format: ``%(asctime)s [%(levelname)s] %(name)s: %(message)s`` on stdout.
    """
    logging.basicConfig(
        level=getattr(logging, level, logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S",
        handlers=[logging.StreamHandler(sys.stdout)],
        force=True,
    )

    # Third-party libraries that log every operation
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
    logging.getLogger("httpx").setLevel(logging.WARNING)
    # passlib probes bcrypt.__about__, which newer bcrypt releases dropped
    logging.getLogger("passlib").setLevel(logging.ERROR)


# ══════════════════════════════════════════════════════════════════════════
# Application Lifespan (Startup & Shutdown)
# ══════════════════════════════════════════════════════════════════════════

@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    context: AppContext = app.state.context
    settings = context.settings

    # ── Startup ───────────────────────────────────────────────────────────
    setup_logging(settings.log_level)
    logger.info("=" * 60)
    logger.info("EchoNote Backend %s starting up...", __version__)

    try:
        settings.validate_required_for_production()
    except ValueError as e:
        logger.error("Configuration error: %s", str(e))
        logger.error("Fix the configuration and restart the server.")
        raise

    try:
        await context.database.ping()
    except Exception as e:
        logger.error("Database unreachable at startup: %s", str(e))
        await context.database.dispose()
        raise

    logger.info("Database connected")
    if not context.llm.is_configured:
        logger.warning("GEMINI_API_KEY is not set; AI endpoints will answer 503")

    logger.info("Server ready at http://%s:%d", settings.host, settings.port)
    logger.info("API docs: http://%s:%d/docs", settings.host, settings.port)
    logger.info("=" * 60)

    yield

    # ── Shutdown ──────────────────────────────────────────────────────────
    logger.info("EchoNote Backend shutting down...")
    await context.database.dispose()
    logger.info("Shutdown complete.")


# ══════════════════════════════════════════════════════════════════════════
# Exception Handlers
# ══════════════════════════════════════════════════════════════════════════

def _error_response(status_code: int, message: str, code: str, headers=None) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={
            "error": message,
            "code": code,
            "request_id": request_id_var.get("") or None,
        },
        headers=headers,
    )


def _describe_validation_error(exc: RequestValidationError) -> str:
    """First problem as ``field: message``; the client shows one line."""
    errors = exc.errors()
    if not errors:
        return "Invalid request"
    first = errors[0]
    # loc is ("body", "title") / ("query", "page"); drop the location kind
    field = ".".join(str(part) for part in first.get("loc", ())[1:])
    message = first.get("msg", "Invalid value")
    return f"{field}: {message}" if field else message


def register_exception_handlers(app: FastAPI) -> None:
    """
    Maps exceptions to ``{"error", "code", "request_id"}`` JSON bodies.

    Handler hierarchy:
        EchoNoteError (and subclasses) → exc.status_code
        RequestValidationError         → 400 Bad Request
        HTTPException                  → its own status (unknown route, bad method)
        Exception (fallback)           → 500, stack trace logged only
    """

    @app.exception_handler(EchoNoteError)
    async def handle_echonote_error(request: Request, exc: EchoNoteError):
        rid = request_id_var.get("")
        if exc.status_code >= 500:
            # Context is logged server-side only
            logger.error("[%s] %s: %s | Context: %s", rid, type(exc).__name__, exc.message, exc.context)
        else:
            logger.warning("[%s] %s: %s", rid, type(exc).__name__, exc.message)

        return _error_response(exc.status_code, exc.message, exc.code)

    @app.exception_handler(RequestValidationError)
    async def handle_request_validation(request: Request, exc: RequestValidationError):
        message = _describe_validation_error(exc)
        logger.warning("[%s] Request validation failed: %s", request_id_var.get(""), message)
        return _error_response(400, message, "validation_error")

    @app.exception_handler(StarletteHTTPException)
    async def handle_http_exception(request: Request, exc: StarletteHTTPException):
        return _error_response(exc.status_code, str(exc.detail), "http_error", getattr(exc, "headers", None))

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception):
        rid = request_id_var.get("")
        logger.error("[%s] Unexpected error: %s", rid, str(exc), exc_info=True)
        return _error_response(500, "An unexpected error occurred", "server_error")


# ══════════════════════════════════════════════════════════════════════════
# Application Factory
# ══════════════════════════════════════════════════════════════════════════

def create_app(
    settings: Optional[Settings] = None,
    llm_service: Optional[LLMService] = None,
) -> FastAPI:
    """
    Assembles the application.

    Args:
        settings:    configuration; read from the environment when omitted
        llm_service: AI provider; Gemini when omitted
    """
    settings = settings or Settings()

    app = FastAPI(
        title="EchoNote API",
        description=(
            "Backend for EchoNote: accounts, notes with tags, search and paging, "
            "and Gemini-powered summaries, Q&A and audio transcription."
        ),
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )
    app.state.context = AppContext.build(settings, llm_service=llm_service)

    # ── Register Middleware ───────────────────────────────────────────────
    # Middleware executes in REVERSE order of addition:
    # CORS → GZip → Logging → RequestID added here runs as
    # RequestID → Logging → GZip → CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["X-Request-ID"],
    )
    app.add_middleware(GZipMiddleware, minimum_size=500)
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(RequestIDMiddleware)

    # ── Register Exception Handlers ───────────────────────────────────────
    register_exception_handlers(app)

    # ── Register Routes ───────────────────────────────────────────────────
    app.include_router(auth.router)
    app.include_router(users.router)
    app.include_router(notes.router)
    app.include_router(ai.router)
    app.include_router(health.router)

    return app


def run() -> None:
    """Console entry point: serves the app on HOST:PORT."""
    import uvicorn

    settings = Settings()
    uvicorn.run("echonote.main:app", host=settings.host, port=settings.port, log_level=settings.log_level.lower())


# uvicorn expects `echonote.main:app` to be importable
app = create_app()
