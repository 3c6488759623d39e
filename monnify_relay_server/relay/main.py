"""
Main FastAPI application for the Monnify Relay Server.

Entry point for the API server with startup/shutdown event handlers.
"""

from fastapi import FastAPI, Request, status
from fastapi.exception_handlers import http_exception_handler
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.exceptions import RequestValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException
from contextlib import asynccontextmanager
from datetime import datetime
import logging
import time
import structlog

from . import __version__
from .config import Settings, settings
from .clients import UpstreamClients
from .models import ErrorResponse
from .routes import router


def configure_logging(settings: Settings) -> None:
    """
    Configure structlog on top of stdlib logging.
    """
    logging.basicConfig(format="%(message)s", level=settings.log_level)

    structlog.configure(
        processors=[
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.stdlib.add_log_level,
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer() if settings.log_format == "json"
            else structlog.dev.ConsoleRenderer()
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


configure_logging(settings)

logger = structlog.get_logger(__name__)


# ============================================================================
# Lifespan Context Manager (Startup/Shutdown)
# ============================================================================

@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Lifespan context manager for startup and shutdown events.

    Opens the upstream HTTP clients and closes them on shutdown.
    """
    # Startup
    logger.info(
        "starting_monnify_relay_server",
        version=__version__,
        environment=settings.env,
        port=settings.port
    )

    app.state.clients = UpstreamClients.open(settings)
    logger.info("server_startup_complete", base_url=settings.base_url)

    try:
        yield

    finally:
        # Shutdown
        logger.info("shutting_down_server")
        await app.state.clients.close()
        logger.info("server_shutdown_complete")


# ============================================================================
# FastAPI Application
# ============================================================================

app = FastAPI(
    title="Monnify Relay Server",
    description=(
        "Relay for the Monnify payment API. Exchanges API credentials for an "
        "access token and looks up NIN details with it."
    ),
    version=__version__,
    lifespan=lifespan,
    servers=[{"url": settings.base_url}],
    docs_url="/docs",
    redoc_url="/redoc",
    openapi_url="/openapi.json"
)

# ============================================================================
# CORS Middleware
# ============================================================================

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins_list,
    allow_methods=["*"],
    allow_headers=["*"],
)


# ============================================================================
# Exception Handlers
# ============================================================================

@app.exception_handler(StarletteHTTPException)
async def not_found_handler(request: Request, exc: StarletteHTTPException):
    """
    Return a JSON body for unknown routes; defer other HTTP errors to FastAPI.
    """
    if exc.status_code != status.HTTP_404_NOT_FOUND:
        return await http_exception_handler(request, exc)

    logger.info("route_not_found", method=request.method, path=request.url.path)

    return JSONResponse(
        status_code=status.HTTP_404_NOT_FOUND,
        content=ErrorResponse(message="API route does not exist").model_dump(exclude_none=True)
    )


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """
    Handle Pydantic validation errors with detailed messages.
    """
    errors = {}
    for error in exc.errors():
        field = ".".join(str(loc) for loc in error["loc"] if loc != "body")
        errors[field] = error["msg"]

    logger.warning(
        "validation_error",
        path=request.url.path,
        errors=errors
    )

    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={
            "error": "validation_error",
            "message": "Invalid request data",
            "details": errors,
            "timestamp": datetime.utcnow().isoformat() + "Z"
        }
    )


@app.exception_handler(Exception)
async def general_exception_handler(request: Request, exc: Exception):
    """
    Handle unexpected errors with generic 500 response.
    """
    logger.error(
        "internal_server_error",
        path=request.url.path,
        error=str(exc),
        exc_info=True
    )

    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=ErrorResponse(
            status=status.HTTP_500_INTERNAL_SERVER_ERROR,
            message=str(exc)
        ).model_dump()
    )


# ============================================================================
# Include Routes
# ============================================================================

app.include_router(
    router,
    responses={
        404: {"description": "API route does not exist", "model": ErrorResponse},
        500: {"description": "Unhandled server error", "model": ErrorResponse}
    }
)


# ============================================================================
# Middleware for Request Logging
# ============================================================================

@app.middleware("http")
async def log_requests(request: Request, call_next):
    """
    Log all incoming requests and responses.
    """
    started = time.perf_counter()

    logger.info(
        "request_received",
        method=request.method,
        path=request.url.path,
        client=request.client.host if request.client else None
    )

    response = await call_next(request)

    logger.info(
        "request_completed",
        method=request.method,
        path=request.url.path,
        status_code=response.status_code,
        duration_ms=round((time.perf_counter() - started) * 1000, 2)
    )

    return response


# ============================================================================
# Export
# ============================================================================

__all__ = ["app", "configure_logging"]
