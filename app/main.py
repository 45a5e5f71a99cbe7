"""Starter Kit API - Main Application Module.

This module initializes the FastAPI application with its middleware chain,
exception handlers, routing and lifecycle management.
"""

import logging
import sys
import time
import uuid
from contextlib import asynccontextmanager
from pathlib import Path

# Add the project root to Python path if running directly
if __name__ == "__main__":
    project_root = Path(__file__).parent.parent
    sys.path.insert(0, str(project_root))

import structlog
from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.core.config import settings
from app.core.logging import setup_logging
from app.database import engine
from app.schemas.base import ResponseSchema
from models import Base

logger = logging.getLogger(__name__)

SECURE_HEADERS = {
    "X-Content-Type-Options": "nosniff",
    "X-Frame-Options": "SAMEORIGIN",
    "Referrer-Policy": "no-referrer",
    "Strict-Transport-Security": "max-age=15552000; includeSubDomains",
    "Cross-Origin-Opener-Policy": "same-origin",
    "Cross-Origin-Resource-Policy": "same-origin",
    "X-XSS-Protection": "0",
}


@asynccontextmanager
async def lifespan(_app: FastAPI):
    """Manage application lifecycle events."""
    logger.info("Starting %s (%s)", settings.app_name, settings.environment.value)

    # Development and tests create tables from the models; other environments
    # are expected to have the schema in place already.
    if settings.is_development or settings.is_testing:
        async with engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
        logger.info("Database tables created/verified")

    yield

    logger.info("Shutting down, closing database connections")
    await engine.dispose()


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    setup_logging(settings)

    app = FastAPI(
        title=settings.app_name,
        description="Starter kit API with authentication, items and file storage",
        version=settings.version,
        lifespan=lifespan,
        docs_url="/docs" if settings.environment == "development" else None,
        redoc_url="/redoc" if settings.environment == "development" else None,
    )

    # Add middleware
    setup_middleware(app)

    # Add exception handlers
    setup_exception_handlers(app)

    # Include routers
    setup_routers(app)

    return app


def setup_middleware(app: FastAPI):
    """Configure application middleware.

    Starlette runs the most recently added middleware first, so they are
    registered innermost first: error catching, CORS, logging, secure
    headers, timing, request id.
    """

    # Innermost, so a 500 still passes through the rest of the chain
    @app.middleware("http")
    async def catch_unhandled_errors(request: Request, call_next):
        try:
            return await call_next(request)
        except Exception as exc:
            logger.error(
                "Unhandled error: %s",
                exc,
                exc_info=exc,
                extra={"request_id": getattr(request.state, "request_id", None)},
            )
            return _error_response(request, 500, "INTERNAL_ERROR", "An unexpected error occurred")

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.allowed_origins_list,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"],
        allow_headers=["Content-Type", "Authorization", "X-Request-ID", "X-Filename"],
        expose_headers=["X-Request-ID", "X-Response-Time"],
        max_age=86400,
    )

    request_logger = logging.getLogger("app.requests")

    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        request_id = getattr(request.state, "request_id", None)
        method, path = request.method, request.url.path
        request_logger.info("→ %s %s", method, path, extra={"request_id": request_id})

        start = time.perf_counter()
        response = await call_next(request)
        duration_ms = round((time.perf_counter() - start) * 1000, 2)

        if response.status_code >= 500:
            level = logging.ERROR
        elif response.status_code >= 400:
            level = logging.WARNING
        else:
            level = logging.INFO
        request_logger.log(
            level,
            "← %s %s %s %sms",
            method,
            path,
            response.status_code,
            duration_ms,
            extra={
                "request_id": request_id,
                "status_code": response.status_code,
                "duration_ms": duration_ms,
            },
        )
        return response

    @app.middleware("http")
    async def add_secure_headers(request: Request, call_next):
        response = await call_next(request)
        for header, value in SECURE_HEADERS.items():
            response.headers.setdefault(header, value)
        return response

    @app.middleware("http")
    async def add_timing(request: Request, call_next):
        start = time.perf_counter()
        response = await call_next(request)
        duration_ms = (time.perf_counter() - start) * 1000
        response.headers["X-Response-Time"] = f"{duration_ms:.2f}ms"
        response.headers["Server-Timing"] = f"total;dur={duration_ms:.2f}"
        return response

    # Request ID middleware
    @app.middleware("http")
    async def add_request_id(request: Request, call_next):
        request_id = request.headers.get("x-request-id") or str(uuid.uuid4())
        request.state.request_id = request_id
        structlog.contextvars.clear_contextvars()
        structlog.contextvars.bind_contextvars(request_id=request_id)
        response = await call_next(request)
        response.headers["X-Request-ID"] = request_id
        return response


def _error_response(
    request: Request,
    status_code: int,
    code: str,
    message: str,
    details=None,
    headers: dict | None = None,
) -> JSONResponse:
    body = ResponseSchema.fail(request, code, message, details)
    return JSONResponse(
        status_code=status_code,
        content=jsonable_encoder(body.model_dump(exclude={"data"})),
        headers=headers,
    )


def setup_exception_handlers(app: FastAPI):
    """Configure global exception handlers."""

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        # Handle custom exceptions that have structured detail
        if isinstance(exc.detail, dict) and "message" in exc.detail:
            message = exc.detail["message"]
            error_code = exc.detail.get("error_code", "HTTP_ERROR")
            details = exc.detail.get("details")
        elif exc.status_code == 404 and exc.detail == "Not Found":
            message = f"Route {request.method} {request.url.path} not found"
            error_code = "NOT_FOUND"
            details = None
        else:
            message = str(exc.detail) if exc.detail else "An error occurred"
            error_code = "HTTP_ERROR"
            details = None

        logger.warning(
            "HTTP exception: %s",
            message,
            extra={
                "request_id": getattr(request.state, "request_id", None),
                "status_code": exc.status_code,
                "error_code": error_code,
            },
        )
        return _error_response(
            request,
            exc.status_code,
            error_code,
            message,
            details,
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        # Convert errors to JSON-serializable format
        errors = []
        for error in exc.errors():
            errors.append(
                {
                    "loc": list(error.get("loc", [])),
                    "msg": str(error.get("msg", "Validation error")),
                    "type": error.get("type", "value_error"),
                }
            )

        logger.warning(
            "Validation error",
            extra={"request_id": getattr(request.state, "request_id", None), "errors": errors},
        )
        return _error_response(request, 422, "VALIDATION_ERROR", "Invalid request data", errors)

    # Only reached when a middleware itself fails
    @app.exception_handler(Exception)
    async def unhandled_exception_handler(request: Request, exc: Exception):
        logger.error(
            "Unhandled error: %s",
            exc,
            exc_info=exc,
            extra={"request_id": getattr(request.state, "request_id", None)},
        )
        return _error_response(request, 500, "INTERNAL_ERROR", "An unexpected error occurred")


def setup_routers(app: FastAPI):
    """Configure application routers."""
    # Import routers
    from app.domains.auth.controller import router as auth_router
    from app.domains.file.controller import router as file_router
    from app.domains.health.controller import router as health_router
    from app.domains.item.controller import router as item_router

    @app.get("/")
    async def root():
        """Root endpoint with API information."""
        return {
            "name": settings.app_name,
            "version": settings.version,
            "endpoints": {
                "health": "/health",
                "auth": "/api/auth/*",
                "items": "/api/items",
                "files": "/api/files",
            },
        }

    # Include domain routers
    app.include_router(health_router)
    app.include_router(auth_router)
    app.include_router(item_router)
    app.include_router(file_router)


# Create the application instance
app = create_app()


def main():
    """Entry point for running the application directly."""
    import uvicorn

    uvicorn.run(
        "app.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.environment == "development",
        log_level=settings.log_level.value.lower(),
    )


if __name__ == "__main__":
    main()
