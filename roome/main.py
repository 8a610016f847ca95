"""FastAPI application factory and main entrypoint."""

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from typing import Any

import structlog
from fastapi import FastAPI, Request, Response, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import ORJSONResponse

from roome import __version__
from roome.config import get_settings
from roome.database import get_engine
from roome.exceptions import RooMeError
from roome.logging import setup_logging
from roome.sentry import capture_exception, init_sentry

# Initialize logging
setup_logging()
logger = structlog.get_logger()


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan handler for startup/shutdown events."""
    settings = get_settings()
    logger.info(
        "Starting RooMe UI components API",
        env=settings.env,
        debug=settings.debug,
        version=__version__,
    )
    init_sentry()

    yield

    await get_engine().dispose()
    logger.info("Shutting down RooMe UI components API")


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    settings = get_settings()

    app = FastAPI(
        title="RooMe UI Components",
        description="Registry and renderer for admin-configured UI components",
        version=__version__,
        docs_url="/docs" if settings.debug else None,
        redoc_url="/redoc" if settings.debug else None,
        openapi_url="/openapi.json" if settings.debug else None,
        default_response_class=ORJSONResponse,
        lifespan=lifespan,
    )

    # Middleware (order matters - first added = last executed)
    # CORS must be last (first to process)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    from roome.metrics import MetricsMiddleware
    from roome.middleware import LoggingMiddleware, RequestIDMiddleware, SecurityHeadersMiddleware

    app.add_middleware(SecurityHeadersMiddleware)
    app.add_middleware(MetricsMiddleware)
    app.add_middleware(LoggingMiddleware)
    app.add_middleware(RequestIDMiddleware)

    register_exception_handlers(app)

    from roome.routers import health, ui_components

    app.include_router(health.router)
    app.include_router(ui_components.router, prefix="/api")

    @app.get("/metrics", include_in_schema=False)
    async def metrics() -> Response:
        from roome.metrics import get_metrics, get_metrics_content_type

        return Response(content=get_metrics(), media_type=get_metrics_content_type())

    return app


def _validation_errors(exc: RequestValidationError) -> list[dict[str, Any]]:
    """JSON-safe view of the validation errors (ctx may hold exception objects)."""
    return [
        {"loc": [str(p) for p in err.get("loc", ())], "msg": err.get("msg"), "type": err.get("type")}
        for err in exc.errors()
    ]


def register_exception_handlers(app: FastAPI) -> None:
    """Register custom exception handlers."""

    @app.exception_handler(RooMeError)
    async def roome_error_handler(request: Request, exc: RooMeError) -> ORJSONResponse:
        """Handle application exceptions."""
        logger.warning(
            "Application error",
            error_code=exc.code,
            message=exc.message,
            path=request.url.path,
        )
        return ORJSONResponse(
            status_code=exc.status_code,
            content={
                "error": {
                    "code": exc.code,
                    "message": exc.message,
                    **({"details": exc.details} if exc.details else {}),
                }
            },
        )

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(
        request: Request, exc: RequestValidationError
    ) -> ORJSONResponse:
        """Malformed payloads are answered with 400."""
        errors = _validation_errors(exc)
        first_error = errors[0] if errors else {"msg": "Validation error", "loc": []}

        # Drop the leading "body"/"query" segment
        field = ".".join(first_error["loc"][1:])

        logger.warning(
            "Validation error",
            path=request.url.path,
            errors=errors,
        )
        return ORJSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={
                "error": {
                    "code": "validation_error",
                    "message": first_error.get("msg") or "Validation error",
                    "field": field or None,
                    "details": {"errors": errors},
                }
            },
        )

    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception) -> ORJSONResponse:
        """Handle unhandled exceptions."""
        logger.error(
            "Unhandled exception",
            exc_info=exc,
            path=request.url.path,
            method=request.method,
        )
        capture_exception(exc)
        return ORJSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={
                "error": {
                    "code": "internal_error",
                    "message": "An unexpected error occurred",
                }
            },
        )


app = create_app()
