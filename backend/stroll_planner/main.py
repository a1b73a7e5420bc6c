"""Stroll Planner FastAPI Application.

Main entry point for the backend API server.
"""

import logging
from contextlib import asynccontextmanager
from typing import Any, Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import ValidationError

from stroll_planner.api import router
from stroll_planner.container import ServiceContainer, create_container
from stroll_planner.models import (
    AppError,
    ErrorCode,
    ErrorDetail,
    ErrorResponse,
    Violation,
)
from stroll_planner.settings import Settings

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    datefmt="%H:%M:%S",
)

logger = logging.getLogger(__name__)


def _violations(errors: list[dict[str, Any]]) -> list[Violation]:
    """One entry per invalid field, with the ``body`` prefix dropped."""
    violations = []
    for err in errors:
        loc = [str(part) for part in err.get("loc", ()) if part != "body"]
        message = str(err.get("msg", "invalid value"))
        if message.startswith("Value error, "):
            message = message[len("Value error, "):]
        violations.append(Violation(field=".".join(loc) or "body", message=message))
    return violations


def _error_response(status_code: int, detail: ErrorDetail) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content=ErrorResponse(error=detail).model_dump(mode="json"),
    )


def create_app(
    settings: Optional[Settings] = None,
    container: Optional[ServiceContainer] = None,
) -> FastAPI:
    """Build the application.

    A prebuilt ``container`` skips service construction at startup (tests).
    """
    settings = settings or (container.settings if container else Settings.from_env())

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Application lifespan handler."""
        # Startup
        owned = getattr(app.state, "container", None) is None
        if owned:
            app.state.container = create_container(settings)
        yield
        # Shutdown
        if owned:
            await app.state.container.aclose()

    app = FastAPI(
        title="Stroll Planner API",
        description="AI-assisted walking route planner",
        version="0.1.0",
        lifespan=lifespan,
    )
    if container is not None:
        app.state.container = container

    # CORS configuration
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Global exception handlers
    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError):
        """Handle malformed request bodies."""
        violations = _violations(list(exc.errors()))
        logger.warning(
            f"Validation failed at {request.url.path}: "
            f"{', '.join(v.field for v in violations)}"
        )
        return _error_response(
            400,
            ErrorDetail(
                code=ErrorCode.VALIDATION_ERROR,
                message="Validation failed",
                user_message="Invalid request format. Please check your input.",
                violations=violations,
            ),
        )

    @app.exception_handler(ValidationError)
    async def validation_exception_handler(request: Request, exc: ValidationError):
        """Handle Pydantic validation errors raised outside request parsing."""
        return _error_response(
            422,
            ErrorDetail(
                code=ErrorCode.VALIDATION_ERROR,
                message=str(exc),
                user_message="Invalid data. Please check your input.",
                violations=_violations(list(exc.errors())),
            ),
        )

    @app.exception_handler(AppError)
    async def app_error_handler(request: Request, exc: AppError):
        return JSONResponse(
            status_code=exc.status_code,
            content=exc.to_response().model_dump(mode="json"),
        )

    @app.exception_handler(Exception)
    async def general_exception_handler(request: Request, exc: Exception):
        """Handle unexpected errors."""
        logger.exception(f"Unhandled exception at {request.url.path}")
        return _error_response(
            500,
            ErrorDetail(
                code=ErrorCode.API_ERROR,
                message=str(exc),
                user_message="Something went wrong. Please try again.",
            ),
        )

    # Include API routes
    app.include_router(router, prefix="/api")

    @app.get("/health")
    async def health_check():
        """Health check endpoint."""
        return {"status": "healthy"}

    return app


app = create_app()
