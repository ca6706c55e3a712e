"""FastAPI application entry point with global error handling."""
from __future__ import annotations

import time
import uuid
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI, Request, Response
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from core.config import get_settings
from core.exceptions import (
    AccountLockedError,
    AuthenticationError,
    ConfigurationError,
    NotFoundError,
    PermissionDeniedError,
    RateLimitError,
    RevSendError,
    ValidationError,
)
from core.logging_config import get_context_logger, get_logger, log_request, setup_logging
from api.routes import auth, contacts, dashboard, health, notifications

LOGGER = get_logger(__name__)
SETTINGS = get_settings()

REQUEST_ID_HEADER = "X-Request-ID"


def _error(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message})


def _request_logger(request: Request):
    user = getattr(request.state, "user", None)
    return get_context_logger(
        __name__,
        request_id=getattr(request.state, "request_id", None),
        user_id=user.id if user else None,
        organization_id=user.current_org_id if user else None,
    )


def _unhandled_error(request: Request, exc: Exception) -> JSONResponse:
    _request_logger(request).error(
        f"Unhandled error on {request.method} {request.url.path}",
        exc_info=exc,
    )
    return _error(500, "Internal server error")


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    Application lifespan handler.

    Sets up logging and validates the database. Startup is non-blocking:
    the app starts even if the database is not ready.
    """
    setup_logging(level=SETTINGS.log_level, json_format=SETTINGS.log_format == "json")

    LOGGER.info(
        "API application starting",
        extra={"extra_data": {
            "environment": SETTINGS.environment,
            "locale": SETTINGS.locale,
            "database_url": SETTINGS.database_url,
        }},
    )

    try:
        from core.db import init_db, validate_database
        db_status = validate_database()

        if db_status["status"] == "error":
            LOGGER.error(
                "Database validation failed - app will start without database",
                extra={"extra_data": {"errors": db_status["errors"]}},
            )
        elif db_status["status"] == "missing_tables":
            LOGGER.warning(
                "Missing database tables detected - attempting to create",
                extra={"extra_data": {"missing": db_status["tables_missing"]}},
            )
            init_result = init_db(create_missing_only=True)
            if init_result["status"] == "error":
                LOGGER.error(
                    "Failed to create missing tables",
                    extra={"extra_data": {"error": init_result.get("error")}},
                )
        else:
            LOGGER.info("Database validation passed")
    except Exception as e:
        LOGGER.error(f"Database validation error during startup: {e} - app will start anyway")

    yield
    LOGGER.info("API application shutting down")


def create_app() -> FastAPI:
    """
    Create and configure the FastAPI application.

    Returns:
        Configured FastAPI application instance with:
        - CORS and request-logging middleware
        - Global exception handlers
        - All API routes
    """
    application = FastAPI(
        title="RevSend CRM API",
        description="Multi-tenant CRM with lead scoring and notifications",
        version="1.0.0",
        lifespan=lifespan,
        docs_url="/docs",
        redoc_url="/redoc",
    )

    # -------------------------------------------------------------------------
    # Middleware
    # -------------------------------------------------------------------------
    application.add_middleware(
        CORSMiddleware,
        allow_origins=SETTINGS.get_allowed_origins(),
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @application.middleware("http")
    async def request_context(request: Request, call_next) -> Response:
        request.state.request_id = request.headers.get(REQUEST_ID_HEADER) or uuid.uuid4().hex
        started = time.perf_counter()
        LOGGER.debug(
            "Request started",
            extra={"extra_data": {
                "request_id": request.state.request_id,
                "method": request.method,
                "path": request.url.path,
            }},
        )

        try:
            response = await call_next(request)
        except Exception as exc:
            response = _unhandled_error(request, exc)

        log_request(
            _request_logger(request),
            request.method,
            request.url.path,
            response.status_code,
            (time.perf_counter() - started) * 1000,
        )
        response.headers[REQUEST_ID_HEADER] = request.state.request_id
        return response

    # -------------------------------------------------------------------------
    # Global Exception Handlers
    # -------------------------------------------------------------------------

    @application.exception_handler(AccountLockedError)
    async def account_locked_handler(request: Request, exc: AccountLockedError) -> JSONResponse:
        """Handle locked accounts."""
        return _error(423, str(exc))

    @application.exception_handler(AuthenticationError)
    async def authentication_handler(request: Request, exc: AuthenticationError) -> JSONResponse:
        """Handle missing or invalid sessions."""
        return _error(401, str(exc))

    @application.exception_handler(PermissionDeniedError)
    async def permission_handler(request: Request, exc: PermissionDeniedError) -> JSONResponse:
        """Handle missing permissions and missing organization context."""
        _request_logger(request).warning(
            f"Permission denied: {exc}",
            extra={"extra_data": {"path": request.url.path}},
        )
        return _error(403, str(exc))

    @application.exception_handler(NotFoundError)
    async def not_found_handler(request: Request, exc: NotFoundError) -> JSONResponse:
        """Handle records missing from the caller's scope."""
        return _error(404, str(exc))

    @application.exception_handler(ValidationError)
    async def validation_handler(request: Request, exc: ValidationError) -> JSONResponse:
        """Handle validation errors."""
        _request_logger(request).warning(
            f"Validation error: {exc}",
            extra={"extra_data": {"path": request.url.path}},
        )
        return _error(400, str(exc))

    @application.exception_handler(RateLimitError)
    async def rate_limit_handler(request: Request, exc: RateLimitError) -> JSONResponse:
        """Handle rate limit errors."""
        _request_logger(request).warning(
            f"Rate limit hit: {exc}",
            extra={"extra_data": {"path": request.url.path}},
        )
        return _error(429, str(exc))

    @application.exception_handler(ConfigurationError)
    async def configuration_handler(request: Request, exc: ConfigurationError) -> JSONResponse:
        """Handle configuration errors."""
        _request_logger(request).error(f"Configuration error: {exc}")
        return _error(500, "Service misconfiguration")

    @application.exception_handler(RevSendError)
    async def app_error_handler(request: Request, exc: RevSendError) -> JSONResponse:
        """Handle all other application errors."""
        _request_logger(request).error(f"Application error: {exc}", exc_info=True)
        return _error(500, "Internal server error")

    @application.exception_handler(Exception)
    async def unhandled_handler(request: Request, exc: Exception) -> JSONResponse:
        """Handle unexpected errors raised outside the request middleware."""
        return _unhandled_error(request, exc)

    # -------------------------------------------------------------------------
    # Include Routers
    # -------------------------------------------------------------------------
    application.include_router(health.router, tags=["Health"])
    application.include_router(auth.router, prefix="/api/auth", tags=["Auth"])
    application.include_router(contacts.router, prefix="/api/contacts", tags=["Contacts"])
    application.include_router(
        notifications.router, prefix="/api/notifications", tags=["Notifications"]
    )
    application.include_router(dashboard.router, prefix="/dashboard", tags=["Dashboard"])

    return application


# Create the application instance
app = create_app()
