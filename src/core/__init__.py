"""Core module exports."""
from __future__ import annotations

from core.config import Settings, get_settings, reload_settings
from core.db import Base, SessionLocal, get_session
from core.exceptions import (
    # Base
    RevSendError,
    # Configuration
    ConfigurationError,
    # Auth
    AuthenticationError,
    AccountLockedError,
    PermissionDeniedError,
    OrganizationRequiredError,
    RateLimitError,
    # Lookup & Validation
    NotFoundError,
    ContactNotFoundError,
    ValidationError,
)
from core.logging_config import (
    setup_logging,
    get_logger,
    get_context_logger,
    log_request,
    JSONFormatter,
    ContextLogger,
)
from core.permissions import Role, get_effective_role, has_permission
from core.types import SessionUser, TokenClaims

__all__ = [
    # Config
    "Settings",
    "get_settings",
    "reload_settings",
    # Database
    "get_session",
    "SessionLocal",
    "Base",
    # Principal
    "SessionUser",
    "TokenClaims",
    "Role",
    "get_effective_role",
    "has_permission",
    # Exceptions - Base
    "RevSendError",
    # Exceptions - Config
    "ConfigurationError",
    # Exceptions - Auth
    "AuthenticationError",
    "AccountLockedError",
    "PermissionDeniedError",
    "OrganizationRequiredError",
    "RateLimitError",
    # Exceptions - Lookup & Validation
    "NotFoundError",
    "ContactNotFoundError",
    "ValidationError",
    # Logging
    "setup_logging",
    "get_logger",
    "get_context_logger",
    "log_request",
    "JSONFormatter",
    "ContextLogger",
]
