"""Custom exceptions for the RevSend CRM API."""
from __future__ import annotations


class RevSendError(Exception):
    """Base exception for all application errors."""

    pass


# =============================================================================
# Configuration Errors
# =============================================================================


class ConfigurationError(RevSendError):
    """Raised when required configuration is missing or invalid."""

    pass


# =============================================================================
# Authentication & Authorization Errors
# =============================================================================


class AuthenticationError(RevSendError):
    """Raised when a request carries no valid session."""

    def __init__(self, message: str = "Unauthorized") -> None:
        super().__init__(message)


class AccountLockedError(AuthenticationError):
    """Raised when an account is locked after repeated failed logins."""

    def __init__(self, message: str = "Account locked. Try again in 15 minutes.") -> None:
        super().__init__(message)


class PermissionDeniedError(RevSendError):
    """Raised when the effective role lacks the required permission."""

    def __init__(self, message: str = "Forbidden") -> None:
        super().__init__(message)


class OrganizationRequiredError(PermissionDeniedError):
    """Raised when an organization-scoped route is hit without an active organization."""

    def __init__(self, message: str = "Nenhuma organização selecionada") -> None:
        super().__init__(message)


class RateLimitError(RevSendError):
    """Raised when a client exceeds a request rate limit."""

    pass


# =============================================================================
# Lookup & Validation Errors
# =============================================================================


class NotFoundError(RevSendError):
    """Raised when a requested record does not exist in the caller's scope."""

    pass


class ContactNotFoundError(NotFoundError):
    """Raised when a contact cannot be found."""

    def __init__(self, message: str = "Contato não encontrado") -> None:
        super().__init__(message)


class ValidationError(RevSendError):
    """Raised when request data validation fails."""

    pass


__all__ = [
    # Base
    "RevSendError",
    # Configuration
    "ConfigurationError",
    # Auth
    "AuthenticationError",
    "AccountLockedError",
    "PermissionDeniedError",
    "OrganizationRequiredError",
    "RateLimitError",
    # Lookup & Validation
    "NotFoundError",
    "ContactNotFoundError",
    "ValidationError",
]
