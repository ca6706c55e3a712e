"""Authentication and permission dependencies for FastAPI routes."""
from __future__ import annotations

from collections import defaultdict
import time
from typing import Callable, Optional

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from api.deps import get_db
from core.auth import decode_access_token
from core.config import get_settings
from core.exceptions import (
    AuthenticationError,
    OrganizationRequiredError,
    PermissionDeniedError,
    RateLimitError,
)
from core.logging_config import get_context_logger
from core.permissions import has_permission
from core.types import SessionUser
from domain.accounts import AccountService

SETTINGS = get_settings()

security = HTTPBearer(auto_error=False)

# In-memory sliding window of login attempts per client IP
_login_attempts: dict[str, list[float]] = defaultdict(list)


def check_login_rate_limit(client_ip: str) -> None:
    """Raise RateLimitError if login attempts from this IP exceed the window limit."""
    now = time.time()
    window = SETTINGS.login_rate_window_seconds
    _login_attempts[client_ip] = [t for t in _login_attempts[client_ip] if now - t < window]
    if len(_login_attempts[client_ip]) >= SETTINGS.login_rate_limit:
        raise RateLimitError(f"Too many login attempts. Try again in {window} seconds.")
    _login_attempts[client_ip].append(now)


def reset_login_rate_limit() -> None:
    """Forget all recorded login attempts."""
    _login_attempts.clear()


def get_current_user(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    db: Session = Depends(get_db),
) -> SessionUser:
    """
    Validate the bearer token and resolve the principal.

    The organization role is read from the membership table on every
    request, so removed memberships take effect immediately.

    Raises:
        AuthenticationError: Missing, invalid or expired token, or unknown/inactive user.
    """
    if credentials is None:
        raise AuthenticationError()

    claims = decode_access_token(credentials.credentials)
    if claims is None:
        raise AuthenticationError()

    principal = AccountService(db).resolve_session_user(claims)
    if principal is None:
        raise AuthenticationError()

    request.state.user = principal
    logger = get_context_logger(
        __name__,
        request_id=getattr(request.state, "request_id", None),
        user_id=principal.id,
        organization_id=principal.current_org_id,
    )
    logger.debug("Session resolved", extra={"extra_data": {"role": principal.role.value}})
    return principal


def require_permission(
    action: Optional[str] = None,
    allow_no_org: bool = False,
) -> Callable[..., SessionUser]:
    """
    Build a dependency that authenticates and authorizes a request.

    Args:
        action: Permission string such as ``contacts:read``; None skips the check.
        allow_no_org: Accept principals without an active organization.

    Returns:
        Dependency yielding the SessionUser.
    """

    def dependency(current_user: SessionUser = Depends(get_current_user)) -> SessionUser:
        if action is not None and not has_permission(current_user.role, action):
            raise PermissionDeniedError()
        if not allow_no_org and not current_user.has_organization:
            raise OrganizationRequiredError()
        return current_user

    return dependency


__all__ = [
    "security",
    "check_login_rate_limit",
    "reset_login_rate_limit",
    "get_current_user",
    "require_permission",
]
