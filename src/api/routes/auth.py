"""Authentication routes: login, current principal, organization switch."""
from __future__ import annotations

from typing import Any, Dict

from fastapi import APIRouter, Depends, Request
from pydantic import BaseModel, ConfigDict, Field
from sqlalchemy.orm import Session

from api.auth_deps import check_login_rate_limit, require_permission
from api.deps import get_db
from core.auth import create_access_token
from core.config import get_settings
from core.exceptions import AuthenticationError
from core.logging_config import get_logger
from core.types import SessionUser
from domain.accounts import AccountService

router = APIRouter()
LOGGER = get_logger(__name__)
SETTINGS = get_settings()


# =============================================================================
# Request Models
# =============================================================================


class LoginRequest(BaseModel):
    """Credentials login body."""

    email: str = Field(..., min_length=3, max_length=255)
    password: str = Field(..., min_length=1, max_length=128)


class SwitchOrgRequest(BaseModel):
    """Organization switch body."""

    model_config = ConfigDict(populate_by_name=True)

    organization_id: str = Field(..., min_length=1, alias="organizationId")


# =============================================================================
# Routes
# =============================================================================


@router.post("/login")
async def login(
    body: LoginRequest,
    request: Request,
    db: Session = Depends(get_db),
) -> Dict[str, Any]:
    """
    Authenticate with email and password.

    Rate limited per client IP. Repeated failures lock the account.
    """
    client_ip = request.client.host if request.client else "unknown"
    check_login_rate_limit(client_ip)

    email = body.email.strip().lower()
    service = AccountService(db)
    user = service.authenticate(email, body.password)
    if user is None:
        # Failed-attempt counters must survive the error response
        db.commit()
        LOGGER.warning(f"Failed login attempt for: {email}")
        raise AuthenticationError("Email ou senha inválidos")

    principal = service.login_session_user(user)
    LOGGER.info(
        f"User logged in: {user.id}",
        extra={"extra_data": {"organization_id": principal.current_org_id}},
    )

    return {
        "access_token": create_access_token(principal),
        "token_type": "bearer",
        "expires_in": SETTINGS.jwt_access_token_expire_minutes * 60,
        "user": principal.as_dict(),
    }


@router.get("/me")
async def get_me(
    user: SessionUser = Depends(require_permission(allow_no_org=True)),
) -> Dict[str, Any]:
    """Current principal, including the derived role."""
    return user.as_dict()


@router.post("/switch-org")
async def switch_organization(
    body: SwitchOrgRequest,
    user: SessionUser = Depends(require_permission(allow_no_org=True)),
    db: Session = Depends(get_db),
) -> Dict[str, Any]:
    """Make another organization the active one and reissue the token."""
    switch = AccountService(db).switch_organization(user, body.organization_id)
    return {
        "success": True,
        "organization": switch.organization_dict(),
        "role": switch.role,
        "access_token": create_access_token(switch.session_user),
    }
