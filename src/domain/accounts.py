"""Account domain service - credentials login, lockout and organization context."""
from __future__ import annotations

from dataclasses import dataclass
from datetime import timedelta
from typing import Optional

from sqlalchemy import select
from sqlalchemy.orm import Session

from core.config import get_settings
from core.exceptions import AccountLockedError, NotFoundError, PermissionDeniedError
from core.logging_config import get_logger
from core.models import Organization, OrganizationMember, User
from core.auth import verify_password
from core.types import SessionUser, TokenClaims
from core.utils import ensure_aware, utcnow

LOGGER = get_logger(__name__)
SETTINGS = get_settings()


@dataclass
class OrganizationSwitch:
    """Outcome of switching the active organization."""

    organization: Organization
    role: Optional[str]
    session_user: SessionUser

    def organization_dict(self) -> dict:
        return {
            "id": self.organization.id,
            "name": self.organization.name,
            "slug": self.organization.slug,
        }


class AccountService:
    """Service for authentication and session resolution."""

    def __init__(self, session: Session) -> None:
        self.session = session

    def _is_locked(self, user: User) -> bool:
        if user.failed_login_attempts < SETTINGS.max_login_attempts:
            return False
        last_failed = ensure_aware(user.last_failed_login)
        if last_failed is None:
            return False
        return utcnow() - last_failed < timedelta(minutes=SETTINGS.lockout_duration_minutes)

    def authenticate(self, email: str, password: str) -> Optional[User]:
        """
        Check credentials.

        Returns:
            The user on success, None for unknown email, inactive user or wrong password.

        Raises:
            AccountLockedError: Too many recent failed attempts.
        """
        if not email or not password:
            return None

        user = self.session.scalars(select(User).where(User.email == email)).one_or_none()
        if user is None or not user.is_active:
            return None

        if self._is_locked(user):
            LOGGER.warning(f"Login attempt on locked account {user.id}")
            raise AccountLockedError()

        if not verify_password(password, user.password_hash):
            user.failed_login_attempts = (user.failed_login_attempts or 0) + 1
            user.last_failed_login = utcnow()
            self.session.flush()
            LOGGER.info(
                f"Failed login for user {user.id}",
                extra={"extra_data": {"attempts": user.failed_login_attempts}},
            )
            return None

        if user.failed_login_attempts:
            user.failed_login_attempts = 0
            user.last_failed_login = None
            self.session.flush()

        return user

    def get_membership(self, user_id: str, organization_id: str) -> Optional[OrganizationMember]:
        return self.session.scalars(
            select(OrganizationMember).where(
                OrganizationMember.user_id == user_id,
                OrganizationMember.organization_id == organization_id,
            )
        ).one_or_none()

    def default_membership(self, user_id: str) -> Optional[OrganizationMember]:
        """Earliest membership of a user, used as the initial organization."""
        return self.session.scalars(
            select(OrganizationMember)
            .where(OrganizationMember.user_id == user_id)
            .order_by(OrganizationMember.created_at.asc(), OrganizationMember.id.asc())
            .limit(1)
        ).first()

    def build_session_user(self, user: User, organization_id: Optional[str]) -> SessionUser:
        """
        Build the principal for a user in an organization context.

        A non-master user without membership in ``organization_id`` ends up
        with no active organization.
        """
        org_role: Optional[str] = None
        if organization_id is not None:
            membership = self.get_membership(user.id, organization_id)
            if membership is not None:
                org_role = membership.role
            elif not user.is_master:
                organization_id = None

        return SessionUser(
            id=user.id,
            email=user.email,
            name=user.name,
            is_master=user.is_master,
            current_org_id=organization_id,
            current_org_role=org_role,
        )

    def login_session_user(self, user: User) -> SessionUser:
        """Principal right after login, in the user's default organization."""
        membership = self.default_membership(user.id)
        return self.build_session_user(user, membership.organization_id if membership else None)

    def resolve_session_user(self, claims: TokenClaims) -> Optional[SessionUser]:
        """
        Resolve a decoded token into a principal using current database state.

        Returns:
            SessionUser, or None if the user no longer exists or is inactive.
        """
        user = self.session.get(User, claims.user_id)
        if user is None or not user.is_active:
            return None
        return self.build_session_user(user, claims.current_org_id)

    def switch_organization(self, principal: SessionUser, organization_id: str) -> OrganizationSwitch:
        """
        Switch the active organization.

        Masters may enter any organization; everyone else needs a membership.

        Raises:
            NotFoundError: Organization does not exist.
            PermissionDeniedError: Caller is not a member.
        """
        organization = self.session.get(Organization, organization_id)
        if organization is None:
            raise NotFoundError("Organização não encontrada")

        membership = self.get_membership(principal.id, organization_id)
        if membership is None and not principal.is_master:
            raise PermissionDeniedError("Você não é membro desta organização")

        role = membership.role if membership else None
        switched = SessionUser(
            id=principal.id,
            email=principal.email,
            name=principal.name,
            is_master=principal.is_master,
            current_org_id=organization.id,
            current_org_role=role,
        )

        LOGGER.info(
            f"User {principal.id} switched to organization {organization.id}",
            extra={"extra_data": {"role": switched.role.value}},
        )
        return OrganizationSwitch(organization=organization, role=role, session_user=switched)


__all__ = ["AccountService", "OrganizationSwitch"]
