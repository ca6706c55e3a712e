"""Shared dataclasses for the authenticated principal."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Optional

from core.permissions import Role, get_effective_role


@dataclass(slots=True, frozen=True)
class TokenClaims:
    """Decoded access-token payload. Carries no role: it is derived on use."""

    user_id: str
    email: str
    name: Optional[str]
    is_master: bool
    current_org_id: Optional[str]
    current_org_role: Optional[str]
    expires_at: int

    @classmethod
    def from_payload(cls, payload: Dict[str, Any]) -> "TokenClaims":
        return cls(
            user_id=str(payload["sub"]),
            email=payload.get("email", ""),
            name=payload.get("name"),
            is_master=bool(payload.get("is_master", False)),
            current_org_id=payload.get("current_org_id"),
            current_org_role=payload.get("current_org_role"),
            expires_at=int(payload.get("exp", 0)),
        )


@dataclass(slots=True, frozen=True)
class SessionUser:
    """
    The authenticated principal injected into route handlers.

    Populated by the authentication layer when the session is resolved.
    ``current_org_id`` is None when the user has not selected an organization.
    """

    id: str
    email: str
    name: Optional[str]
    is_master: bool
    current_org_id: Optional[str] = None
    current_org_role: Optional[str] = None

    @property
    def role(self) -> Role:
        """Effective role, computed from ``is_master`` and ``current_org_role``."""
        return get_effective_role(self.is_master, self.current_org_role)

    @property
    def has_organization(self) -> bool:
        return self.current_org_id is not None

    def as_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "email": self.email,
            "name": self.name,
            "isMaster": self.is_master,
            "currentOrgId": self.current_org_id,
            "currentOrgRole": self.current_org_role,
            "role": self.role.value,
        }


__all__ = ["TokenClaims", "SessionUser"]
