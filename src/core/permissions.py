"""Role-based access control for the multi-tenant CRM.

Roles:
- master: global super-admin, accesses every organization
- gerente: full access within its own organization
- vendedor: limited access, read-only campaigns and own deals only
"""
from __future__ import annotations

import enum
from typing import Dict, FrozenSet, Iterable, List, Optional, Union


class Role(str, enum.Enum):
    """Effective role used for permission checks."""
    MASTER = "master"
    GERENTE = "gerente"
    VENDEDOR = "vendedor"


# Every action known to the system, grouped by resource
ALL_ACTIONS: tuple[str, ...] = (
    # Campaigns
    "campaigns:read", "campaigns:create", "campaigns:update", "campaigns:delete", "campaigns:start",
    # Contact lists
    "lists:read", "lists:create", "lists:update", "lists:delete",
    # Contacts
    "contacts:read", "contacts:create", "contacts:update", "contacts:delete",
    # Tags
    "tags:read", "tags:create", "tags:update", "tags:delete",
    # Templates
    "templates:read", "templates:create", "templates:update", "templates:delete",
    # WhatsApp
    "whatsapp:read", "whatsapp:connect", "whatsapp:disconnect",
    # Deals (CRM)
    "deals:read", "deals:read_own", "deals:create", "deals:update", "deals:delete", "deals:assign",
    # Pipeline
    "pipeline:read", "pipeline:create", "pipeline:update", "pipeline:delete",
    # Reports
    "reports:read", "reports:read_own",
    # Webhooks
    "webhooks:read", "webhooks:create", "webhooks:update", "webhooks:delete",
    # Media
    "media:read", "media:upload", "media:delete",
    # Organization
    "org:read", "org:update",
    "members:read", "members:manage", "members:invite",
    # Blacklist
    "blacklist:read", "blacklist:manage",
    # Roulette
    "roulette:read", "roulette:manage",
    # Notifications
    "notifications:read", "notifications:manage",
    # Audit
    "audit:read",
    # Admin (master only)
    "admin:access", "admin:orgs", "admin:users",
)

_MASTER_ONLY_PREFIX = "admin:"

PERMISSIONS: Dict[Role, FrozenSet[str]] = {
    Role.MASTER: frozenset(ALL_ACTIONS),
    Role.GERENTE: frozenset(a for a in ALL_ACTIONS if not a.startswith(_MASTER_ONLY_PREFIX)),
    Role.VENDEDOR: frozenset({
        "campaigns:read",
        "lists:read",
        "contacts:read",
        "tags:read",
        "templates:read",
        "whatsapp:read",
        "deals:read_own",
        "deals:create",
        "deals:update",  # own deals only
        "pipeline:read",
        "reports:read_own",
        "media:read",
        "org:read",
        "members:read",
        "notifications:read",
    }),
}

ROLE_DISPLAY_NAMES: Dict[Role, str] = {
    Role.MASTER: "Administrador Master",
    Role.GERENTE: "Gerente",
    Role.VENDEDOR: "Vendedor",
}

ROLE_DESCRIPTIONS: Dict[Role, str] = {
    Role.MASTER: "Acesso total ao sistema, todas as organizações",
    Role.GERENTE: "Acesso total dentro da organização",
    Role.VENDEDOR: "Visualiza campanhas, gerencia seus próprios negócios",
}

RoleLike = Union[Role, str]


def _coerce_role(role: RoleLike) -> Optional[Role]:
    if isinstance(role, Role):
        return role
    try:
        return Role(role)
    except ValueError:
        return None


def has_permission(role: RoleLike, action: str) -> bool:
    """Check if a role has a specific permission. Unknown roles get nothing."""
    resolved = _coerce_role(role)
    if resolved is None:
        return False
    return action in PERMISSIONS[resolved]


def get_effective_role(is_master: bool, org_role: Optional[str]) -> Role:
    """
    Derive the effective role from the master flag and the organization role.

    This is the only place a role is produced; it is never stored.
    """
    if is_master:
        return Role.MASTER
    if org_role == Role.GERENTE.value:
        return Role.GERENTE
    # No org role, or any other org role, falls back to the least privileged role
    return Role.VENDEDOR


def get_permissions(role: RoleLike) -> List[str]:
    """Get all permissions for a role, in canonical action order."""
    resolved = _coerce_role(role)
    if resolved is None:
        return []
    granted = PERMISSIONS[resolved]
    return [action for action in ALL_ACTIONS if action in granted]


def can_access_all_deals(role: RoleLike) -> bool:
    """Check if user can access all deals or only their own."""
    return has_permission(role, "deals:read")


def can_manage_members(role: RoleLike) -> bool:
    return has_permission(role, "members:manage")


def is_admin(role: RoleLike) -> bool:
    """Master-only admin access."""
    return has_permission(role, "admin:access")


def get_role_display_name(role: RoleLike) -> str:
    resolved = _coerce_role(role)
    if resolved is None:
        return str(role)
    return ROLE_DISPLAY_NAMES[resolved]


def get_role_description(role: RoleLike) -> str:
    resolved = _coerce_role(role)
    if resolved is None:
        return ""
    return ROLE_DESCRIPTIONS[resolved]


def get_actions_for_resource(resource: str) -> List[str]:
    """Filter known actions by resource prefix, e.g. ``contacts``."""
    prefix = f"{resource}:"
    return [action for action in ALL_ACTIONS if action.startswith(prefix)]


def is_valid_role(role: str) -> bool:
    return _coerce_role(role) is not None


def has_any_permission(role: RoleLike, actions: Iterable[str]) -> bool:
    return any(has_permission(role, action) for action in actions)


def has_all_permissions(role: RoleLike, actions: Iterable[str]) -> bool:
    return all(has_permission(role, action) for action in actions)


__all__ = [
    "Role",
    "ALL_ACTIONS",
    "PERMISSIONS",
    "has_permission",
    "get_effective_role",
    "get_permissions",
    "can_access_all_deals",
    "can_manage_members",
    "is_admin",
    "get_role_display_name",
    "get_role_description",
    "get_actions_for_resource",
    "is_valid_role",
    "has_any_permission",
    "has_all_permissions",
]
