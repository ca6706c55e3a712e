"""Tests for role derivation and the permission matrix."""
from __future__ import annotations

import pytest

from core.permissions import (
    ALL_ACTIONS,
    Role,
    can_access_all_deals,
    can_manage_members,
    get_actions_for_resource,
    get_effective_role,
    get_permissions,
    get_role_description,
    get_role_display_name,
    has_all_permissions,
    has_any_permission,
    has_permission,
    is_admin,
    is_valid_role,
)
from core.types import SessionUser


class TestEffectiveRole:
    @pytest.mark.parametrize(
        "is_master, org_role, expected",
        [
            (True, None, Role.MASTER),
            (True, "vendedor", Role.MASTER),
            (True, "gerente", Role.MASTER),
            (False, "gerente", Role.GERENTE),
            (False, "vendedor", Role.VENDEDOR),
            (False, None, Role.VENDEDOR),
            (False, "desconhecido", Role.VENDEDOR),
        ],
    )
    def test_derivation(self, is_master, org_role, expected):
        assert get_effective_role(is_master, org_role) is expected

    def test_session_user_role_is_computed(self):
        user = SessionUser(
            id="u1",
            email="a@b.com",
            name="A",
            is_master=False,
            current_org_id="o1",
            current_org_role="gerente",
        )
        assert user.role is Role.GERENTE
        assert user.as_dict()["role"] == "gerente"

    def test_session_user_without_org(self):
        user = SessionUser(id="u1", email="a@b.com", name=None, is_master=False)
        assert not user.has_organization
        assert user.role is Role.VENDEDOR


class TestPermissionMatrix:
    def test_master_has_everything(self):
        assert get_permissions(Role.MASTER) == list(ALL_ACTIONS)

    def test_gerente_has_everything_but_admin(self):
        granted = set(get_permissions("gerente"))
        assert "contacts:update" in granted
        assert "members:manage" in granted
        assert not any(action.startswith("admin:") for action in granted)

    @pytest.mark.parametrize(
        "action",
        ["contacts:read", "notifications:read", "deals:read_own", "deals:update", "reports:read_own"],
    )
    def test_vendedor_granted(self, action):
        assert has_permission(Role.VENDEDOR, action)

    @pytest.mark.parametrize(
        "action",
        ["contacts:update", "contacts:delete", "deals:read", "members:manage", "admin:access"],
    )
    def test_vendedor_denied(self, action):
        assert not has_permission(Role.VENDEDOR, action)

    def test_unknown_role_gets_nothing(self):
        assert not has_permission("visitante", "contacts:read")
        assert get_permissions("visitante") == []

    def test_unknown_action_denied(self):
        assert not has_permission(Role.MASTER, "contacts:explode")

    def test_helpers(self):
        assert can_access_all_deals("gerente")
        assert not can_access_all_deals("vendedor")
        assert can_manage_members("gerente")
        assert not can_manage_members("vendedor")
        assert is_admin("master")
        assert not is_admin("gerente")

    def test_any_and_all(self):
        assert has_any_permission("vendedor", ["contacts:update", "contacts:read"])
        assert not has_all_permissions("vendedor", ["contacts:update", "contacts:read"])
        assert has_all_permissions("gerente", ["contacts:update", "contacts:read"])


class TestRoleMetadata:
    def test_display_names(self):
        assert get_role_display_name(Role.MASTER) == "Administrador Master"
        assert get_role_display_name("vendedor") == "Vendedor"
        assert get_role_display_name("outro") == "outro"

    def test_descriptions(self):
        assert get_role_description("gerente") == "Acesso total dentro da organização"
        assert get_role_description("outro") == ""

    def test_actions_for_resource(self):
        assert get_actions_for_resource("contacts") == [
            "contacts:read",
            "contacts:create",
            "contacts:update",
            "contacts:delete",
        ]
        assert get_actions_for_resource("nothing") == []

    def test_valid_roles(self):
        assert is_valid_role("master")
        assert not is_valid_role("admin")
