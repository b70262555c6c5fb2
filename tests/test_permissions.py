from connect_vida.core.permissions import (
    ALL_PERMISSIONS,
    effective_permissions,
    has_permission,
    role_permission_preset,
)
from connect_vida.models import Member


def test_admin_roles_get_everything():
    assert role_permission_preset("admin") == ALL_PERMISSIONS
    assert role_permission_preset("super_admin") == ALL_PERMISSIONS


def test_pastor_does_not_approve_devotionals_or_change_settings():
    preset = role_permission_preset("pastor")
    assert "devotional-approver" not in preset
    assert "system-settings" not in preset
    assert "financial-panel" in preset


def test_plain_roles_have_no_permissions():
    assert role_permission_preset("membro") == []
    assert role_permission_preset("voluntario") == []
    assert role_permission_preset("desconhecido") == []


def test_explicit_list_overrides_preset():
    member = Member(role="pastor", permissions=["events-management"])
    assert effective_permissions(member) == ["events-management"]
    assert has_permission(member, "member-management") is False

    member.permissions = []
    assert effective_permissions(member) == []

    member.permissions = None
    assert has_permission(member, "member-management") is True
