"""
Connect Vida - Permissions
Permissões por área do sistema e presets por papel
"""
from enum import Enum
from typing import List

from connect_vida.models.member import Member, MemberRole


class PermissionId(str, Enum):
    MEMBER_MANAGEMENT = "member-management"
    MINISTRIES = "ministries"
    EVENTS_MANAGEMENT = "events-management"
    DEVOTIONALS_MANAGEMENT = "devotionals-management"
    ORDER_OF_SERVICE = "order-of-service"
    JOURNEY_CONFIG = "journey-config"
    FINANCIAL_PANEL = "financial-panel"
    KIDS_MANAGEMENT = "kids-management"
    NOTIFICATION_MANAGEMENT = "notification-management"
    DEVOTIONAL_APPROVER = "devotional-approver"
    SYSTEM_SETTINGS = "system-settings"


AVAILABLE_PERMISSIONS = [
    (PermissionId.MEMBER_MANAGEMENT, "Gestão de Membros"),
    (PermissionId.MINISTRIES, "Gestão de Ministério"),
    (PermissionId.EVENTS_MANAGEMENT, "Gestão de Eventos"),
    (PermissionId.DEVOTIONALS_MANAGEMENT, "Gestão de Devocionais"),
    (PermissionId.ORDER_OF_SERVICE, "Ordem de Culto/Eventos"),
    (PermissionId.JOURNEY_CONFIG, "Configuração da Jornada"),
    (PermissionId.FINANCIAL_PANEL, "Painel Financeiro"),
    (PermissionId.KIDS_MANAGEMENT, "Gestão Kids"),
    (PermissionId.NOTIFICATION_MANAGEMENT, "Gestão de Notificações"),
    (PermissionId.DEVOTIONAL_APPROVER, "Aprovar Devocionais"),
    (PermissionId.SYSTEM_SETTINGS, "Configurações do Sistema"),
]

ALL_PERMISSIONS = [p.value for p, _ in AVAILABLE_PERMISSIONS]

ROLE_PRESETS = {
    MemberRole.PASTOR.value: [
        PermissionId.MEMBER_MANAGEMENT.value,
        PermissionId.MINISTRIES.value,
        PermissionId.EVENTS_MANAGEMENT.value,
        PermissionId.DEVOTIONALS_MANAGEMENT.value,
        PermissionId.ORDER_OF_SERVICE.value,
        PermissionId.JOURNEY_CONFIG.value,
        PermissionId.FINANCIAL_PANEL.value,
        PermissionId.KIDS_MANAGEMENT.value,
        PermissionId.NOTIFICATION_MANAGEMENT.value,
    ],
    MemberRole.MINISTRY_LEADER.value: [
        PermissionId.MINISTRIES.value,
        PermissionId.ORDER_OF_SERVICE.value,
        PermissionId.EVENTS_MANAGEMENT.value,
        PermissionId.DEVOTIONALS_MANAGEMENT.value,
    ],
    MemberRole.FINANCE.value: [PermissionId.FINANCIAL_PANEL.value],
    MemberRole.INTEGRATION.value: [
        PermissionId.MEMBER_MANAGEMENT.value,
        PermissionId.JOURNEY_CONFIG.value,
    ],
    MemberRole.MEDIA.value: [PermissionId.ORDER_OF_SERVICE.value],
}


def role_permission_preset(role: str) -> List[str]:
    """Permissões padrão de um papel"""
    if role in (MemberRole.SUPER_ADMIN.value, MemberRole.ADMIN.value):
        return list(ALL_PERMISSIONS)
    return list(ROLE_PRESETS.get(role, []))


def effective_permissions(member: Member) -> List[str]:
    """Lista explícita do membro, ou o preset do papel quando não houver"""
    if member.permissions is not None:
        return list(member.permissions)
    return role_permission_preset(member.role)


def has_permission(member: Member, permission: str) -> bool:
    return permission in effective_permissions(member)
