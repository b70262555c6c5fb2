"""
Connect Vida - Members API
Gestão de membros, aprovação, papéis e permissões
"""
import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, status, Query
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, func, or_

from connect_vida.core.clock import utcnow
from connect_vida.database import get_db
from connect_vida.models import Church, ChurchStatus, Member, MemberRole, MemberStatus
from connect_vida.schemas import (
    MemberCreate,
    MemberUpdate,
    MemberSelfUpdate,
    MemberJoinRequest,
    RoleUpdate,
    PermissionsUpdate
)
from connect_vida.core.permissions import PermissionId, ALL_PERMISSIONS, effective_permissions
from connect_vida.core.updates import apply_changes
from connect_vida.services.membership_service import (
    MemberLimitReached,
    ensure_member_capacity,
    refresh_member_count
)
from connect_vida.api.auth import get_token_claims, get_current_member, require_permission

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/members", tags=["Members"])

VALID_ROLES = [r.value for r in MemberRole]
VALID_STATUS = [s.value for s in MemberStatus]

member_manager = require_permission(PermissionId.MEMBER_MANAGEMENT.value)
settings_manager = require_permission(PermissionId.SYSTEM_SETTINGS.value)


async def _get_church_member(db: AsyncSession, church_id: str, member_id: str) -> Member:
    result = await db.execute(
        select(Member).where(Member.id == member_id, Member.church_id == church_id)
    )
    member = result.scalar_one_or_none()
    if not member:
        raise HTTPException(status_code=404, detail="Membro não encontrado")
    return member


async def _ensure_capacity(db: AsyncSession, church_id: str):
    church = await db.get(Church, church_id)
    try:
        await ensure_member_capacity(db, church)
    except MemberLimitReached:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="Limite de membros do plano atingido"
        )


# ============================================================
# PERFIL PRÓPRIO
# ============================================================

@router.post("/join", status_code=status.HTTP_201_CREATED)
async def join_church(
    data: MemberJoinRequest,
    claims: dict = Depends(get_token_claims),
    db: AsyncSession = Depends(get_db)
):
    """Auto cadastro em uma igreja (fica pendente de aprovação)"""
    if await db.get(Member, claims["sub"]):
        raise HTTPException(status_code=400, detail="Usuário já vinculado a uma igreja")

    church = await db.get(Church, data.church_id)
    if not church or church.status == ChurchStatus.INACTIVE.value:
        raise HTTPException(status_code=404, detail="Igreja não encontrada")

    email = data.email or claims.get("email")
    if not email:
        raise HTTPException(status_code=400, detail="Email é obrigatório")

    member = Member(
        id=claims["sub"],
        church_id=church.id,
        full_name=data.full_name,
        email=email,
        phone=data.phone,
        birth_date=data.birth_date,
        address=data.address,
        role=MemberRole.MEMBER.value,
        status=MemberStatus.PENDING.value
    )
    member.refresh_profile_completion()
    db.add(member)
    await db.commit()

    logger.info(f"Novo cadastro pendente {email} na igreja {church.id}")
    return member.to_dict()


@router.get("/me")
async def get_my_profile(member: Member = Depends(get_current_member)):
    return {**member.to_dict(), "effective_permissions": effective_permissions(member)}


@router.put("/me")
async def update_my_profile(
    data: MemberSelfUpdate,
    member: Member = Depends(get_current_member),
    db: AsyncSession = Depends(get_db)
):
    apply_changes(member, data.model_dump(exclude_unset=True))
    member.refresh_profile_completion()
    await db.commit()
    return member.to_dict()


# ============================================================
# GESTÃO
# ============================================================

@router.get("")
async def list_members(
    search: Optional[str] = None,
    status_filter: Optional[str] = Query(None, alias="status"),
    role: Optional[str] = None,
    skip: int = Query(0, ge=0),
    limit: int = Query(100, ge=1, le=500),
    manager: Member = Depends(member_manager),
    db: AsyncSession = Depends(get_db)
):
    query = select(Member).where(Member.church_id == manager.church_id)

    if search:
        search_filter = f"%{search}%"
        query = query.where(or_(
            Member.full_name.ilike(search_filter),
            Member.email.ilike(search_filter),
            Member.phone.ilike(search_filter)
        ))
    if status_filter:
        query = query.where(Member.status == status_filter)
    if role:
        query = query.where(Member.role == role)

    query = query.order_by(Member.full_name).offset(skip).limit(limit)
    result = await db.execute(query)
    return [m.to_dict() for m in result.scalars().all()]


@router.get("/stats")
async def member_stats(
    manager: Member = Depends(member_manager),
    db: AsyncSession = Depends(get_db)
):
    result = await db.execute(
        select(Member.status, func.count(Member.id))
        .where(Member.church_id == manager.church_id)
        .group_by(Member.status)
    )
    counts = {s: 0 for s in VALID_STATUS}
    counts.update(dict(result.all()))
    return {"total": sum(counts.values()), **counts}


@router.get("/{member_id}")
async def get_member(
    member_id: str,
    manager: Member = Depends(member_manager),
    db: AsyncSession = Depends(get_db)
):
    member = await _get_church_member(db, manager.church_id, member_id)
    return {**member.to_dict(), "effective_permissions": effective_permissions(member)}


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_member(
    data: MemberCreate,
    manager: Member = Depends(member_manager),
    db: AsyncSession = Depends(get_db)
):
    if data.role not in VALID_ROLES:
        raise HTTPException(status_code=400, detail="Papel inválido")
    if data.status not in VALID_STATUS:
        raise HTTPException(status_code=400, detail="Status inválido")
    if data.role == MemberRole.SUPER_ADMIN.value and manager.role != MemberRole.SUPER_ADMIN.value:
        raise HTTPException(status_code=403, detail="Apenas o administrador master pode conceder este papel")
    if await db.get(Member, data.id):
        raise HTTPException(status_code=400, detail="Usuário já vinculado a uma igreja")

    if data.status == MemberStatus.ACTIVE.value:
        await _ensure_capacity(db, manager.church_id)

    member = Member(**data.model_dump(), church_id=manager.church_id)
    if member.status == MemberStatus.ACTIVE.value:
        member.approved_by = manager.email
        member.approved_at = utcnow()
    member.refresh_profile_completion()
    db.add(member)

    await refresh_member_count(db, manager.church_id)
    await db.commit()

    logger.info(f"Membro {member.email} criado por {manager.email}")
    return member.to_dict()


@router.put("/{member_id}")
async def update_member(
    member_id: str,
    data: MemberUpdate,
    manager: Member = Depends(member_manager),
    db: AsyncSession = Depends(get_db)
):
    member = await _get_church_member(db, manager.church_id, member_id)
    apply_changes(member, data.model_dump(exclude_unset=True))
    member.refresh_profile_completion()
    await db.commit()
    return member.to_dict()


@router.post("/{member_id}/approve")
async def approve_member(
    member_id: str,
    manager: Member = Depends(member_manager),
    db: AsyncSession = Depends(get_db)
):
    """pendente -> ativo, respeitando o limite do plano"""
    member = await _get_church_member(db, manager.church_id, member_id)
    if member.status != MemberStatus.PENDING.value:
        raise HTTPException(status_code=409, detail="Membro não está pendente de aprovação")

    await _ensure_capacity(db, manager.church_id)

    member.status = MemberStatus.ACTIVE.value
    member.approved_by = manager.email
    member.approved_at = utcnow()

    await refresh_member_count(db, manager.church_id)
    await db.commit()

    logger.info(f"Membro {member.email} aprovado por {manager.email}")
    return member.to_dict()


@router.post("/{member_id}/deactivate")
async def deactivate_member(
    member_id: str,
    manager: Member = Depends(member_manager),
    db: AsyncSession = Depends(get_db)
):
    member = await _get_church_member(db, manager.church_id, member_id)
    if member.id == manager.id:
        raise HTTPException(status_code=400, detail="Não é possível desativar o próprio cadastro")

    member.status = MemberStatus.INACTIVE.value
    await refresh_member_count(db, manager.church_id)
    await db.commit()

    logger.info(f"Membro {member.email} desativado por {manager.email}")
    return member.to_dict()


@router.put("/{member_id}/role")
async def update_role(
    member_id: str,
    data: RoleUpdate,
    manager: Member = Depends(settings_manager),
    db: AsyncSession = Depends(get_db)
):
    if data.role not in VALID_ROLES:
        raise HTTPException(status_code=400, detail="Papel inválido")
    if data.role == MemberRole.SUPER_ADMIN.value and manager.role != MemberRole.SUPER_ADMIN.value:
        raise HTTPException(status_code=403, detail="Apenas o administrador master pode conceder este papel")

    member = await _get_church_member(db, manager.church_id, member_id)
    member.role = data.role
    await db.commit()

    logger.info(f"Papel de {member.email} alterado para {data.role} por {manager.email}")
    return {**member.to_dict(), "effective_permissions": effective_permissions(member)}


@router.put("/{member_id}/permissions")
async def update_permissions(
    member_id: str,
    data: PermissionsUpdate,
    manager: Member = Depends(settings_manager),
    db: AsyncSession = Depends(get_db)
):
    """Lista explícita de permissões; null volta ao preset do papel"""
    if data.permissions is not None:
        invalid = [p for p in data.permissions if p not in ALL_PERMISSIONS]
        if invalid:
            raise HTTPException(status_code=400, detail=f"Permissões inválidas: {', '.join(invalid)}")

    member = await _get_church_member(db, manager.church_id, member_id)
    member.permissions = list(dict.fromkeys(data.permissions)) if data.permissions is not None else None
    await db.commit()

    logger.info(f"Permissões de {member.email} atualizadas por {manager.email}")
    return {**member.to_dict(), "effective_permissions": effective_permissions(member)}
