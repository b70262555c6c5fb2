"""
Connect Vida - Ministries API
Ministérios, liderança e escala de voluntários
"""
import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, func, or_, delete
from sqlalchemy.exc import IntegrityError

from connect_vida.database import get_db
from connect_vida.models import Member, MemberStatus, Ministry, MinistryVolunteer, VocationalTest
from connect_vida.schemas import MinistryCreate, MinistryUpdate, VolunteerAdd
from connect_vida.core.permissions import PermissionId, has_permission
from connect_vida.core.updates import apply_changes
from connect_vida.services.vocational_service import rank_ministries
from connect_vida.api.auth import get_active_member, require_permission

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/ministries", tags=["Ministries"])

ministry_manager = require_permission(PermissionId.MINISTRIES.value)


async def _get_ministry(db: AsyncSession, church_id: str, ministry_id: str) -> Ministry:
    ministry = (await db.execute(
        select(Ministry).where(Ministry.id == ministry_id, Ministry.church_id == church_id)
    )).scalar_one_or_none()
    if not ministry:
        raise HTTPException(status_code=404, detail="Ministério não encontrado")
    return ministry


async def _get_church_member(db: AsyncSession, church_id: str, member_id: str) -> Member:
    member = await db.get(Member, member_id)
    if not member or member.church_id != church_id:
        raise HTTPException(status_code=404, detail="Membro não encontrado nesta igreja")
    return member


async def _check_leader(db: AsyncSession, church_id: str, leader_id: Optional[str]):
    if leader_id is None:
        return
    leader = await db.get(Member, leader_id)
    if not leader or leader.church_id != church_id:
        raise HTTPException(status_code=400, detail="Líder precisa ser membro desta igreja")


def _can_manage_volunteers(member: Member, ministry: Ministry) -> bool:
    """Gestores de ministério ou o próprio líder"""
    return ministry.leader_id == member.id or has_permission(member, PermissionId.MINISTRIES.value)


async def _ministry_views(db: AsyncSession, ministries: list, member: Member) -> list:
    ids = [m.id for m in ministries]
    if not ids:
        return []

    counts = dict((await db.execute(
        select(MinistryVolunteer.ministry_id, func.count(MinistryVolunteer.id))
        .where(MinistryVolunteer.ministry_id.in_(ids))
        .group_by(MinistryVolunteer.ministry_id)
    )).all())
    mine = set((await db.execute(
        select(MinistryVolunteer.ministry_id).where(
            MinistryVolunteer.ministry_id.in_(ids),
            MinistryVolunteer.member_id == member.id
        )
    )).scalars().all())

    leader_ids = {m.leader_id for m in ministries if m.leader_id}
    leaders = {}
    if leader_ids:
        leaders = dict((await db.execute(
            select(Member.id, Member.full_name).where(Member.id.in_(leader_ids))
        )).all())

    return [
        m.to_dict(
            leader_name=leaders.get(m.leader_id),
            volunteer_count=counts.get(m.id, 0),
            is_volunteer=m.id in mine
        )
        for m in ministries
    ]


# ============================================================
# CONSULTA
# ============================================================

@router.get("")
async def list_ministries(
    member: Member = Depends(get_active_member),
    db: AsyncSession = Depends(get_db)
):
    """Ministérios da igreja em ordem alfabética"""
    ministries = (await db.execute(
        select(Ministry).where(Ministry.church_id == member.church_id).order_by(Ministry.name)
    )).scalars().all()
    return await _ministry_views(db, ministries, member)


@router.get("/mine")
async def my_ministries(
    member: Member = Depends(get_active_member),
    db: AsyncSession = Depends(get_db)
):
    """Ministérios que o membro lidera ou onde serve"""
    serving = select(MinistryVolunteer.ministry_id).where(MinistryVolunteer.member_id == member.id)
    ministries = (await db.execute(
        select(Ministry)
        .where(
            Ministry.church_id == member.church_id,
            or_(Ministry.leader_id == member.id, Ministry.id.in_(serving))
        )
        .order_by(Ministry.name)
    )).scalars().all()
    return await _ministry_views(db, ministries, member)


@router.get("/suggested")
async def suggested_ministries(
    member: Member = Depends(get_active_member),
    db: AsyncSession = Depends(get_db)
):
    """
    Ministérios da igreja ordenados pelo último teste vocacional do membro.
    Só entram ministérios com perfil vocacional definido.
    """
    test = (await db.execute(
        select(VocationalTest)
        .where(VocationalTest.member_id == member.id, VocationalTest.is_latest == True)  # noqa: E712
        .order_by(VocationalTest.created_at.desc())
    )).scalars().first()
    if not test:
        raise HTTPException(status_code=404, detail="Nenhum teste vocacional realizado")

    ranking = rank_ministries(test.ministry_sums())
    position = {r["ministry"]: index for index, r in enumerate(ranking)}
    percentages = {r["ministry"]: r["percentage"] for r in ranking}

    ministries = (await db.execute(
        select(Ministry).where(
            Ministry.church_id == member.church_id,
            Ministry.vocational_profile.is_not(None)
        )
    )).scalars().all()
    ministries = sorted(ministries, key=lambda m: (position.get(m.vocational_profile, len(position)), m.name))

    views = await _ministry_views(db, ministries, member)
    for view in views:
        view["match_percentage"] = percentages.get(view["vocational_profile"], 0)
    return views


@router.get("/{ministry_id}")
async def get_ministry(
    ministry_id: str,
    member: Member = Depends(get_active_member),
    db: AsyncSession = Depends(get_db)
):
    ministry = await _get_ministry(db, member.church_id, ministry_id)
    return (await _ministry_views(db, [ministry], member))[0]


# ============================================================
# GESTÃO
# ============================================================

@router.post("", status_code=status.HTTP_201_CREATED)
async def create_ministry(
    data: MinistryCreate,
    manager: Member = Depends(ministry_manager),
    db: AsyncSession = Depends(get_db)
):
    await _check_leader(db, manager.church_id, data.leader_id)

    ministry = Ministry(**data.model_dump(), church_id=manager.church_id)
    db.add(ministry)
    try:
        await db.commit()
    except IntegrityError:
        await db.rollback()
        raise HTTPException(status_code=409, detail="Já existe um ministério com este nome")

    logger.info(f"Ministério {ministry.name} criado por {manager.email}")
    return (await _ministry_views(db, [ministry], manager))[0]


@router.put("/{ministry_id}")
async def update_ministry(
    ministry_id: str,
    data: MinistryUpdate,
    manager: Member = Depends(ministry_manager),
    db: AsyncSession = Depends(get_db)
):
    ministry = await _get_ministry(db, manager.church_id, ministry_id)
    changes = data.model_dump(exclude_unset=True)
    await _check_leader(db, manager.church_id, changes.get("leader_id"))

    apply_changes(ministry, changes)
    try:
        await db.commit()
    except IntegrityError:
        await db.rollback()
        raise HTTPException(status_code=409, detail="Já existe um ministério com este nome")
    return (await _ministry_views(db, [ministry], manager))[0]


@router.delete("/{ministry_id}")
async def delete_ministry(
    ministry_id: str,
    manager: Member = Depends(ministry_manager),
    db: AsyncSession = Depends(get_db)
):
    ministry = await _get_ministry(db, manager.church_id, ministry_id)
    await db.execute(delete(MinistryVolunteer).where(MinistryVolunteer.ministry_id == ministry.id))
    await db.delete(ministry)
    await db.commit()

    logger.info(f"Ministério {ministry_id} excluído por {manager.email}")
    return {"message": "Ministério excluído com sucesso"}


# ============================================================
# VOLUNTÁRIOS
# ============================================================

@router.get("/{ministry_id}/volunteers")
async def list_volunteers(
    ministry_id: str,
    member: Member = Depends(get_active_member),
    db: AsyncSession = Depends(get_db)
):
    ministry = await _get_ministry(db, member.church_id, ministry_id)
    rows = (await db.execute(
        select(MinistryVolunteer, Member)
        .join(Member, Member.id == MinistryVolunteer.member_id)
        .where(MinistryVolunteer.ministry_id == ministry.id)
        .order_by(Member.full_name)
    )).all()
    return [volunteer.to_dict(volunteer_member) for volunteer, volunteer_member in rows]


@router.post("/{ministry_id}/volunteers", status_code=status.HTTP_201_CREATED)
async def add_volunteer(
    ministry_id: str,
    data: VolunteerAdd,
    member: Member = Depends(get_active_member),
    db: AsyncSession = Depends(get_db)
):
    """Escala um membro ativo da igreja no ministério"""
    ministry = await _get_ministry(db, member.church_id, ministry_id)
    if not _can_manage_volunteers(member, ministry):
        raise HTTPException(status_code=403, detail="Acesso não permitido")

    volunteer_member = await _get_church_member(db, member.church_id, data.member_id)
    if volunteer_member.status != MemberStatus.ACTIVE.value:
        raise HTTPException(status_code=409, detail="Apenas membros ativos podem ser voluntários")

    volunteer = MinistryVolunteer(
        ministry_id=ministry.id,
        member_id=volunteer_member.id,
        church_id=member.church_id,
        function=data.function
    )
    db.add(volunteer)
    try:
        await db.commit()
    except IntegrityError:
        await db.rollback()
        raise HTTPException(status_code=409, detail="Membro já é voluntário neste ministério")

    logger.info(f"Membro {volunteer_member.id} escalado no ministério {ministry.name} por {member.email}")
    return volunteer.to_dict(volunteer_member)


@router.delete("/{ministry_id}/volunteers/{member_id}")
async def remove_volunteer(
    ministry_id: str,
    member_id: str,
    member: Member = Depends(get_active_member),
    db: AsyncSession = Depends(get_db)
):
    ministry = await _get_ministry(db, member.church_id, ministry_id)
    if not _can_manage_volunteers(member, ministry):
        raise HTTPException(status_code=403, detail="Acesso não permitido")

    volunteer = (await db.execute(
        select(MinistryVolunteer).where(
            MinistryVolunteer.ministry_id == ministry.id,
            MinistryVolunteer.member_id == member_id
        )
    )).scalar_one_or_none()
    if not volunteer:
        raise HTTPException(status_code=404, detail="Voluntário não encontrado")

    await db.delete(volunteer)
    await db.commit()
    return {"message": "Voluntário removido"}
