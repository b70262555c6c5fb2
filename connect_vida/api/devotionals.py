"""
Connect Vida - Devotionals API
Devocionais da igreja (e da igreja mãe), curtidas e comentários
"""
import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, status, Query
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, func

from connect_vida.core.clock import utcnow
from connect_vida.database import get_db
from connect_vida.models import (
    Church,
    Devotional,
    DevotionalComment,
    DevotionalLike,
    DevotionalStatus,
    Member
)
from connect_vida.schemas import DevotionalCreate, DevotionalUpdate, DevotionalStatusUpdate, CommentCreate
from connect_vida.core.permissions import PermissionId, has_permission
from connect_vida.core.updates import apply_changes
from connect_vida.api.auth import get_active_member, require_permission

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/devotionals", tags=["Devotionals"])

devotional_manager = require_permission(PermissionId.DEVOTIONALS_MANAGEMENT.value)
devotional_approver = require_permission(PermissionId.DEVOTIONAL_APPROVER.value)


async def _visible_church_ids(db: AsyncSession, church_id: str) -> list:
    """Igreja do membro + igreja mãe (conteúdo compartilhado)"""
    church = await db.get(Church, church_id)
    ids = [church_id]
    if church and church.parent_church_id:
        ids.append(church.parent_church_id)
    return ids


async def _counts(db: AsyncSession, devotional_ids: list, member_id: str):
    if not devotional_ids:
        return {}, {}, set()
    likes = dict((await db.execute(
        select(DevotionalLike.devotional_id, func.count(DevotionalLike.id))
        .where(DevotionalLike.devotional_id.in_(devotional_ids))
        .group_by(DevotionalLike.devotional_id)
    )).all())
    comments = dict((await db.execute(
        select(DevotionalComment.devotional_id, func.count(DevotionalComment.id))
        .where(DevotionalComment.devotional_id.in_(devotional_ids))
        .group_by(DevotionalComment.devotional_id)
    )).all())
    mine = set((await db.execute(
        select(DevotionalLike.devotional_id).where(
            DevotionalLike.devotional_id.in_(devotional_ids),
            DevotionalLike.member_id == member_id
        )
    )).scalars().all())
    return likes, comments, mine


async def _devotional_view(db: AsyncSession, devotional: Devotional, member: Member) -> dict:
    likes, comments, mine = await _counts(db, [devotional.id], member.id)
    return devotional.to_dict(
        like_count=likes.get(devotional.id, 0),
        comment_count=comments.get(devotional.id, 0),
        liked_by_me=devotional.id in mine
    )


async def _get_visible(db: AsyncSession, member: Member, devotional_id: str) -> Devotional:
    """Devocional publicado visível ao membro (gestores veem qualquer status da própria igreja)"""
    devotional = await db.get(Devotional, devotional_id)
    if not devotional:
        raise HTTPException(status_code=404, detail="Devocional não encontrado")

    if devotional.church_id == member.church_id and has_permission(member, PermissionId.DEVOTIONALS_MANAGEMENT.value):
        return devotional

    visible = await _visible_church_ids(db, member.church_id)
    if devotional.church_id not in visible or devotional.status != DevotionalStatus.PUBLISHED.value:
        raise HTTPException(status_code=404, detail="Devocional não encontrado")
    return devotional


async def _get_own(db: AsyncSession, church_id: str, devotional_id: str) -> Devotional:
    result = await db.execute(
        select(Devotional).where(Devotional.id == devotional_id, Devotional.church_id == church_id)
    )
    devotional = result.scalar_one_or_none()
    if not devotional:
        raise HTTPException(status_code=404, detail="Devocional não encontrado")
    return devotional


@router.get("")
async def list_devotionals(
    status_filter: Optional[str] = Query(None, alias="status"),
    member: Member = Depends(get_active_member),
    db: AsyncSession = Depends(get_db)
):
    is_manager = has_permission(member, PermissionId.DEVOTIONALS_MANAGEMENT.value)

    if is_manager and status_filter and status_filter != DevotionalStatus.PUBLISHED.value:
        query = select(Devotional).where(
            Devotional.church_id == member.church_id,
            Devotional.status == status_filter
        )
    else:
        visible = await _visible_church_ids(db, member.church_id)
        query = select(Devotional).where(
            Devotional.church_id.in_(visible),
            Devotional.status == DevotionalStatus.PUBLISHED.value
        )

    query = query.order_by(Devotional.published_at.desc(), Devotional.created_at.desc())
    devotionals = (await db.execute(query)).scalars().all()

    likes, comments, mine = await _counts(db, [d.id for d in devotionals], member.id)
    return [
        d.to_dict(
            like_count=likes.get(d.id, 0),
            comment_count=comments.get(d.id, 0),
            liked_by_me=d.id in mine
        )
        for d in devotionals
    ]


@router.get("/{devotional_id}")
async def get_devotional(
    devotional_id: str,
    member: Member = Depends(get_active_member),
    db: AsyncSession = Depends(get_db)
):
    devotional = await _get_visible(db, member, devotional_id)
    return await _devotional_view(db, devotional, member)


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_devotional(
    data: DevotionalCreate,
    manager: Member = Depends(devotional_manager),
    db: AsyncSession = Depends(get_db)
):
    devotional = Devotional(
        **data.model_dump(),
        church_id=manager.church_id,
        author_id=manager.id,
        author_name=manager.full_name,
        status=DevotionalStatus.DRAFT.value
    )
    db.add(devotional)
    await db.commit()

    logger.info(f"Devocional {devotional.id} criado por {manager.email}")
    return devotional.to_dict()


@router.put("/{devotional_id}")
async def update_devotional(
    devotional_id: str,
    data: DevotionalUpdate,
    manager: Member = Depends(devotional_manager),
    db: AsyncSession = Depends(get_db)
):
    devotional = await _get_own(db, manager.church_id, devotional_id)
    apply_changes(devotional, data.model_dump(exclude_unset=True))
    await db.commit()
    return await _devotional_view(db, devotional, manager)


@router.delete("/{devotional_id}")
async def delete_devotional(
    devotional_id: str,
    manager: Member = Depends(devotional_manager),
    db: AsyncSession = Depends(get_db)
):
    devotional = await _get_own(db, manager.church_id, devotional_id)
    for model in (DevotionalLike, DevotionalComment):
        rows = (await db.execute(select(model).where(model.devotional_id == devotional.id))).scalars().all()
        for row in rows:
            await db.delete(row)
    await db.delete(devotional)
    await db.commit()
    return {"message": "Devocional excluído"}


@router.post("/{devotional_id}/status")
async def change_devotional_status(
    devotional_id: str,
    data: DevotionalStatusUpdate,
    approver: Member = Depends(devotional_approver),
    db: AsyncSession = Depends(get_db)
):
    devotional = await _get_own(db, approver.church_id, devotional_id)
    devotional.status = data.status
    if data.status == DevotionalStatus.PUBLISHED.value:
        devotional.published_at = utcnow()
    await db.commit()

    logger.info(f"Devocional {devotional.id} -> {data.status} por {approver.email}")
    return await _devotional_view(db, devotional, approver)


@router.post("/{devotional_id}/like")
async def toggle_like(
    devotional_id: str,
    member: Member = Depends(get_active_member),
    db: AsyncSession = Depends(get_db)
):
    """Curte ou descurte; retorna o novo estado e o total"""
    devotional = await _get_visible(db, member, devotional_id)

    existing = (await db.execute(
        select(DevotionalLike).where(
            DevotionalLike.devotional_id == devotional.id,
            DevotionalLike.member_id == member.id
        )
    )).scalar_one_or_none()

    if existing:
        await db.delete(existing)
        liked = False
    else:
        db.add(DevotionalLike(devotional_id=devotional.id, member_id=member.id))
        liked = True
    await db.flush()

    count = (await db.execute(
        select(func.count(DevotionalLike.id)).where(DevotionalLike.devotional_id == devotional.id)
    )).scalar() or 0
    await db.commit()

    return {"liked": liked, "like_count": count}


@router.get("/{devotional_id}/comments")
async def list_comments(
    devotional_id: str,
    member: Member = Depends(get_active_member),
    db: AsyncSession = Depends(get_db)
):
    devotional = await _get_visible(db, member, devotional_id)
    result = await db.execute(
        select(DevotionalComment)
        .where(DevotionalComment.devotional_id == devotional.id)
        .order_by(DevotionalComment.created_at)
    )
    return [c.to_dict() for c in result.scalars().all()]


@router.post("/{devotional_id}/comments", status_code=status.HTTP_201_CREATED)
async def add_comment(
    devotional_id: str,
    data: CommentCreate,
    member: Member = Depends(get_active_member),
    db: AsyncSession = Depends(get_db)
):
    devotional = await _get_visible(db, member, devotional_id)
    comment = DevotionalComment(
        devotional_id=devotional.id,
        member_id=member.id,
        member_name=member.full_name,
        content=data.content
    )
    db.add(comment)
    await db.commit()
    return comment.to_dict()
