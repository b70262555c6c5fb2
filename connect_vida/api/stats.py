"""
Connect Vida - Statistics API
Painel inicial da igreja e resumo pessoal do membro
"""
from datetime import date
from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, func

from connect_vida.core.clock import utcnow
from connect_vida.database import get_db
from connect_vida.models import (
    Event,
    EventParticipant,
    FinancialTransaction,
    Member,
    MemberStatus,
    TransactionStatus,
    TransactionType,
    VocationalTest
)
from connect_vida.core.permissions import PermissionId, has_permission
from connect_vida.services import journey_service
from connect_vida.api.auth import get_active_member

router = APIRouter(prefix="/stats", tags=["Statistics"])


@router.get("/dashboard")
async def get_dashboard_stats(
    member: Member = Depends(get_active_member),
    db: AsyncSession = Depends(get_db)
):
    """Estatísticas da igreja do membro"""
    church_id = member.church_id

    # Membros ativos
    result = await db.execute(
        select(func.count(Member.id)).where(
            Member.church_id == church_id,
            Member.status == MemberStatus.ACTIVE.value
        )
    )
    active_members = result.scalar() or 0

    # Próximos eventos
    result = await db.execute(
        select(func.count(Event.id)).where(
            Event.church_id == church_id,
            Event.starts_at >= utcnow()
        )
    )
    upcoming_events = result.scalar() or 0

    # Entradas confirmadas no mês corrente
    month_start = date.today().replace(day=1)
    result = await db.execute(
        select(func.coalesce(func.sum(FinancialTransaction.amount), 0)).where(
            FinancialTransaction.church_id == church_id,
            FinancialTransaction.type == TransactionType.INFLOW.value,
            FinancialTransaction.status == TransactionStatus.CONFIRMED.value,
            FinancialTransaction.transaction_date >= month_start
        )
    )
    month_inflows = float(result.scalar() or 0)

    stats = {
        "active_members": active_members,
        "upcoming_events": upcoming_events,
        "month_inflows": round(month_inflows, 2),
        "pending_members": None,
        "pending_transactions": None
    }

    if has_permission(member, PermissionId.MEMBER_MANAGEMENT.value):
        result = await db.execute(
            select(func.count(Member.id)).where(
                Member.church_id == church_id,
                Member.status == MemberStatus.PENDING.value
            )
        )
        stats["pending_members"] = result.scalar() or 0

    if has_permission(member, PermissionId.FINANCIAL_PANEL.value):
        result = await db.execute(
            select(func.count(FinancialTransaction.id)).where(
                FinancialTransaction.church_id == church_id,
                FinancialTransaction.status == TransactionStatus.PENDING.value
            )
        )
        stats["pending_transactions"] = result.scalar() or 0

    return stats


@router.get("/personal")
async def get_personal_stats(
    member: Member = Depends(get_active_member),
    db: AsyncSession = Depends(get_db)
):
    journey = await journey_service.load_member_journey(db, member.church_id, member.id)

    result = await db.execute(
        select(func.count(EventParticipant.id)).where(EventParticipant.member_id == member.id)
    )
    event_registrations = result.scalar() or 0

    result = await db.execute(
        select(func.coalesce(func.sum(FinancialTransaction.amount), 0)).where(
            FinancialTransaction.church_id == member.church_id,
            FinancialTransaction.member_id == member.id,
            FinancialTransaction.type == TransactionType.INFLOW.value,
            FinancialTransaction.status == TransactionStatus.CONFIRMED.value
        )
    )
    contributions_total = float(result.scalar() or 0)

    result = await db.execute(
        select(VocationalTest.recommended_ministry)
        .where(VocationalTest.member_id == member.id, VocationalTest.is_latest == True)  # noqa: E712
        .order_by(VocationalTest.created_at.desc())
    )
    recommended = result.scalars().first()

    return {
        "journey_progress": journey["overall_progress"],
        "journey_level": journey["current_level"],
        "event_registrations": event_registrations,
        "contributions_total": round(contributions_total, 2),
        "recommended_ministry": recommended
    }
