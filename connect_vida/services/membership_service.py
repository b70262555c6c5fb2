"""
Servico de Membresia
Contagem de membros ativos e limite do plano da igreja
"""
import logging

from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession

from connect_vida.models import Church, Member, MemberStatus

logger = logging.getLogger(__name__)


class MemberLimitReached(Exception):
    pass


async def count_active_members(db: AsyncSession, church_id: str) -> int:
    result = await db.execute(
        select(func.count(Member.id)).where(
            Member.church_id == church_id,
            Member.status == MemberStatus.ACTIVE.value
        )
    )
    return result.scalar() or 0


async def ensure_member_capacity(db: AsyncSession, church: Church):
    """Levanta MemberLimitReached quando o plano nao comporta mais um ativo"""
    active = await count_active_members(db, church.id)
    if not church.has_member_capacity(active):
        logger.warning(f"Limite de membros atingido na igreja {church.id} ({active}/{church.member_limit})")
        raise MemberLimitReached()


async def refresh_member_count(db: AsyncSession, church_id: str) -> int:
    """Recalcula current_members a partir dos membros ativos"""
    await db.flush()
    church = await db.get(Church, church_id)
    active = await count_active_members(db, church_id)
    if church is not None:
        church.current_members = active
    return active
