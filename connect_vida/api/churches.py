"""
Connect Vida - Churches API
Cadastro público de igrejas, configurações e igrejas filhas
"""
import logging

from fastapi import APIRouter, Depends, HTTPException, status, Request
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select

from connect_vida.core.clock import utcnow
from connect_vida.database import get_db
from connect_vida.models import Church, ChurchStatus, Member, MemberRole, MemberStatus, SubscriptionPlan
from connect_vida.schemas import ChurchRegisterRequest, ChurchUpdate, ChildChurchCreate
from connect_vida.core.config import settings
from connect_vida.core.permissions import PermissionId
from connect_vida.core.updates import apply_changes
from connect_vida.core.rate_limit import limiter
from connect_vida.api.auth import get_token_claims, require_permission

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/churches", tags=["Churches"])


async def get_entry_plan(db: AsyncSession):
    """Plano ativo mais barato (usado no período de teste)"""
    result = await db.execute(
        select(SubscriptionPlan)
        .where(SubscriptionPlan.is_active == True)
        .order_by(SubscriptionPlan.monthly_price)
    )
    return result.scalars().first()


@router.post("/register", status_code=status.HTTP_201_CREATED)
@limiter.limit(settings.PUBLIC_RATE_LIMIT)
async def register_church(
    request: Request,
    data: ChurchRegisterRequest,
    claims: dict = Depends(get_token_claims),
    db: AsyncSession = Depends(get_db)
):
    """
    Cadastro público de igreja.
    Cria a igreja em período de teste e o primeiro membro como admin ativo.
    O usuário vem do token já emitido pelo provedor de autenticação.
    """
    user_id = claims["sub"]
    existing = await db.get(Member, user_id)
    if existing:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Usuário já vinculado a uma igreja"
        )

    plan = await get_entry_plan(db)

    church = Church(
        name=data.name,
        cnpj=data.cnpj,
        address=data.address,
        contact_email=data.contact_email,
        contact_phone=data.contact_phone,
        plan_id=plan.id if plan else None,
        member_limit=plan.member_limit if plan else None,
        monthly_fee=plan.monthly_price if plan else 0,
        status=ChurchStatus.TRIAL.value,
        current_members=1,
        payment_history=[],
        last_payment_status="N/A"
    )
    db.add(church)
    await db.flush()

    admin = Member(
        id=user_id,
        church_id=church.id,
        full_name=data.admin_full_name,
        email=data.admin_email,
        phone=data.admin_phone,
        birth_date=data.admin_birth_date,
        address=data.admin_address,
        role=MemberRole.ADMIN.value,
        status=MemberStatus.ACTIVE.value,
        profile_completed=True,
        approved_at=utcnow()
    )
    db.add(admin)
    await db.commit()

    logger.info(f"Igreja registrada: {church.name} ({church.id}) por {data.admin_email}")

    return {
        "church": church.to_dict(),
        "member": admin.to_dict()
    }


@router.get("/current")
async def get_current_church(
    member: Member = Depends(require_permission(PermissionId.SYSTEM_SETTINGS.value)),
    db: AsyncSession = Depends(get_db)
):
    church = await db.get(Church, member.church_id)
    if not church:
        raise HTTPException(status_code=404, detail="Igreja não encontrada")
    return church.to_dict()


@router.put("/current")
async def update_current_church(
    data: ChurchUpdate,
    member: Member = Depends(require_permission(PermissionId.SYSTEM_SETTINGS.value)),
    db: AsyncSession = Depends(get_db)
):
    church = await db.get(Church, member.church_id)
    if not church:
        raise HTTPException(status_code=404, detail="Igreja não encontrada")

    apply_changes(church, data.model_dump(exclude_unset=True))

    await db.commit()
    logger.info(f"Configurações da igreja {church.id} atualizadas por {member.email}")
    return church.to_dict()


@router.get("/current/children")
async def list_child_churches(
    member: Member = Depends(require_permission(PermissionId.SYSTEM_SETTINGS.value)),
    db: AsyncSession = Depends(get_db)
):
    result = await db.execute(
        select(Church)
        .where(Church.parent_church_id == member.church_id)
        .order_by(Church.name)
    )
    return [c.to_dict() for c in result.scalars().all()]


@router.post("/current/children", status_code=status.HTTP_201_CREATED)
async def create_child_church(
    data: ChildChurchCreate,
    member: Member = Depends(require_permission(PermissionId.SYSTEM_SETTINGS.value)),
    db: AsyncSession = Depends(get_db)
):
    """Cria igreja filha: herda o plano da igreja mãe"""
    parent = await db.get(Church, member.church_id)
    if not parent:
        raise HTTPException(status_code=404, detail="Igreja não encontrada")

    child = Church(
        **data.model_dump(),
        parent_church_id=parent.id,
        plan_id=parent.plan_id,
        member_limit=parent.member_limit,
        status=parent.status,
        current_members=0,
        monthly_fee=0,
        payment_history=[],
        last_payment_status="N/A"
    )
    db.add(child)
    await db.commit()

    logger.info(f"Igreja filha {child.name} criada sob {parent.id}")
    return child.to_dict()


@router.get("/{church_id}/public")
async def get_public_church(church_id: str, db: AsyncSession = Depends(get_db)):
    """Dados públicos usados no link de cadastro de membros"""
    church = await db.get(Church, church_id)
    if not church or church.status == ChurchStatus.INACTIVE.value:
        raise HTTPException(status_code=404, detail="Igreja não encontrada")
    return church.to_public_dict()
