"""
Connect Vida - Master Admin API
Console do administrador master: igrejas, assinaturas, histórico de pagamentos e planos
"""
import logging
from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, status, Query
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, func, or_, update, delete

from connect_vida.database import get_db
from connect_vida.models import Church, ChurchStatus, Member, MemberStatus, SubscriptionPlan
from connect_vida.schemas import (
    MasterChurchCreate,
    SubscriptionUpdate,
    PaymentRecordCreate,
    PaymentRecordUpdate,
    PlanCreate,
    PlanUpdate
)
from connect_vida.services.billing_service import (
    BillingError,
    add_payment_record,
    edit_payment_record,
    delete_payment_record
)
from connect_vida.core.updates import apply_changes
from connect_vida.api.auth import require_master_admin

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/master-admin", tags=["Master Admin"])

VALID_CHURCH_STATUS = [s.value for s in ChurchStatus]


async def _get_church(db: AsyncSession, church_id: str) -> Church:
    church = await db.get(Church, church_id)
    if not church:
        raise HTTPException(status_code=404, detail="Igreja não encontrada")
    return church


async def _get_plan(db: AsyncSession, plan_id: str) -> SubscriptionPlan:
    plan = await db.get(SubscriptionPlan, plan_id)
    if not plan:
        raise HTTPException(status_code=404, detail="Plano não encontrado")
    return plan


# ============================================================
# IGREJAS
# ============================================================

@router.get("/churches")
async def list_churches(
    search: Optional[str] = None,
    status_filter: Optional[str] = Query(None, alias="status"),
    admin: Member = Depends(require_master_admin),
    db: AsyncSession = Depends(get_db)
):
    """Lista todas as igrejas com plano, membros e cobrança"""
    query = select(Church, SubscriptionPlan.name).outerjoin(
        SubscriptionPlan, SubscriptionPlan.id == Church.plan_id
    )

    if search:
        search_filter = f"%{search}%"
        query = query.where(or_(
            Church.name.ilike(search_filter),
            Church.contact_email.ilike(search_filter)
        ))

    if status_filter:
        query = query.where(Church.status == status_filter)

    query = query.order_by(Church.created_at.desc())
    rows = (await db.execute(query)).all()

    counts_result = await db.execute(
        select(Member.church_id, func.count(Member.id))
        .where(Member.status == MemberStatus.ACTIVE.value)
        .group_by(Member.church_id)
    )
    counts = dict(counts_result.all())

    return [
        {
            **church.to_dict(),
            "plan_name": plan_name,
            "member_count": counts.get(church.id, 0),
            "is_overdue": church.is_overdue()
        }
        for church, plan_name in rows
    ]


@router.post("/churches", status_code=status.HTTP_201_CREATED)
async def create_church(
    data: MasterChurchCreate,
    admin: Member = Depends(require_master_admin),
    db: AsyncSession = Depends(get_db)
):
    if data.status not in VALID_CHURCH_STATUS:
        raise HTTPException(status_code=400, detail=f"Status inválido. Use: {', '.join(VALID_CHURCH_STATUS)}")

    plan = await _get_plan(db, data.plan_id) if data.plan_id else None
    if data.parent_church_id:
        await _get_church(db, data.parent_church_id)

    church = Church(
        name=data.name,
        cnpj=data.cnpj,
        address=data.address,
        contact_email=data.contact_email,
        contact_phone=data.contact_phone,
        parent_church_id=data.parent_church_id,
        plan_id=plan.id if plan else None,
        member_limit=plan.member_limit if plan else None,
        monthly_fee=data.monthly_fee if data.monthly_fee is not None else (plan.monthly_price if plan else 0),
        status=data.status,
        current_members=0,
        payment_history=[],
        last_payment_status="N/A"
    )
    db.add(church)
    await db.commit()

    logger.info(f"Igreja {church.name} criada pelo master admin {admin.email}")
    return church.to_dict()


@router.put("/churches/{church_id}/subscription")
async def update_subscription(
    church_id: str,
    data: SubscriptionUpdate,
    admin: Member = Depends(require_master_admin),
    db: AsyncSession = Depends(get_db)
):
    """Altera plano, status, mensalidade e vencimento"""
    church = await _get_church(db, church_id)
    changes = data.model_dump(exclude_unset=True)

    if "status" in changes and changes["status"] not in VALID_CHURCH_STATUS:
        raise HTTPException(status_code=400, detail=f"Status inválido. Use: {', '.join(VALID_CHURCH_STATUS)}")

    if changes.get("plan_id"):
        plan = await _get_plan(db, changes["plan_id"])
        church.plan_id = plan.id
        # Limite acompanha o plano, salvo quando informado
        if "member_limit" not in changes:
            church.member_limit = plan.member_limit
        if "monthly_fee" not in changes:
            church.monthly_fee = plan.monthly_price

    apply_changes(church, changes, fields=("member_limit", "status", "monthly_fee", "next_payment_date"))

    await db.commit()
    logger.info(f"Assinatura da igreja {church.id} atualizada: {changes}")
    return church.to_dict()


@router.delete("/churches/{church_id}")
async def delete_church(
    church_id: str,
    admin: Member = Depends(require_master_admin),
    db: AsyncSession = Depends(get_db)
):
    """Exclui a igreja e seus membros; igrejas filhas são desvinculadas"""
    church = await _get_church(db, church_id)
    if church.id == admin.church_id:
        raise HTTPException(status_code=400, detail="Não é possível excluir a própria igreja")

    await db.execute(
        update(Church).where(Church.parent_church_id == church.id).values(parent_church_id=None)
    )
    await db.execute(delete(Member).where(Member.church_id == church.id))
    await db.delete(church)
    await db.commit()

    logger.info(f"Igreja {church_id} excluída pelo master admin {admin.email}")
    return {"message": "Igreja excluída com sucesso"}


# ============================================================
# HISTÓRICO DE PAGAMENTOS
# ============================================================

@router.post("/churches/{church_id}/payments", status_code=status.HTTP_201_CREATED)
async def add_payment(
    church_id: str,
    data: PaymentRecordCreate,
    admin: Member = Depends(require_master_admin),
    db: AsyncSession = Depends(get_db)
):
    church = await _get_church(db, church_id)
    try:
        record = add_payment_record(church, {**data.model_dump(), "recorded_by": admin.email})
    except BillingError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)

    await db.commit()
    return {"record": record, "church": church.to_dict()}


@router.put("/churches/{church_id}/payments/{record_id}")
async def edit_payment(
    church_id: str,
    record_id: str,
    data: PaymentRecordUpdate,
    admin: Member = Depends(require_master_admin),
    db: AsyncSession = Depends(get_db)
):
    church = await _get_church(db, church_id)
    try:
        record = edit_payment_record(church, record_id, data.model_dump(exclude_unset=True))
    except BillingError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)

    await db.commit()
    return {"record": record, "church": church.to_dict()}


@router.delete("/churches/{church_id}/payments/{record_id}")
async def delete_payment(
    church_id: str,
    record_id: str,
    admin: Member = Depends(require_master_admin),
    db: AsyncSession = Depends(get_db)
):
    church = await _get_church(db, church_id)
    try:
        delete_payment_record(church, record_id)
    except BillingError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)

    await db.commit()
    return {"church": church.to_dict()}


# ============================================================
# PLANOS
# ============================================================

@router.get("/plans")
async def list_all_plans(
    admin: Member = Depends(require_master_admin),
    db: AsyncSession = Depends(get_db)
):
    result = await db.execute(select(SubscriptionPlan).order_by(SubscriptionPlan.sort_order))
    return [plan.to_dict() for plan in result.scalars().all()]


@router.post("/plans", status_code=status.HTTP_201_CREATED)
async def create_plan(
    data: PlanCreate,
    admin: Member = Depends(require_master_admin),
    db: AsyncSession = Depends(get_db)
):
    existing = await db.execute(select(SubscriptionPlan).where(SubscriptionPlan.name == data.name))
    if existing.scalar_one_or_none():
        raise HTTPException(status_code=409, detail="Já existe um plano com este nome")

    plan = SubscriptionPlan(**data.model_dump(), is_active=True)
    db.add(plan)
    await db.commit()

    logger.info(f"Plano {plan.name} criado")
    return plan.to_dict()


@router.put("/plans/{plan_id}")
async def update_plan(
    plan_id: str,
    data: PlanUpdate,
    admin: Member = Depends(require_master_admin),
    db: AsyncSession = Depends(get_db)
):
    plan = await _get_plan(db, plan_id)
    apply_changes(plan, data.model_dump(exclude_unset=True))
    await db.commit()
    return plan.to_dict()


@router.delete("/plans/{plan_id}")
async def deactivate_plan(
    plan_id: str,
    admin: Member = Depends(require_master_admin),
    db: AsyncSession = Depends(get_db)
):
    """Desativa o plano (igrejas existentes mantêm a assinatura)"""
    plan = await _get_plan(db, plan_id)
    plan.is_active = False
    await db.commit()

    logger.info(f"Plano {plan.name} desativado")
    return {"message": "Plano desativado"}


# ============================================================
# VISÃO GERAL
# ============================================================

@router.get("/overview")
async def overview(
    admin: Member = Depends(require_master_admin),
    db: AsyncSession = Depends(get_db)
):
    """Totais do SaaS"""
    by_status_result = await db.execute(
        select(Church.status, func.count(Church.id)).group_by(Church.status)
    )
    by_status = {s: 0 for s in VALID_CHURCH_STATUS}
    by_status.update(dict(by_status_result.all()))

    active_members = (await db.execute(
        select(func.count(Member.id)).where(Member.status == MemberStatus.ACTIVE.value)
    )).scalar() or 0

    mrr = (await db.execute(
        select(func.coalesce(func.sum(Church.monthly_fee), 0))
        .where(Church.status == ChurchStatus.ACTIVE.value)
    )).scalar() or 0

    overdue = (await db.execute(
        select(func.count(Church.id)).where(
            Church.next_payment_date.isnot(None),
            Church.next_payment_date < date.today()
        )
    )).scalar() or 0

    return {
        "churches": {
            "total": sum(by_status.values()),
            "by_status": by_status
        },
        "active_members": active_members,
        "monthly_recurring_revenue": round(float(mrr), 2),
        "overdue_churches": overdue
    }
