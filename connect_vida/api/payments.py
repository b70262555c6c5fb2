"""
Connect Vida - Payments API
Planos de assinatura e integração com o Asaas (PIX)

FLUXO DE PAGAMENTO:
1. Igreja escolhe o plano no frontend
2. Frontend chama POST /payments/pix
3. Backend cria cliente + cobrança PIX no Asaas e devolve o QR Code
4. Igreja paga
5. Asaas envia webhook para POST /payments/asaas/webhook
6. Backend registra o pagamento no histórico e renova o vencimento
"""
import logging
import traceback
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, status, Request, Header
from fastapi.responses import JSONResponse
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select

from connect_vida.database import get_db
from connect_vida.models import Church, Member, SubscriptionPlan
from connect_vida.schemas import PixChargeRequest
from connect_vida.core.config import settings
from connect_vida.core.rate_limit import limiter
from connect_vida.core.error_notifier import send_error_notification
from connect_vida.services.asaas_service import AsaasClient, AsaasError
from connect_vida.services.billing_service import apply_webhook_payment
from connect_vida.api.auth import get_active_member

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/payments", tags=["Payments"])

CONFIRMED_EVENTS = ("PAYMENT_CONFIRMED", "PAYMENT_RECEIVED")


# ============================================================
# INICIALIZAÇÃO DOS PLANOS
# ============================================================

DEFAULT_PLANS = [
    {"name": "0 a 100 Membros", "monthly_price": 49.90, "member_limit": 100, "quiz_limit_per_stage": 3, "storage_limit_mb": 1024, "sort_order": 1},
    {"name": "101 a 300 Membros", "monthly_price": 99.90, "member_limit": 300, "quiz_limit_per_stage": 5, "storage_limit_mb": 5120, "sort_order": 2},
    {"name": "301 a 500 Membros", "monthly_price": 149.90, "member_limit": 500, "quiz_limit_per_stage": 10, "storage_limit_mb": 10240, "sort_order": 3},
    {"name": "Ilimitado", "monthly_price": 249.90, "member_limit": None, "quiz_limit_per_stage": None, "storage_limit_mb": None, "sort_order": 4},
]


async def ensure_plans_exist(db: AsyncSession):
    """Garante que os planos padrão existam no banco"""
    for plan_data in DEFAULT_PLANS:
        result = await db.execute(
            select(SubscriptionPlan).where(SubscriptionPlan.name == plan_data["name"])
        )
        existing = result.scalar_one_or_none()

        if not existing:
            limit = plan_data["member_limit"]
            plan = SubscriptionPlan(
                name=plan_data["name"],
                description=f"Até {limit} membros ativos" if limit else "Membros ilimitados",
                monthly_price=plan_data["monthly_price"],
                member_limit=limit,
                quiz_limit_per_stage=plan_data["quiz_limit_per_stage"],
                storage_limit_mb=plan_data["storage_limit_mb"],
                sort_order=plan_data["sort_order"],
                is_active=True
            )
            db.add(plan)
            logger.info(f"Plano {plan_data['name']} criado")

    await db.commit()


def get_asaas_client() -> AsaasClient:
    """Dependency do cliente Asaas (substituível nos testes)"""
    return AsaasClient()


# ============================================================
# ENDPOINTS PÚBLICOS
# ============================================================

@router.get("/plans")
async def list_plans(db: AsyncSession = Depends(get_db)):
    """Lista planos ativos, do mais barato ao mais caro"""
    result = await db.execute(
        select(SubscriptionPlan)
        .where(SubscriptionPlan.is_active == True)
        .order_by(SubscriptionPlan.monthly_price)
    )
    return [plan.to_dict() for plan in result.scalars().all()]


@router.post("/pix")
@limiter.limit(settings.PUBLIC_RATE_LIMIT)
async def create_pix_charge(
    request: Request,
    data: PixChargeRequest,
    member: Member = Depends(get_active_member),
    client: AsaasClient = Depends(get_asaas_client)
):
    """
    Cria uma cobrança PIX no Asaas e retorna o QR Code.
    externalReference = igreja do membro (usado pelo webhook).
    """
    if not client.is_configured:
        return JSONResponse(status_code=500, content={"error": "Missing ASAAS_API_TOKEN secret"})

    if data.amount is None or data.amount <= 0:
        return JSONResponse(status_code=400, content={"error": "Invalid amount"})

    customer = data.customer
    if not customer or not customer.name or not customer.email or not customer.cellphone or not customer.taxId:
        return JSONResponse(
            status_code=400,
            content={"error": "Customer data is required for ASAAS (name, email, cellphone, taxId)"}
        )

    try:
        return await client.create_pix_charge(
            amount=data.amount,
            customer=customer.model_dump(),
            description=data.description,
            external_reference=member.church_id
        )
    except AsaasError as e:
        send_error_notification(
            error_type="GATEWAY_ERROR",
            error_message=e.error,
            error_details=str(e.details)[:2000],
            church_id=member.church_id,
            member_email=member.email,
            endpoint="/api/payments/pix"
        )
        return JSONResponse(status_code=e.status_code, content=e.to_dict())


# ============================================================
# WEBHOOK ASAAS
# ============================================================

@router.post("/asaas/webhook")
async def asaas_webhook(
    request: Request,
    asaas_access_token: Optional[str] = Header(None, alias="asaas-access-token"),
    db: AsyncSession = Depends(get_db)
):
    """
    Recebe notificações do Asaas.
    Apenas pagamentos confirmados alteram a igreja; demais eventos são ignorados.
    """
    if settings.ASAAS_WEBHOOK_TOKEN and asaas_access_token != settings.ASAAS_WEBHOOK_TOKEN:
        logger.warning("Webhook Asaas com token inválido")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Token do webhook inválido"
        )

    try:
        body = await request.json()
    except ValueError:
        return JSONResponse(status_code=400, content={"error": "Corpo inválido"})

    event = body.get("event") if isinstance(body, dict) else None
    payment = (body.get("payment") if isinstance(body, dict) else None) or {}

    logger.info(f"Webhook Asaas recebido: {event} - pagamento {payment.get('id')}")

    if event not in CONFIRMED_EVENTS:
        return {"status": "ignored", "event": event}

    try:
        church_id = payment.get("externalReference")
        if not church_id:
            raise ValueError("Pagamento sem externalReference")

        church = await db.get(Church, church_id)
        if church is None:
            raise ValueError(f"Igreja {church_id} não encontrada")

        applied = apply_webhook_payment(church, payment)
        await db.commit()

        return {
            "status": "processed" if applied else "duplicate",
            "church_id": church.id,
            "next_payment_date": church.next_payment_date.isoformat() if church.next_payment_date else None
        }

    except Exception as e:
        await db.rollback()
        logger.error(f"Erro ao processar webhook Asaas: {e}")
        send_error_notification(
            error_type="WEBHOOK_ERROR",
            error_message=str(e),
            error_details=traceback.format_exc(),
            endpoint="/api/payments/asaas/webhook",
            request_data={"event": event, "payment_id": payment.get("id")}
        )
        return JSONResponse(status_code=400, content={"error": str(e)})
